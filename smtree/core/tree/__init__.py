"""Sparse Merkle tree, proofs and bit-order helpers"""
from smtree.core.tree.bits import (
    Path,
    usize_le_bits,
    le_bits_to_usize,
    le_bits_to_path,
    path_to_le_bits,
    flip_last,
)
from smtree.core.tree.proof import MerkleProof, MerkleProofModel
from smtree.core.tree.merkle_tree import MerkleTree, build_zero_hashes
from smtree.core.tree.leaf_tree import SparseMerkleTreeWithLeaves

__all__ = [
    "Path",
    "usize_le_bits",
    "le_bits_to_usize",
    "le_bits_to_path",
    "path_to_le_bits",
    "flip_last",
    "MerkleProof",
    "MerkleProofModel",
    "MerkleTree",
    "build_zero_hashes",
    "SparseMerkleTreeWithLeaves",
]
