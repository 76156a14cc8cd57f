"""
smtree - Sparse Merkle Tree with historical proofs

A path-addressed sparse Merkle tree that:
- Stores only non-default nodes, deriving the rest from zero hashes
- Produces membership proofs against the live root
- Re-expands any previously observed root from an append-only node store
"""

from smtree.core.tree import (
    MerkleTree,
    MerkleProof,
    SparseMerkleTreeWithLeaves,
    usize_le_bits,
)
from smtree.core.storage import NodeStore, Node

__version__ = "0.1.0"

__all__ = [
    "MerkleTree",
    "MerkleProof",
    "SparseMerkleTreeWithLeaves",
    "NodeStore",
    "Node",
    "usize_le_bits",
]
