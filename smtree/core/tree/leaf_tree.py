"""
Sparse Merkle tree that also keeps leaf values.

MerkleTree only deals in digests and bit sequences. This wrapper owns the
hasher and the node store, accepts integer leaf indices, remembers every
leaf value written and every root produced.
"""

from typing import Dict, Iterator, List, Optional, Tuple

from smtree.core.errors import IndexOutOfRangeError
from smtree.core.storage import NodeStore
from smtree.core.tree.bits import usize_le_bits
from smtree.core.tree.merkle_tree import MerkleTree
from smtree.core.tree.proof import MerkleProof
from smtree.crypto.hashers import LeafableHasher, LeafValue, PoseidonHasher
from smtree.utils.validation import validate_leaf_index


class SparseMerkleTreeWithLeaves:
    """
    Integer-indexed sparse Merkle tree with stored leaves.

    Attributes:
        tree: Underlying path-keyed tree
        node_store: Append-only node store (may be shared)
        root_history: Every root produced, oldest first
    """

    def __init__(
        self,
        height: int,
        hasher: Optional[LeafableHasher] = None,
        node_store: Optional[NodeStore] = None,
        empty_leaf_hash: Optional[bytes] = None,
    ):
        self.hasher = hasher if hasher is not None else PoseidonHasher()
        self.node_store = node_store if node_store is not None else NodeStore()
        if empty_leaf_hash is None:
            empty_leaf_hash = self.hasher.empty_leaf_hash()

        self.tree = MerkleTree(self.node_store, height, empty_leaf_hash, self.hasher)
        self._leaves: Dict[int, LeafValue] = {}
        self.root_history: List[bytes] = [self.tree.get_root()]

    @property
    def height(self) -> int:
        return self.tree.height

    def _index_bits(self, index: int) -> List[bool]:
        ok, err = validate_leaf_index(index, self.height)
        if not ok:
            raise IndexOutOfRangeError(err)
        return usize_le_bits(index, self.height)

    def update(self, index: int, leaf: LeafValue) -> bytes:
        """
        Write leaf at index.

        Returns:
            The new root
        """
        index_bits = self._index_bits(index)
        root = self.tree.update_leaf(self.node_store, index_bits, self.hasher.hash_leaf(leaf))
        self._leaves[index] = leaf
        self.root_history.append(root)
        return root

    def get_leaf(self, index: int) -> Optional[LeafValue]:
        return self._leaves.get(index)

    def get_root(self) -> bytes:
        return self.tree.get_root()

    def prove(self, index: int) -> MerkleProof:
        return self.tree.prove(self._index_bits(index))

    def prove_with_given_root(self, root: bytes, index: int) -> MerkleProof:
        return self.tree.prove_with_given_root(self.node_store, root, self._index_bits(index))

    def verify(self, index: int, leaf: LeafValue, root: bytes, proof: MerkleProof) -> bool:
        """True if proof shows leaf at index under root."""
        return proof.is_valid(leaf, self._index_bits(index), root, self.hasher)

    def leaves(self) -> Iterator[Tuple[int, LeafValue]]:
        """Written leaves in index order."""
        for index in sorted(self._leaves):
            yield index, self._leaves[index]

    def __len__(self) -> int:
        return len(self._leaves)

    def __contains__(self, index: int) -> bool:
        return index in self._leaves
