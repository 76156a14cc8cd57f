"""
Sparse Merkle Tree keyed by path.

Conceptual Background:
---------------------
A tree of height H has 2^H leaves, far too many to materialize. Almost all
of them hold the default (empty) leaf, and any subtree made only of empty
leaves has a hash that depends on its depth alone. We precompute those
"zero hashes" once and store explicitly only the nodes that differ.

Nodes are addressed by path: a big-endian tuple of bools, where path[0] is
the direction taken at the root and len(path) is the node's depth. The
effective hash of any node is

    node_hashes.get(path, zero_hashes[len(path)])

Callers address leaves with little-endian index bits (bit 0 = least
significant). These are reversed into a path before touching the tree.

History:
-------
node_hashes only reflects the latest state. Every parent computed by
update_leaf is also recorded in a NodeStore (digest -> children), which is
append-only, so a root observed earlier can still be re-expanded into a
proof after later updates overwrote its ancestors in node_hashes.

Properties:
----------
- update_leaf: O(H) combinations, O(H) map writes
- prove: O(H) lookups
- prove_with_given_root: O(H) store lookups
"""

from typing import Dict, List, Sequence

from smtree.core.errors import (
    EmptyPathError,
    InvalidDigestError,
    InvalidIndexLengthError,
    NodeNotFoundError,
    PathTooLongError,
)
from smtree.core.storage import Node, NodeStore
from smtree.core.tree.bits import Path, flip_last, le_bits_to_path
from smtree.core.tree.proof import MerkleProof
from smtree.crypto.hashers import LeafableHasher
from smtree.utils.logger import get_logger
from smtree.utils.validation import validate_bits, validate_path_length

logger = get_logger("tree")


# =============================================================================
# Zero Hashes
# =============================================================================


def build_zero_hashes(
    node_store: NodeStore,
    height: int,
    empty_leaf_hash: bytes,
    hasher: LeafableHasher,
) -> List[bytes]:
    """
    Hashes of all-empty subtrees, indexed by depth from the root.

    zero_hashes[height] is the empty leaf, zero_hashes[0] the root of an
    entirely empty tree. Each internal zero node is recorded in node_store
    so empty subtrees can be walked like any other.
    """
    h = empty_leaf_hash
    zero_hashes = [h]
    for _ in range(height):
        parent = hasher.two_to_one(h, h)
        node_store.insert(parent, Node(left=h, right=h))
        zero_hashes.append(parent)
        h = parent
    zero_hashes.reverse()
    return zero_hashes


# =============================================================================
# Merkle Tree
# =============================================================================


class MerkleTree:
    """
    Fixed-height sparse Merkle tree.

    Holds only non-default node hashes. The node store is passed to every
    operation that reads or writes it, so several trees can share one.

    Attributes:
        height: Number of levels below the root
        node_hashes: Non-default node hashes keyed by path
        hasher: Digest capability (leaf hash, two-to-one, default)
    """

    def __init__(
        self,
        node_store: NodeStore,
        height: int,
        empty_leaf_hash: bytes,
        hasher: LeafableHasher,
    ):
        self.height = height
        self.hasher = hasher
        self.node_hashes: Dict[Path, bytes] = {}
        self._zero_hashes = build_zero_hashes(node_store, height, empty_leaf_hash, hasher)

        logger.info(
            f"MerkleTree initialized: height={height}, hasher={getattr(hasher, 'name', hasher)}, "
            f"empty root=0x{self._zero_hashes[0].hex()[:16]}..."
        )

    @property
    def zero_hashes(self) -> List[bytes]:
        return list(self._zero_hashes)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_node_hash(self, path: Sequence[bool]) -> bytes:
        """
        Effective hash of the node at path.

        Raises:
            PathTooLongError: If path is deeper than the leaves
        """
        ok, err = validate_path_length(path, self.height)
        if not ok:
            raise PathTooLongError(err)

        key = tuple(bool(b) for b in path)
        h = self.node_hashes.get(key)
        if h is None:
            return self._zero_hashes[len(key)]
        return h

    def get_root(self) -> bytes:
        return self.get_node_hash(())

    def get_sibling_hash(self, path: Sequence[bool]) -> bytes:
        """
        Hash of the node sharing path's parent.

        Raises:
            EmptyPathError: For the root path
        """
        if not path:
            raise EmptyPathError("the root has no sibling")
        return self.get_node_hash(flip_last(path))

    def _path_from_index_bits(self, index_bits: Sequence[bool]) -> Path:
        ok, err = validate_bits(index_bits, "index_bits", self.height)
        if not ok:
            raise InvalidIndexLengthError(err)
        return le_bits_to_path(index_bits)

    # =========================================================================
    # Update
    # =========================================================================

    def update_leaf(
        self,
        node_store: NodeStore,
        index_bits: Sequence[bool],
        leaf_hash: bytes,
    ) -> bytes:
        """
        Set the leaf at index_bits and recompute its ancestors.

        Args:
            node_store: Store receiving the leaf record and new parents
            index_bits: Little-endian leaf index, length == height
            leaf_hash: Digest of the new leaf content

        Returns:
            The new root

        Raises:
            InvalidIndexLengthError: If index_bits has the wrong length
        """
        path = list(self._path_from_index_bits(index_bits))

        h = leaf_hash
        self.node_hashes[tuple(path)] = h
        node_store.insert(h, Node())

        while path:
            sibling = self.get_sibling_hash(path)
            is_right = path.pop()
            if is_right:
                node = Node(left=sibling, right=h)
            else:
                node = Node(left=h, right=sibling)
            h = self.hasher.two_to_one(node.left, node.right)
            self.node_hashes[tuple(path)] = h
            node_store.insert(h, node)

        logger.debug(f"Leaf updated, new root 0x{h.hex()[:16]}...")
        return h

    # =========================================================================
    # Proofs
    # =========================================================================

    def prove(self, index_bits: Sequence[bool]) -> MerkleProof:
        """
        Proof for the leaf at index_bits against the current root.

        Raises:
            InvalidIndexLengthError: If index_bits has the wrong length
        """
        path = list(self._path_from_index_bits(index_bits))

        siblings = []
        while path:
            siblings.append(self.get_sibling_hash(path))
            path.pop()
        return MerkleProof(siblings=siblings)

    def prove_with_given_root(
        self,
        node_store: NodeStore,
        root: bytes,
        index_bits: Sequence[bool],
    ) -> MerkleProof:
        """
        Proof for the leaf at index_bits against an earlier root.

        Walks node_store from root down, so the live node_hashes are not
        consulted at all. Works for any root this tree (or another tree
        writing to the same store) ever produced.

        Raises:
            InvalidDigestError: If root is not bytes
            InvalidIndexLengthError: If index_bits has the wrong length
            NodeNotFoundError: If a node on the walk is missing from the store
        """
        if not isinstance(root, (bytes, bytearray)):
            raise InvalidDigestError(f"root must be bytes, got {type(root).__name__}")
        root = bytes(root)
        path = self._path_from_index_bits(index_bits)

        siblings = []
        h = root
        for depth, bit in enumerate(path):
            node = node_store.get(h)
            if node is None or node.is_leaf:
                logger.error(
                    f"Cannot expand node 0x{h.hex()[:16]}... at depth {depth} "
                    f"from root 0x{root.hex()[:16]}..."
                )
                raise NodeNotFoundError(h, depth)
            siblings.append(node.sibling(bit))
            h = node.child(bit)

        siblings.reverse()
        return MerkleProof(siblings=siblings)
