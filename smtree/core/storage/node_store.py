"""
Append-only node store.

Maps a node's digest to the pair of child digests that produced it. Every
internal node the tree ever computes is recorded here, including the
all-default subtrees created at construction. Leaves are recorded as nodes
without children.

Entries are never removed, and internal records are never replaced (a
childless leaf record may be upgraded to an internal one). A root digest
observed at any point in time therefore stays a valid entry point into an
immutable DAG, which is what prove_with_given_root walks.

Memory grows without bound; there is no eviction. Callers that need to cap
memory must snapshot and rebuild externally, accepting that roots older
than the snapshot can no longer be proven.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from smtree.utils.logger import get_logger

logger = get_logger("storage")


@dataclass(frozen=True)
class Node:
    """
    Children of a stored node.

    Attributes:
        left: Left child digest (None for a leaf record)
        right: Right child digest (None for a leaf record)
    """
    left: Optional[bytes] = None
    right: Optional[bytes] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def child(self, bit: bool) -> Optional[bytes]:
        """Child selected by a direction bit (True = right)."""
        return self.right if bit else self.left

    def sibling(self, bit: bool) -> Optional[bytes]:
        """Child NOT selected by a direction bit."""
        return self.left if bit else self.right


class NodeStore:
    """
    In-memory, append-only digest -> Node mapping.

    Not thread-safe; a single writer owns it.
    """

    def __init__(self):
        self._nodes: Dict[bytes, Node] = {}
        self.conflicts = 0

    def insert(self, key: bytes, node: Node) -> bool:
        """
        Record a node under its digest.

        Internal records are never replaced. A leaf record is upgraded when
        an internal node with the same digest arrives, so every internal
        node ever computed stays expandable; a later leaf record never
        downgrades an internal one. Two internal records with different
        children under one digest are logged and counted, first one wins.

        Returns:
            True if the entry was created or upgraded
        """
        existing = self._nodes.get(key)
        if existing is None:
            self._nodes[key] = node
            return True

        if existing.is_leaf and not node.is_leaf:
            self._nodes[key] = node
            return True

        if not existing.is_leaf and not node.is_leaf and existing != node:
            self.conflicts += 1
            logger.warning(
                f"Node 0x{key.hex()[:16]}... already stored with different children, "
                f"keeping original record"
            )
        return False

    def get(self, key: bytes) -> Optional[Node]:
        return self._nodes.get(key)

    def snapshot(self) -> Dict[bytes, Tuple[Optional[bytes], Optional[bytes]]]:
        """Plain-dict copy of the store contents."""
        return {k: (n.left, n.right) for k, n in self._nodes.items()}

    def __contains__(self, key: bytes) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._nodes)

    def __eq__(self, other) -> bool:
        if not isinstance(other, NodeStore):
            return NotImplemented
        return self._nodes == other._nodes

    def __repr__(self) -> str:
        return f"NodeStore(nodes={len(self._nodes)})"
