"""
Node storage.

Provides the append-only digest -> children index that lets historical
roots be re-expanded after the live tree has moved on.
"""

from smtree.core.storage.node_store import Node, NodeStore

__all__ = ["Node", "NodeStore"]
