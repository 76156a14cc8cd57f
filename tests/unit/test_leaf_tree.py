"""
Tests for SparseMerkleTreeWithLeaves (integer-indexed tree with stored leaves).
"""

import pytest

from smtree.core.errors import IndexOutOfRangeError, NodeNotFoundError
from smtree.core.storage import NodeStore
from smtree.core.tree import SparseMerkleTreeWithLeaves
from smtree.crypto import PoseidonHasher, Sha256Hasher


@pytest.fixture
def tree():
    return SparseMerkleTreeWithLeaves(height=8, hasher=Sha256Hasher())


class TestLeafStorage:

    def test_update_and_get(self, tree):
        tree.update(3, "three")
        assert tree.get_leaf(3) == "three"
        assert tree.get_leaf(4) is None
        assert 3 in tree
        assert len(tree) == 1

    def test_leaves_sorted(self, tree):
        for i in (9, 2, 5):
            tree.update(i, i)
        assert list(tree.leaves()) == [(2, 2), (5, 5), (9, 9)]

    def test_index_out_of_range(self, tree):
        with pytest.raises(IndexOutOfRangeError):
            tree.update(256, "x")
        with pytest.raises(IndexOutOfRangeError):
            tree.update(-1, "x")
        with pytest.raises(IndexOutOfRangeError):
            tree.prove(1 << 8)

    def test_default_hasher_is_poseidon(self):
        t = SparseMerkleTreeWithLeaves(height=2)
        assert isinstance(t.hasher, PoseidonHasher)
        assert t.height == 2

    def test_custom_empty_leaf(self):
        t = SparseMerkleTreeWithLeaves(height=2, hasher=Sha256Hasher(), empty_leaf_hash=bytes(32))
        assert t.tree.zero_hashes[2] == bytes(32)


class TestRoots:

    def test_update_returns_root(self, tree):
        root = tree.update(1, b"x")
        assert root == tree.get_root()

    def test_root_history(self, tree):
        empty = tree.get_root()
        r1 = tree.update(1, b"x")
        r2 = tree.update(2, b"y")
        assert tree.root_history == [empty, r1, r2]

    def test_verify(self, tree):
        tree.update(7, b"seven")
        root = tree.get_root()
        proof = tree.prove(7)
        assert tree.verify(7, b"seven", root, proof)
        assert not tree.verify(7, b"eight", root, proof)

    def test_every_historical_root_provable(self, tree):
        for i in range(6):
            tree.update(i * 3, f"v{i}")
        for step, root in enumerate(tree.root_history):
            # leaves 0..step-1 were written when this root was current
            for i in range(step):
                proof = tree.prove_with_given_root(root, i * 3)
                assert tree.verify(i * 3, f"v{i}", root, proof)

    def test_unknown_root(self, tree):
        with pytest.raises(NodeNotFoundError):
            tree.prove_with_given_root(b"\x11" * 32, 0)


class TestSharedStore:

    def test_two_trees_share_store(self):
        """A store shared by two trees can expand roots from either."""
        store = NodeStore()
        a = SparseMerkleTreeWithLeaves(height=4, hasher=Sha256Hasher(), node_store=store)
        b = SparseMerkleTreeWithLeaves(height=4, hasher=Sha256Hasher(), node_store=store)
        a.update(1, "a")
        b.update(2, "b")

        proof = a.prove_with_given_root(b.get_root(), 2)
        assert b.verify(2, "b", b.get_root(), proof)
