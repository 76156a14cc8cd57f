"""
Integration tests: proofs against roots that are no longer current.

Scenario (height 32, Poseidon):
1. Insert leaves 0..9, each leaf value i
2. Record root1
3. Insert leaves 10..19
4. Prove leaf 6 against root1 via the node store
"""

import pytest

from smtree.core.storage import NodeStore
from smtree.core.tree import MerkleTree, SparseMerkleTreeWithLeaves, usize_le_bits
from smtree.crypto import PoseidonHasher, Sha256Hasher

HEIGHT = 32


@pytest.fixture
def hasher():
    return PoseidonHasher()


class TestProveWithGivenRoot:

    def test_historical_root_scenario(self, hasher):
        store = NodeStore()
        tree = MerkleTree(store, HEIGHT, hasher.empty_leaf_hash(), hasher)

        for i in range(10):
            tree.update_leaf(store, usize_le_bits(i, HEIGHT), hasher.hash_leaf(i))
        root1 = tree.get_root()

        for i in range(10, 20):
            tree.update_leaf(store, usize_le_bits(i, HEIGHT), hasher.hash_leaf(i))
        assert tree.get_root() != root1

        index_bits = usize_le_bits(6, HEIGHT)
        proof = tree.prove_with_given_root(store, root1, index_bits)

        assert proof.height == HEIGHT
        assert proof.get_root(6, index_bits, hasher) == root1
        proof.verify(6, index_bits, root1, hasher)

        # the live proof no longer matches the old root
        assert not tree.prove(index_bits).is_valid(6, index_bits, root1, hasher)
        # but it matches the current one
        tree.prove(index_bits).verify(6, index_bits, tree.get_root(), hasher)

    def test_leaf_absent_at_historical_root(self, hasher):
        """Leaf 15 did not exist at root1: its historical proof shows an empty leaf."""
        tree = SparseMerkleTreeWithLeaves(height=HEIGHT, hasher=hasher)
        for i in range(10):
            tree.update(i, i)
        root1 = tree.get_root()
        for i in range(10, 20):
            tree.update(i, i)

        index_bits = usize_le_bits(15, HEIGHT)
        proof = tree.prove_with_given_root(root1, 15)
        assert proof.get_root_from_hash(hasher.empty_leaf_hash(), index_bits, hasher) == root1
        assert not tree.verify(15, 15, root1, proof)
        assert tree.verify(15, 15, tree.get_root(), tree.prove(15))

    def test_overwritten_leaf(self):
        """A value replaced later is still provable against the root it belonged to."""
        tree = SparseMerkleTreeWithLeaves(height=HEIGHT, hasher=Sha256Hasher())
        roots = []
        for version in range(5):
            roots.append(tree.update(42, f"v{version}"))
            tree.update(1000 + version, "noise")

        for version, root in enumerate(roots):
            proof = tree.prove_with_given_root(root, 42)
            assert tree.verify(42, f"v{version}", root, proof)
            for other in range(5):
                if other != version:
                    assert not tree.verify(42, f"v{other}", root, proof)

    def test_store_only_grows(self):
        tree = SparseMerkleTreeWithLeaves(height=HEIGHT, hasher=Sha256Hasher())
        sizes = [len(tree.node_store)]
        for i in range(10):
            tree.update(i % 3, i)
            sizes.append(len(tree.node_store))
        assert sizes == sorted(sizes)
        # every root ever produced is still expandable
        for root in tree.root_history:
            assert root in tree.node_store
