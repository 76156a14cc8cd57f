"""
Leaf hashers: the digest capability the tree is generic over.

A hasher bundles three things the tree needs and nothing else:
- hash_leaf: leaf value -> digest
- two_to_one: (left, right) -> parent digest
- default_digest: the all-zero digest used for dummy proofs

Any object with these methods plugs into MerkleTree; no base class is
required.
"""

from typing import Callable, Dict, Protocol, Type, Union, runtime_checkable

from smtree.core.errors import UnknownHasherError
from smtree.crypto import keccak256, sha256
from smtree.crypto.poseidon import (
    DOMAIN_LEAF,
    DOMAIN_NODE,
    FIELD_PRIME,
    bytes32_to_int,
    int_to_bytes32,
    poseidon2,
    poseidon_bytes,
    poseidon_hash,
)

LeafValue = Union[bytes, str, int]

# Domain prefixes for byte hashers
LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"

# Leaf value type tags
TAG_BYTES = b"b"
TAG_STR = b"s"
TAG_INT = b"i"


@runtime_checkable
class LeafableHasher(Protocol):
    """Hash capability consumed by the tree and proofs."""

    name: str
    digest_size: int

    def hash_leaf(self, value: LeafValue) -> bytes:
        ...

    def two_to_one(self, left: bytes, right: bytes) -> bytes:
        ...

    def default_digest(self) -> bytes:
        ...

    def empty_leaf_hash(self) -> bytes:
        ...


def leaf_to_bytes(value: LeafValue) -> bytes:
    """
    Canonical byte encoding of a leaf value.

    A one-byte type tag comes first so values of different types never
    share an encoding: bytes as is, str as UTF-8, int as 32 bytes big-endian.
    """
    if isinstance(value, (bytes, bytearray)):
        return TAG_BYTES + bytes(value)
    if isinstance(value, str):
        return TAG_STR + value.encode("utf-8")
    if isinstance(value, int):
        if value < 0 or value >= 2**256:
            raise ValueError(f"Integer leaf must be in [0, 2^256), got {value}")
        return TAG_INT + value.to_bytes(32, byteorder="big")
    raise TypeError(f"Unsupported leaf type: {type(value).__name__}")


class _ByteHasher:
    """Hasher over a plain bytes -> 32-byte digest function."""

    name = ""
    digest_size = 32
    _fn: Callable[[bytes], bytes]

    def hash_leaf(self, value: LeafValue) -> bytes:
        return self._fn(LEAF_PREFIX + leaf_to_bytes(value))

    def two_to_one(self, left: bytes, right: bytes) -> bytes:
        return self._fn(NODE_PREFIX + left + right)

    def default_digest(self) -> bytes:
        return bytes(self.digest_size)

    def empty_leaf_hash(self) -> bytes:
        return self.hash_leaf(b"")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Sha256Hasher(_ByteHasher):
    name = "sha256"
    _fn = staticmethod(sha256)


class Keccak256Hasher(_ByteHasher):
    name = "keccak256"
    _fn = staticmethod(keccak256)


class PoseidonHasher:
    """
    Poseidon over BN254, digests are 32-byte big-endian field elements.

    Integer leaves below the field prime are hashed as a single field
    element; everything else goes through the byte-chunking sponge.
    """

    name = "poseidon"
    digest_size = 32

    def hash_leaf(self, value: LeafValue) -> bytes:
        if isinstance(value, int) and 0 <= value < FIELD_PRIME:
            return int_to_bytes32(poseidon_hash([value], DOMAIN_LEAF))
        return int_to_bytes32(poseidon_bytes(leaf_to_bytes(value), DOMAIN_LEAF))

    def two_to_one(self, left: bytes, right: bytes) -> bytes:
        return int_to_bytes32(
            poseidon2(bytes32_to_int(left), bytes32_to_int(right), DOMAIN_NODE)
        )

    def default_digest(self) -> bytes:
        return bytes(self.digest_size)

    def empty_leaf_hash(self) -> bytes:
        return self.hash_leaf(b"")

    def __repr__(self) -> str:
        return "PoseidonHasher()"


HASHERS: Dict[str, Type] = {
    Sha256Hasher.name: Sha256Hasher,
    Keccak256Hasher.name: Keccak256Hasher,
    PoseidonHasher.name: PoseidonHasher,
}


def get_hasher(name: str) -> LeafableHasher:
    """
    Instantiate a bundled hasher by name.

    Raises:
        UnknownHasherError: If no hasher is registered under that name
    """
    try:
        return HASHERS[name.lower()]()
    except KeyError:
        raise UnknownHasherError(
            f"Unknown hasher '{name}', expected one of {sorted(HASHERS)}"
        ) from None
