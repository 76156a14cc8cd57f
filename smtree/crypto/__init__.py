"""
Cryptographic primitives for smtree.

This module provides:
- Hashing functions (SHA-256, Keccak-256, Poseidon)
- Hex helpers for digests
- The pluggable hasher capability consumed by the tree

SHA-256 and Keccak-256 are general-purpose byte hashers. Poseidon is the
default because it is ZK-friendly: roots can be re-derived inside circuits.
"""

import hashlib

from Crypto.Hash import keccak


# =============================================================================
# Hashing
# =============================================================================


def sha256(data: bytes) -> bytes:
    """Compute SHA-256 hash."""
    return hashlib.sha256(data).digest()


def keccak256(data: bytes) -> bytes:
    """Compute Keccak-256 hash (Ethereum-style)."""
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Utility Functions
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


from smtree.crypto.poseidon import (
    poseidon_hash,
    poseidon2,
    poseidon_bytes,
    int_to_bytes32,
    bytes32_to_int,
    FIELD_PRIME,
)
from smtree.crypto.hashers import (
    LeafableHasher,
    Sha256Hasher,
    Keccak256Hasher,
    PoseidonHasher,
    HASHERS,
    get_hasher,
)
