"""
Poseidon hash over the BN254 scalar field.

Used as the default two-to-one combiner of the tree: it is cheap to prove in
arithmetic circuits, so roots and proofs produced here can be checked inside
a SNARK without switching hash functions.

References:
- Poseidon paper: https://eprint.iacr.org/2019/458

Parameters:
- Field: BN254 scalar field
- t=3 (capacity + 2 inputs)
- rounds_f=8 (full rounds), rounds_p=57 (partial rounds)
- alpha=5 (S-box exponent)
"""

import hashlib
from functools import lru_cache
from typing import List, Sequence, Tuple

# BN254 scalar field prime
FIELD_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

WIDTH = 3
ROUNDS_F = 8
ROUNDS_P = 57

# Capacity-element domain separators
DOMAIN_LEAF = 0x01
DOMAIN_NODE = 0x02

# 31 bytes always fit below the field prime
CHUNK_SIZE = 31


# =============================================================================
# Constants
# =============================================================================


@lru_cache(maxsize=None)
def _constants() -> Tuple[Tuple[int, ...], Tuple[Tuple[int, ...], ...]]:
    """
    Round constants (SHAKE256 stream reduced mod p) and a Cauchy MDS matrix.

    Computed once per process.
    """
    count = (ROUNDS_F + ROUNDS_P) * WIDTH
    stream = hashlib.shake_256(b"poseidon").digest(count * 32)
    round_constants = tuple(
        int.from_bytes(stream[i * 32:(i + 1) * 32], "big") % FIELD_PRIME
        for i in range(count)
    )

    xs = [i + 1 for i in range(WIDTH)]
    ys = [WIDTH + i + 1 for i in range(WIDTH)]
    mds = tuple(
        tuple(pow(x + y, FIELD_PRIME - 2, FIELD_PRIME) for y in ys)
        for x in xs
    )
    return round_constants, mds


# =============================================================================
# Permutation
# =============================================================================


def _permute(state: List[int]) -> List[int]:
    round_constants, mds = _constants()
    half_f = ROUNDS_F // 2

    for r in range(ROUNDS_F + ROUNDS_P):
        offset = r * WIDTH
        state = [(s + round_constants[offset + i]) % FIELD_PRIME for i, s in enumerate(state)]

        if r < half_f or r >= half_f + ROUNDS_P:
            state = [pow(s, 5, FIELD_PRIME) for s in state]
        else:
            state[0] = pow(state[0], 5, FIELD_PRIME)

        state = [
            sum(m * s for m, s in zip(row, state)) % FIELD_PRIME
            for row in mds
        ]
    return state


def poseidon_hash(inputs: Sequence[int], domain_sep: int = 0) -> int:
    """
    Hash up to two field elements.

    Args:
        inputs: Field elements (integers < FIELD_PRIME)
        domain_sep: Value placed in the capacity element

    Returns:
        Hash as a field element

    Raises:
        ValueError: If there are more than two inputs or one is out of range
    """
    if len(inputs) > WIDTH - 1:
        raise ValueError(f"Poseidon t=3 takes at most 2 inputs, got {len(inputs)}")
    for i, value in enumerate(inputs):
        if not 0 <= value < FIELD_PRIME:
            raise ValueError(f"Input {i} out of field range: {value}")

    padded = list(inputs) + [0] * (WIDTH - 1 - len(inputs))
    return _permute([domain_sep % FIELD_PRIME] + padded)[1]


def poseidon2(a: int, b: int, domain_sep: int = 0) -> int:
    """Hash two field elements."""
    return poseidon_hash([a, b], domain_sep)


def poseidon_bytes(data: bytes, domain_sep: int = 0) -> int:
    """
    Hash arbitrary bytes.

    Data is split into 31-byte big-endian chunks and absorbed one chunk at a
    time; the byte length is absorbed last so that trailing zero bytes change
    the result.
    """
    h = domain_sep % FIELD_PRIME
    for i in range(0, len(data), CHUNK_SIZE):
        h = poseidon2(h, int.from_bytes(data[i:i + CHUNK_SIZE], "big"))
    return poseidon2(h, len(data))


def int_to_bytes32(value: int) -> bytes:
    """Convert a field element to 32 big-endian bytes."""
    return value.to_bytes(32, byteorder="big")


def bytes32_to_int(data: bytes) -> int:
    """Convert 32 bytes to a field element."""
    if len(data) != 32:
        raise ValueError(f"Expected 32 bytes, got {len(data)}")
    value = int.from_bytes(data, byteorder="big")
    if value >= FIELD_PRIME:
        raise ValueError(f"Value {value} exceeds field prime")
    return value
