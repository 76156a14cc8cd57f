"""
Bit-order conversions.

Two orderings coexist and are easy to mix up:
- Leaf index bits are little-endian: bit 0 is the least significant bit of
  the index and chooses between siblings at the deepest level.
- Paths are big-endian: element 0 is the choice made at the root.

Reversing one gives the other. All conversions go through this module.
"""

from typing import List, Sequence, Tuple

Path = Tuple[bool, ...]


def usize_le_bits(num: int, length: int) -> List[bool]:
    """
    Little-endian bits of a non-negative integer, truncated/padded to length.

    >>> usize_le_bits(6, 4)
    [False, True, True, False]
    """
    if num < 0:
        raise ValueError(f"num must be non-negative, got {num}")
    return [bool((num >> i) & 1) for i in range(length)]


def le_bits_to_usize(bits: Sequence[bool]) -> int:
    """Inverse of usize_le_bits."""
    value = 0
    for i, b in enumerate(bits):
        if b:
            value |= 1 << i
    return value


def le_bits_to_path(index_bits: Sequence[bool]) -> Path:
    """Little-endian leaf index bits -> big-endian path."""
    return tuple(bool(b) for b in reversed(index_bits))


def path_to_le_bits(path: Sequence[bool]) -> List[bool]:
    """Big-endian path -> little-endian leaf index bits."""
    return [bool(b) for b in reversed(path)]


def flip_last(path: Sequence[bool]) -> Path:
    """Path of the sibling node (last direction inverted)."""
    if not path:
        raise ValueError("the root has no sibling")
    return tuple(path[:-1]) + (not path[-1],)
