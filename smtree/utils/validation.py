"""
Input Validation - checks for caller-supplied tree inputs.

Every helper returns (is_valid, error_message) so callers decide which
error type to raise.
"""

import re
from typing import Any, Sequence, Tuple

# =============================================================================
# Constants
# =============================================================================

MIN_HEIGHT = 1
MAX_HEIGHT = 256

_HEX_RE = re.compile(r"^0[xX]([0-9a-fA-F]{2})*$")


# =============================================================================
# Validation Functions
# =============================================================================


def validate_height(height: Any) -> Tuple[bool, str]:
    """Validate a tree height."""
    if not isinstance(height, int) or isinstance(height, bool):
        return False, f"height must be int, got {type(height).__name__}"
    if height < MIN_HEIGHT or height > MAX_HEIGHT:
        return False, f"height must be in [{MIN_HEIGHT}, {MAX_HEIGHT}], got {height}"
    return True, ""


def validate_bits(bits: Sequence[Any], name: str, expected_length: int) -> Tuple[bool, str]:
    """
    Validate a bit sequence of exact length.

    Args:
        bits: Sequence of bools (ints 0/1 are accepted)
        name: Field name for error messages
        expected_length: Required length
    """
    if len(bits) != expected_length:
        return False, f"{name} must have length {expected_length}, got {len(bits)}"
    for i, b in enumerate(bits):
        if b not in (0, 1):
            return False, f"{name}[{i}] must be a bit, got {b!r}"
    return True, ""


def validate_path_length(path: Sequence[Any], height: int) -> Tuple[bool, str]:
    """Validate that a path fits within the tree."""
    if len(path) > height:
        return False, f"path length {len(path)} exceeds tree height {height}"
    return True, ""


def validate_leaf_index(index: Any, height: int) -> Tuple[bool, str]:
    """Validate an integer leaf index against the tree capacity."""
    if not isinstance(index, int) or isinstance(index, bool):
        return False, f"index must be int, got {type(index).__name__}"
    if index < 0 or index >= 1 << height:
        return False, f"index {index} out of range for height {height}"
    return True, ""


def validate_hex_digest(value: Any, name: str = "digest") -> Tuple[bool, str]:
    """Validate a 0x-prefixed, even-length hex string."""
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"
    if not _HEX_RE.match(value):
        return False, f"{name} must be 0x-prefixed even-length hex, got {value!r}"
    return True, ""
