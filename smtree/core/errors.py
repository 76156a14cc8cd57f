"""
Error types for smtree.

Three families are kept apart because callers handle them differently:
- Contract violations: the caller passed malformed input (wrong bit length,
  path too long). These are programming errors and are never retried.
- Store inconsistency: a historical root cannot be re-expanded because the
  node store lacks a node on the walk.
- Verification mismatch: a proof does not reproduce the expected root.
"""

from typing import Optional


class SMTError(Exception):
    """Base class for all smtree errors."""


# =============================================================================
# Contract Violations
# =============================================================================


class ContractViolation(SMTError, ValueError):
    """Caller supplied input that breaks an operation's preconditions."""


class PathTooLongError(ContractViolation):
    """Path is longer than the tree height."""


class EmptyPathError(ContractViolation):
    """Operation needs a non-empty path (the root has no sibling)."""


class InvalidIndexLengthError(ContractViolation):
    """Leaf index bits do not match the tree height."""


class IndexOutOfRangeError(ContractViolation):
    """Integer leaf index does not fit in the tree."""


class InvalidDigestError(ContractViolation):
    """A digest argument is not bytes."""


# =============================================================================
# Store Inconsistency
# =============================================================================


class NodeNotFoundError(SMTError, LookupError):
    """
    A digest reached while walking from a root is not in the node store.

    Attributes:
        digest: The digest that could not be expanded
        depth: Depth (0 = root) at which the walk stopped
    """

    def __init__(self, digest: bytes, depth: int, message: Optional[str] = None):
        self.digest = digest
        self.depth = depth
        super().__init__(
            message or f"cannot find node 0x{digest.hex()} at depth {depth}"
        )


# =============================================================================
# Verification
# =============================================================================


class VerificationFailedError(SMTError):
    """Merkle proof does not reproduce the expected root."""

    def __init__(self, expected: bytes, computed: bytes):
        self.expected = expected
        self.computed = computed
        super().__init__(
            f"Merkle proof verification failed: expected root 0x{expected.hex()}, "
            f"got 0x{computed.hex()}"
        )


# =============================================================================
# Configuration / Serialization
# =============================================================================


class ConfigError(SMTError, ValueError):
    """Invalid configuration value."""


class UnknownHasherError(ConfigError):
    """No hasher is registered under the requested name."""


class ProofFormatError(SMTError, ValueError):
    """Serialized proof could not be decoded."""
