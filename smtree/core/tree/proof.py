"""
Merkle membership proofs.

A proof is the list of sibling digests on the path from a leaf to the root,
ordered leaf-to-root: siblings[0] is the leaf's own sibling, siblings[-1]
is the child of the root that is not on the path.

Wire format: a JSON object {"siblings": ["0x..", ...]} with no other
framing. Order is preserved verbatim.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ValidationError, field_validator

from smtree.core.errors import (
    InvalidIndexLengthError,
    ProofFormatError,
    VerificationFailedError,
)
from smtree.crypto import bytes_to_hex, hex_to_bytes
from smtree.crypto.hashers import LeafableHasher, LeafValue
from smtree.utils.logger import get_logger
from smtree.utils.validation import validate_bits, validate_hex_digest

logger = get_logger("proof")

DEFAULT_DIGEST_SIZE = 32


class MerkleProofModel(BaseModel):
    """Serialized form of a MerkleProof."""

    siblings: List[str]

    @field_validator("siblings")
    @classmethod
    def _check_hex(cls, v: List[str]) -> List[str]:
        for i, s in enumerate(v):
            ok, err = validate_hex_digest(s, f"siblings[{i}]")
            if not ok:
                raise ValueError(err)
        return v


@dataclass
class MerkleProof:
    """
    Sibling digests for one leaf, leaf-to-root.

    Attributes:
        siblings: One digest per tree level
    """
    siblings: List[bytes] = field(default_factory=list)

    @classmethod
    def dummy(cls, height: int, hasher: Optional[LeafableHasher] = None) -> "MerkleProof":
        """Placeholder proof of the given height filled with default digests."""
        default = hasher.default_digest() if hasher is not None else bytes(DEFAULT_DIGEST_SIZE)
        return cls(siblings=[default] * height)

    @property
    def height(self) -> int:
        return len(self.siblings)

    # =========================================================================
    # Root reconstruction
    # =========================================================================

    def get_root_from_hash(
        self,
        leaf_hash: bytes,
        index_bits: Sequence[bool],
        hasher: LeafableHasher,
    ) -> bytes:
        """
        Fold the siblings over an already-hashed leaf.

        Args:
            leaf_hash: Digest of the leaf
            index_bits: Little-endian leaf index bits, one per sibling
            hasher: Combiner used by the tree

        Returns:
            Reconstructed root digest

        Raises:
            InvalidIndexLengthError: If index_bits does not match the proof
            ProofFormatError: If the hasher rejects a sibling digest
        """
        ok, err = validate_bits(index_bits, "index_bits", self.height)
        if not ok:
            raise InvalidIndexLengthError(err)

        state = leaf_hash
        for level, (bit, sibling) in enumerate(zip(index_bits, self.siblings)):
            try:
                if bit:
                    state = hasher.two_to_one(sibling, state)
                else:
                    state = hasher.two_to_one(state, sibling)
            except ValueError as e:
                raise ProofFormatError(f"Invalid sibling at level {level}: {e}") from e
        return state

    def get_root(
        self,
        leaf_data: LeafValue,
        index_bits: Sequence[bool],
        hasher: LeafableHasher,
    ) -> bytes:
        """Root implied by this proof for leaf_data at index_bits."""
        return self.get_root_from_hash(hasher.hash_leaf(leaf_data), index_bits, hasher)

    def verify(
        self,
        leaf_data: LeafValue,
        index_bits: Sequence[bool],
        merkle_root: bytes,
        hasher: LeafableHasher,
    ):
        """
        Check that the proof reproduces merkle_root.

        Raises:
            VerificationFailedError: If the reconstructed root differs
            ProofFormatError: If the hasher rejects a sibling digest
        """
        computed = self.get_root(leaf_data, index_bits, hasher)
        if computed != merkle_root:
            raise VerificationFailedError(expected=merkle_root, computed=computed)

    def is_valid(
        self,
        leaf_data: LeafValue,
        index_bits: Sequence[bool],
        merkle_root: bytes,
        hasher: LeafableHasher,
    ) -> bool:
        """Boolean form of verify. A sibling the hasher rejects is also invalid."""
        try:
            self.verify(leaf_data, index_bits, merkle_root, hasher)
        except (VerificationFailedError, ProofFormatError) as e:
            logger.debug(str(e))
            return False
        return True

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        return {"siblings": [bytes_to_hex(s) for s in self.siblings]}

    def to_json(self) -> str:
        return MerkleProofModel(**self.to_dict()).model_dump_json()

    @classmethod
    def from_model(cls, model: MerkleProofModel) -> "MerkleProof":
        return cls(siblings=[hex_to_bytes(s) for s in model.siblings])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MerkleProof":
        """
        Decode a proof dict.

        Raises:
            ProofFormatError: If the structure or a sibling is malformed
        """
        try:
            model = MerkleProofModel.model_validate(data)
        except ValidationError as e:
            raise ProofFormatError(f"Invalid proof: {e}") from e
        return cls.from_model(model)

    @classmethod
    def from_json(cls, data: str) -> "MerkleProof":
        try:
            model = MerkleProofModel.model_validate_json(data)
        except ValidationError as e:
            raise ProofFormatError(f"Invalid proof JSON: {e}") from e
        return cls.from_model(model)

    def __len__(self) -> int:
        return len(self.siblings)
