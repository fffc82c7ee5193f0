"""
Base Schema Models

Fundamental base classes that the EVM permit models inherit from.

Core Classes:
    - CanonicalModel: Pydantic base model shared by every schema
    - BaseSignature: Abstract signature component model
    - BasePermitParams: Abstract caller-supplied permit parameters

Dependencies:
    - pydantic: For data validation and serialization
"""

from typing import Any, Dict
from abc import ABC

from pydantic import BaseModel, ConfigDict, Field


class CanonicalModel(BaseModel):
    """
    Pydantic base model with deterministic dictionary output.

    ``populate_by_name`` lets callers build models either from the Python
    attribute names or from their aliases (e.g. ``chainId``).
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model to dictionary representation.

        Returns:
            Dict[str, Any]: Dictionary with all model fields.
        """
        return self.model_dump()


class BaseSignature(CanonicalModel, ABC):
    """
    Abstract base class for signature components.

    Attributes:
        signature_type: The permit dialect the signature was produced for
            (e.g. "EIP2612", "DAI")
    """

    signature_type: str = Field(..., description="Permit dialect the signature belongs to")

    def validate_format(self) -> bool:
        """
        Validate the signature components.

        Returns:
            bool: True if the signature format is valid.

        Raises:
            ValueError: If the signature format is invalid.
        """
        raise NotImplementedError


class BasePermitParams(CanonicalModel, ABC):
    """
    Abstract base class for the fields a caller supplies to build a permit.

    Concrete models tag themselves with ``permit_type`` so the two permit
    dialects can be told apart without sharing any message fields.

    Attributes:
        permit_type: Permit dialect (e.g. "EIP2612", "DAI")
    """

    permit_type: str = Field(..., description="Permit dialect (e.g. EIP2612, DAI)")
