"""
EVM Permit Schema Models

Pydantic models for the caller-facing permit parameters and the signature
produced for them. All classes inherit from the base schema hierarchy in
``schemas.bases``.

Signature classes:
    - EVMECDSASignature: v/r/s signature for EIP-2612 and DAI-style permits
      (use ``signature_type`` to distinguish).

Permit parameter classes:
    - PermitParams: EIP-2612 ``permit()`` fields (owner, spender, value,
      nonce, deadline).
    - DaiPermitParams: DAI-style ``permit()`` fields (holder, spender, nonce,
      expiry, allowed).
"""

from typing import Literal, Union

from pydantic import Field, field_validator
from eth_utils import is_hex_address, to_bytes

from ..exceptions import InvalidArgumentError
from ..schemas.bases import BaseSignature, BasePermitParams
from .constants import MAX_UINT256
from .standards import PermitMessage, DaiPermitMessage


def _check_address(field_name: str, value: str) -> str:
    if not isinstance(value, str) or not is_hex_address(value):
        raise ValueError(f"{field_name} must be a 0x-prefixed 20-byte hex address, got {value!r}")
    return value


def _check_uint(field_name: str, value):
    # bool is an int subclass
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be an integer or decimal string, got {value!r}")
    return value


class EVMECDSASignature(BaseSignature):
    """
    EVM ECDSA signature (v, r, s).

    Attributes:
        signature_type: ``"EIP2612"`` or ``"DAI"``.
        v: ECDSA recovery ID (27 or 28).
        r: r component, 32 bytes as a 0x-prefixed 64-char hex string.
        s: s component, 32 bytes as a 0x-prefixed 64-char hex string.

    Example::

        sig = EVMECDSASignature.from_packed("0x3b44...1c", signature_type="EIP2612")
        sig.v  # 28
    """

    signature_type: Literal["EIP2612", "DAI"] = Field(
        ..., description="Permit dialect: 'EIP2612' or 'DAI'"
    )
    v: int = Field(..., ge=27, le=28, description="ECDSA recovery ID (27 or 28)")
    r: str = Field(..., description="Signature r component (32 bytes, 0x-prefixed hex)")
    s: str = Field(..., description="Signature s component (32 bytes, 0x-prefixed hex)")

    @classmethod
    def from_packed(
        cls,
        signature: Union[str, bytes],
        signature_type: Literal["EIP2612", "DAI"] = "EIP2612",
    ) -> "EVMECDSASignature":
        """
        Split a packed 65-byte ``r || s || v`` signature into its components.

        A recovery byte of 0/1 (as returned by some signers) is normalised to
        27/28.

        Raises:
            ValueError: If the input is not hex or not exactly 65 bytes.
        """
        try:
            raw = to_bytes(hexstr=signature) if isinstance(signature, str) else bytes(signature)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Signature is not valid hex: {exc}") from exc
        if len(raw) != 65:
            raise ValueError(f"Expected a 65-byte signature, got {len(raw)} bytes")

        v = raw[64]
        if v < 27:
            v += 27
        return cls(
            signature_type=signature_type,
            v=v,
            r="0x" + raw[:32].hex(),
            s="0x" + raw[32:64].hex(),
        )

    def validate_format(self) -> bool:
        """
        Validate v/r/s components.

        Returns:
            True when all components pass.

        Raises:
            ValueError: Descriptive message on the first failed check.
        """
        if self.v not in (27, 28):
            raise ValueError(f"Invalid recovery ID: {self.v}. Must be 27 or 28")

        for name, val in [("r", self.r), ("s", self.s)]:
            hex_str = val.replace("0x", "").replace("0X", "")
            if len(hex_str) != 64:
                raise ValueError(f"Invalid {name}: expected 64 hex chars, got {len(hex_str)}")
            try:
                int(hex_str, 16)
            except ValueError:
                raise ValueError(f"Invalid {name}: not valid hexadecimal")

        return True

    @property
    def r_bytes(self) -> bytes:
        return to_bytes(hexstr=self.r).rjust(32, b"\x00")

    @property
    def s_bytes(self) -> bytes:
        return to_bytes(hexstr=self.s).rjust(32, b"\x00")

    def to_packed_bytes(self) -> bytes:
        self.validate_format()
        return self.r_bytes + self.s_bytes + bytes([self.v])

    def to_packed_hex(self) -> str:
        """
        Encode v/r/s into a packed 65-byte hex string (``r || s || v``).

        Returns:
            0x-prefixed 132-character hex string.

        Raises:
            ValueError: If components do not pass ``validate_format()``.
        """
        return "0x" + self.to_packed_bytes().hex()


class PermitParams(BasePermitParams):
    """
    Fields of an EIP-2612 ``permit(owner, spender, value, deadline, v, r, s)``.

    ``value`` accepts a decimal string (as most wallets and APIs transport
    uint256 amounts) or an int.

    Example::

        params = PermitParams(
            owner="0x2c9b2dbdba8a9c969ac24153f5c1c23cb0e63914",
            spender="0x11111112542d85b3ef69ae05771c2dccff4faa26",
            value="1000000000",
            nonce=0,
            deadline=192689033,
        )
    """

    permit_type: Literal["EIP2612"] = Field(default="EIP2612", description="Permit standard identifier")
    owner: str = Field(..., description="Token owner's wallet address (0x-prefixed)")
    spender: str = Field(..., description="Authorized spender address")
    value: int = Field(..., ge=0, le=MAX_UINT256, description="Approved amount in the token's smallest unit")
    nonce: int = Field(..., ge=0, le=MAX_UINT256, description="On-chain nonce for replay protection")
    deadline: int = Field(..., ge=0, le=MAX_UINT256, description="Unix timestamp after which the permit expires")

    @field_validator("owner", "spender")
    @classmethod
    def _validate_address(cls, value: str, info) -> str:
        return _check_address(info.field_name, value)

    @field_validator("value", "nonce", "deadline", mode="before")
    @classmethod
    def _reject_bool(cls, value, info):
        return _check_uint(info.field_name, value)

    def to_message(self) -> PermitMessage:
        return PermitMessage(
            owner=self.owner,
            spender=self.spender,
            value=self.value,
            nonce=self.nonce,
            deadline=self.deadline,
        )


class DaiPermitParams(BasePermitParams):
    """
    Fields of a DAI-style
    ``permit(holder, spender, nonce, expiry, allowed, v, r, s)``.
    """

    permit_type: Literal["DAI"] = Field(default="DAI", description="Permit standard identifier")
    holder: str = Field(..., description="Token holder's wallet address (0x-prefixed)")
    spender: str = Field(..., description="Authorized spender address")
    nonce: int = Field(..., ge=0, le=MAX_UINT256, description="On-chain nonce for replay protection")
    expiry: int = Field(..., ge=0, le=MAX_UINT256, description="Unix timestamp after which the permit expires (0 = never)")
    allowed: bool = Field(..., description="True grants an unlimited allowance, False revokes it")

    @field_validator("holder", "spender")
    @classmethod
    def _validate_address(cls, value: str, info) -> str:
        return _check_address(info.field_name, value)

    @field_validator("nonce", "expiry", mode="before")
    @classmethod
    def _reject_bool(cls, value, info):
        return _check_uint(info.field_name, value)

    def to_message(self) -> DaiPermitMessage:
        return DaiPermitMessage(
            holder=self.holder,
            spender=self.spender,
            nonce=self.nonce,
            expiry=self.expiry,
            allowed=self.allowed,
        )


def validate_address(field_name: str, value: str) -> str:
    """
    Check ``value`` is a 0x-prefixed 20-byte hex address.

    Raises:
        InvalidArgumentError: Naming ``field_name`` on failure.
    """
    try:
        return _check_address(field_name, value)
    except ValueError as exc:
        raise InvalidArgumentError(str(exc), field=field_name) from exc


def validate_chain_id(chain_id: int) -> int:
    """
    Check ``chain_id`` is a positive integer.

    Raises:
        InvalidArgumentError: On a non-integer or non-positive chain id.
    """
    if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id < 1:
        raise InvalidArgumentError(f"chain_id must be a positive integer, got {chain_id!r}", field="chain_id")
    return chain_id
