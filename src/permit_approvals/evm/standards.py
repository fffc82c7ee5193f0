from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Tuple

from .constants import (
    DOMAIN_FIELDS,
    DOMAIN_WITHOUT_VERSION_FIELDS,
    PERMIT_FIELDS,
    DAI_PERMIT_FIELDS,
)


def _type_entries(fields: Tuple[Tuple[str, str], ...]) -> List[Dict[str, str]]:
    return [{"name": name, "type": type_} for name, type_ in fields]


# -----------------------------
# EIP-712 Domain
# -----------------------------

@dataclass(frozen=True)
class EIP712Domain:
    """
    EIP-712 domain separator.
    Used to prevent signature replay across domains.

    ``version`` is ``None`` for tokens whose domain has no version member.
    """
    name: str
    version: Optional[str]
    chainId: int
    verifyingContract: str

    @property
    def has_version(self) -> bool:
        return self.version is not None

    @property
    def fields(self) -> Tuple[Tuple[str, str], ...]:
        return DOMAIN_FIELDS if self.has_version else DOMAIN_WITHOUT_VERSION_FIELDS

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.has_version:
            data["version"] = self.version
        data["chainId"] = self.chainId
        data["verifyingContract"] = self.verifyingContract
        return data


# -----------------------------
# Permit Message (EIP-2612)
# -----------------------------

@dataclass(frozen=True)
class PermitMessage:
    """
    Permit message as defined in EIP-2612.
    Represents token allowance authorization.
    """
    owner: str
    spender: str
    value: int
    nonce: int
    deadline: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "spender": self.spender,
            "value": self.value,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }


# -----------------------------
# Permit Message (DAI-style)
# -----------------------------

@dataclass(frozen=True)
class DaiPermitMessage:
    """
    Permit message of DAI and its forks.

    The allowance is all-or-nothing (``allowed``) and the struct field order
    differs from EIP-2612: holder, spender, nonce, expiry, allowed.
    """
    holder: str
    spender: str
    nonce: int
    expiry: int
    allowed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "holder": self.holder,
            "spender": self.spender,
            "nonce": self.nonce,
            "expiry": self.expiry,
            "allowed": self.allowed,
        }


# -----------------------------
# EIP-712 Typed Data Wrappers
# -----------------------------

@dataclass(frozen=True)
class PermitTypedData:
    """
    EIP-712 typed data container for an EIP-2612 permit.
    ``to_dict()`` can be passed directly to ``eth_signTypedData_v4`` or
    ``eth_account.messages.encode_typed_data``.
    """
    domain: EIP712Domain
    message: PermitMessage

    primary_type: str = "Permit"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": {
                "EIP712Domain": _type_entries(self.domain.fields),
                "Permit": _type_entries(PERMIT_FIELDS),
            },
            "primaryType": self.primary_type,
            "domain": self.domain.to_dict(),
            "message": self.message.to_dict(),
        }


@dataclass(frozen=True)
class DaiPermitTypedData:
    """
    EIP-712 typed data container for a DAI-style permit.

    The primary type is still named ``Permit``; only its members differ.
    """
    domain: EIP712Domain
    message: DaiPermitMessage

    primary_type: str = "Permit"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": {
                "EIP712Domain": _type_entries(self.domain.fields),
                "Permit": _type_entries(DAI_PERMIT_FIELDS),
            },
            "primaryType": self.primary_type,
            "domain": self.domain.to_dict(),
            "message": self.message.to_dict(),
        }
