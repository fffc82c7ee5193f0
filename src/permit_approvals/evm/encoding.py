"""
EIP-712 Typed-Data Encoder

Pure functions producing the exact 32-byte digest a permit contract
recovers its signer from::

    domainSeparator = keccak256(abi.encode(DOMAIN_TYPEHASH, keccak256(name),
                                           keccak256(version), chainId,
                                           verifyingContract))
    structHash      = keccak256(abi.encode(typeHash, field_1, ..., field_n))
    digest          = keccak256(0x1901 ++ domainSeparator ++ structHash)

Struct members are encoded with ABI static rules: addresses left-padded to
32 bytes, uint256 big-endian, booleans as 0/1. The member order is fixed per
message type; a different order yields a digest no contract will accept.
"""

from typing import Any, Dict, List, Tuple, Union

from eth_abi import encode
from eth_utils import keccak, to_checksum_address

from .constants import (
    DOMAIN_TYPEHASH,
    DOMAIN_WITHOUT_VERSION_TYPEHASH,
    PERMIT_FIELDS,
    DAI_PERMIT_FIELDS,
    EIP712_PREFIX,
)
from .standards import EIP712Domain, PermitMessage, DaiPermitMessage

PermitMessageTypes = Union[PermitMessage, DaiPermitMessage]

_STRUCT_LAYOUTS: Dict[type, Tuple[Tuple[str, str], ...]] = {
    PermitMessage: PERMIT_FIELDS,
    DaiPermitMessage: DAI_PERMIT_FIELDS,
}


def _abi_value(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type == "uint256":
        return int(value)
    if abi_type == "bool":
        return bool(value)
    return value


def hash_domain(domain: EIP712Domain) -> bytes:
    """Return the 32-byte domain separator of ``domain``."""
    types: List[str] = ["bytes32", "bytes32"]
    values: List[Any] = [DOMAIN_TYPEHASH, keccak(text=domain.name)]
    if domain.has_version:
        types.append("bytes32")
        values.append(keccak(text=domain.version))
    else:
        values[0] = DOMAIN_WITHOUT_VERSION_TYPEHASH

    types += ["uint256", "address"]
    values += [int(domain.chainId), to_checksum_address(domain.verifyingContract)]
    return keccak(encode(types, values))


def hash_struct(type_hash: bytes, message: PermitMessageTypes) -> bytes:
    """
    Return ``keccak256(abi.encode(type_hash, *fields))`` for ``message``.

    Raises:
        TypeError: If ``message`` is not one of the supported permit messages.
    """
    try:
        layout = _STRUCT_LAYOUTS[type(message)]
    except KeyError:
        raise TypeError(f"Unsupported permit message type: {type(message).__name__}")

    types = ["bytes32"] + [abi_type for _, abi_type in layout]
    values = [bytes(type_hash)] + [
        _abi_value(abi_type, getattr(message, name)) for name, abi_type in layout
    ]
    return keccak(encode(types, values))


def encode_digest(domain: EIP712Domain, type_hash: bytes, message: PermitMessageTypes) -> bytes:
    """Return the final EIP-712 digest to be signed for ``message`` under ``domain``."""
    return keccak(EIP712_PREFIX + hash_domain(domain) + hash_struct(type_hash, message))
