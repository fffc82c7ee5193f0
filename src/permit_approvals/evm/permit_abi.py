"""
Permit Token ABI Module

Minimal ABI definitions for the token getters a permit needs
(name, version, nonces, DOMAIN_SEPARATOR, type hash constants) and for the
two ``permit`` function dialects, plus static call encoding/decoding.

Usage:
    from permit_approvals.evm.permit_abi import get_nonces_abi, encode_function_call

    abi = get_nonces_abi()
    data = encode_function_call(abi, [owner])   # selector ++ abi.encode(owner)
"""

from typing import Any, Dict, List, Sequence

from eth_abi import encode, decode
from eth_utils import keccak


def _view(name: str, output_type: str, inputs: Sequence[Dict[str, str]] = ()) -> Dict[str, Any]:
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view",
        "inputs": list(inputs),
        "outputs": [{"name": "", "type": output_type}],
    }


def get_name_abi() -> Dict[str, Any]:
    """ABI entry for ERC20 ``name() returns (string)``."""
    return _view("name", "string")


def get_version_abi() -> Dict[str, Any]:
    """ABI entry for ``version() returns (string)`` (EIP-712 domain version)."""
    return _view("version", "string")


def get_nonces_abi() -> Dict[str, Any]:
    """ABI entry for EIP-2612 ``nonces(address owner) returns (uint256)``."""
    return _view("nonces", "uint256", [{"name": "owner", "type": "address"}])


def get_bytes32_getter_abi(name: str) -> Dict[str, Any]:
    """
    ABI entry for a ``bytes32`` constant getter such as ``DOMAIN_SEPARATOR()``
    or ``PERMIT_TYPEHASH()``.
    """
    return _view(name, "bytes32")


def get_permit_abi() -> Dict[str, Any]:
    """
    ABI entry for EIP-2612
    ``permit(owner, spender, value, deadline, v, r, s)``.

    The nonce is not an argument; the contract reads it from storage.
    """
    return {
        "name": "permit",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "owner",    "type": "address"},
            {"name": "spender",  "type": "address"},
            {"name": "value",    "type": "uint256"},
            {"name": "deadline", "type": "uint256"},
            {"name": "v",        "type": "uint8"},
            {"name": "r",        "type": "bytes32"},
            {"name": "s",        "type": "bytes32"},
        ],
        "outputs": [],
    }


def get_dai_permit_abi() -> Dict[str, Any]:
    """
    ABI entry for DAI-style
    ``permit(holder, spender, nonce, expiry, allowed, v, r, s)``.
    """
    return {
        "name": "permit",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "holder",  "type": "address"},
            {"name": "spender", "type": "address"},
            {"name": "nonce",   "type": "uint256"},
            {"name": "expiry",  "type": "uint256"},
            {"name": "allowed", "type": "bool"},
            {"name": "v",       "type": "uint8"},
            {"name": "r",       "type": "bytes32"},
            {"name": "s",       "type": "bytes32"},
        ],
        "outputs": [],
    }


def input_types(abi_entry: Dict[str, Any]) -> List[str]:
    return [item["type"] for item in abi_entry["inputs"]]


def function_signature(abi_entry: Dict[str, Any]) -> str:
    """Canonical signature, e.g. ``nonces(address)``."""
    return f"{abi_entry['name']}({','.join(input_types(abi_entry))})"


def function_selector(abi_entry: Dict[str, Any]) -> bytes:
    """First four bytes of ``keccak256(signature)``."""
    return keccak(text=function_signature(abi_entry))[:4]


def encode_arguments(abi_entry: Dict[str, Any], args: Sequence[Any]) -> bytes:
    """ABI-encode ``args`` against the entry's inputs, without selector."""
    return encode(input_types(abi_entry), list(args))


def encode_function_call(abi_entry: Dict[str, Any], args: Sequence[Any] = ()) -> bytes:
    """Selector followed by the ABI-encoded arguments (an ``eth_call`` payload)."""
    return function_selector(abi_entry) + encode_arguments(abi_entry, args)


def decode_function_result(abi_entry: Dict[str, Any], data: bytes) -> Any:
    """
    Decode the single return value of ``abi_entry`` from raw return data.

    Raises:
        eth_abi.exceptions.DecodingError: If ``data`` is empty or malformed.
    """
    output_types = [item["type"] for item in abi_entry["outputs"]]
    return decode(output_types, bytes(data))[0]
