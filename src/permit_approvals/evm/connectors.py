"""
Signing Connectors

A connector signs a 32-byte EIP-712 digest on behalf of an address and
recovers the signer of a 65-byte ``r || s || v`` signature. The permit
builder only depends on the abstract ``SignerConnector``.

Implementations
---------------
PrivateKeyConnector
    Signs in-process with a locally held secp256k1 key via ``eth_account``.
Web3ProviderConnector
    Delegates to an external wallet through ``eth_signTypedData_v4`` on an
    ``AsyncWeb3`` provider. Wallets refuse to sign bare hashes, so this
    connector requires the typed-data payload alongside the digest.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from eth_account import Account
from eth_keys import keys
from eth_utils import to_bytes
from web3 import AsyncWeb3

from ..exceptions import SigningError
from .constants import get_private_key_from_env
from ..utils import get_logger

logger = get_logger(__name__)


def _signature_bytes(signature: Union[str, bytes]) -> bytes:
    try:
        raw = to_bytes(hexstr=signature) if isinstance(signature, str) else bytes(signature)
    except (TypeError, ValueError) as exc:
        raise SigningError(f"Signature is not valid hex: {exc}") from exc
    if len(raw) != 65:
        raise SigningError(f"Expected a 65-byte signature, got {len(raw)} bytes")
    return raw


def recover_signer(digest: bytes, signature: Union[str, bytes]) -> str:
    """
    Recover the checksum address that produced ``signature`` over ``digest``.

    Accepts a recovery byte of 27/28 or 0/1.

    Raises:
        SigningError: If the signature is malformed or not recoverable.
    """
    raw = _signature_bytes(signature)
    v = raw[64]
    if v >= 27:
        v -= 27
    try:
        sig = keys.Signature(signature_bytes=raw[:64] + bytes([v]))
        return sig.recover_public_key_from_msg_hash(bytes(digest)).to_checksum_address()
    except Exception as exc:
        raise SigningError(f"Unable to recover signer from signature: {exc}") from exc


class SignerConnector(ABC):
    """Minimal signing capability: ``sign`` and ``recover``."""

    @abstractmethod
    async def sign(
        self,
        address: str,
        digest: bytes,
        typed_data: Optional[Dict[str, Any]] = None,
    ) -> bytes:
        """
        Sign ``digest`` as ``address``.

        Args:
            address: Account expected to produce the signature.
            digest: 32-byte EIP-712 digest.
            typed_data: The ``eth_signTypedData_v4`` payload the digest was
                computed from, for signers that cannot sign raw hashes.

        Returns:
            65-byte ``r || s || v`` signature with v in {27, 28}.

        Raises:
            SigningError: If the signer refuses or fails.
        """

    def recover(self, digest: bytes, signature: Union[str, bytes]) -> str:
        return recover_signer(digest, signature)


class PrivateKeyConnector(SignerConnector):
    """
    Connector holding a private key in memory.

    Example::

        connector = PrivateKeyConnector("0x965e...acb7")
        connector.address  # '0x2C9b2DBdbA8A9c969Ac24153f5C1c23CB0e63914'
    """

    def __init__(self, private_key: str):
        if not private_key:
            raise ValueError(
                "Private key not provided. Either pass 'private_key' or "
                "set 'evm_private_key' environment variable."
            )
        self._account = Account.from_key(private_key)
        self.address = AsyncWeb3.to_checksum_address(self._account.address)

    @classmethod
    def from_env(cls) -> "PrivateKeyConnector":
        return cls(get_private_key_from_env())

    async def sign(
        self,
        address: str,
        digest: bytes,
        typed_data: Optional[Dict[str, Any]] = None,
    ) -> bytes:
        if address.lower() != self.address.lower():
            raise SigningError(
                f"Connector holds the key of {self.address}, refusing to sign for {address}"
            )
        if len(digest) != 32:
            raise SigningError(f"Expected a 32-byte digest, got {len(digest)} bytes")

        try:
            signed = self._account.unsafe_sign_hash(bytes(digest))
        except Exception as exc:
            raise SigningError(f"Private key signing failed: {exc}") from exc
        return bytes(signed.signature)


class Web3ProviderConnector(SignerConnector):
    """
    Connector delegating to a wallet exposed through an ``AsyncWeb3``
    provider (e.g. a node with unlocked accounts, or a wallet bridge).

    The returned signature is checked against ``digest`` so a wallet that
    signed a different payload is reported instead of silently producing a
    permit the token would reject.
    """

    def __init__(self, w3: AsyncWeb3):
        self.w3 = w3

    async def sign(
        self,
        address: str,
        digest: bytes,
        typed_data: Optional[Dict[str, Any]] = None,
    ) -> bytes:
        if typed_data is None:
            raise SigningError("Web3ProviderConnector requires the typed-data payload to sign")

        try:
            response = await self.w3.provider.make_request(
                "eth_signTypedData_v4", [address, json.dumps(typed_data)]
            )
        except Exception as exc:
            raise SigningError(f"eth_signTypedData_v4 request failed for {address}: {exc}") from exc

        error = response.get("error")
        if error:
            raise SigningError(f"Wallet refused to sign for {address}: {error}")

        result = response.get("result")
        if not result:
            raise SigningError(f"Wallet returned no signature for {address}")

        signature = _signature_bytes(result)
        if signature[64] < 27:
            signature = signature[:64] + bytes([signature[64] + 27])

        recovered = recover_signer(digest, signature)
        if recovered.lower() != address.lower():
            raise SigningError(
                f"Wallet signature recovers to {recovered}, expected {address}"
            )
        logger.debug(f"Wallet signature received for {address}")
        return signature
