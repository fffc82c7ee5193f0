"""
Contract Query Providers

A query provider executes a read-only ``eth_call`` against a contract and
returns the raw return bytes. Payload construction and result decoding stay
in the domain resolver; providers only move bytes.

Implementations
---------------
ContractQueryProvider
    Abstract capability: ``await call(contract_address, data) -> bytes``.
Web3QueryProvider
    ``AsyncWeb3`` backed provider. Network errors and reverts propagate
    unchanged; the resolver wraps them in ``ContractQueryError``.
"""

from abc import ABC, abstractmethod
from typing import Optional

from web3 import AsyncWeb3

from .constants import get_rpc_url
from ..utils import get_logger

logger = get_logger(__name__)


class ContractQueryProvider(ABC):
    """Read-only contract call capability."""

    @abstractmethod
    async def call(self, contract_address: str, data: bytes) -> bytes:
        """
        Execute ``eth_call`` with ``data`` against ``contract_address``.

        Args:
            contract_address: 0x-prefixed contract address.
            data: 4-byte selector followed by ABI-encoded arguments.

        Returns:
            Raw return data.
        """


class Web3QueryProvider(ContractQueryProvider):
    """
    Query provider over an ``AsyncWeb3`` instance.

    Example::

        provider = Web3QueryProvider.from_chain_id(56)
        raw = await provider.call(token, data)
    """

    def __init__(self, w3: AsyncWeb3, block_identifier: Optional[str] = None):
        self.w3 = w3
        self.block_identifier = block_identifier

    @classmethod
    def from_rpc_url(cls, rpc_url: str, request_timeout: int = 60) -> "Web3QueryProvider":
        """Build a provider connected to ``rpc_url``."""
        return cls(AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
            rpc_url,
            request_kwargs={"timeout": request_timeout}
        )))

    @classmethod
    def from_chain_id(cls, chain_id: int, request_timeout: int = 60) -> "Web3QueryProvider":
        """
        Build a provider for ``chain_id`` using ``evm_rpc_url`` or the
        built-in public endpoint.
        """
        return cls.from_rpc_url(get_rpc_url(chain_id), request_timeout=request_timeout)

    async def call(self, contract_address: str, data: bytes) -> bytes:
        tx = {
            "to": AsyncWeb3.to_checksum_address(contract_address),
            "data": "0x" + bytes(data).hex(),
        }
        logger.debug(f"eth_call to={tx['to']} data={tx['data'][:10]}")
        if self.block_identifier is not None:
            result = await self.w3.eth.call(tx, self.block_identifier)
        else:
            result = await self.w3.eth.call(tx)
        return bytes(result)
