"""
EIP-2612 / DAI Permit Builder

Public surface of the package. ``PermitUtils`` combines the domain resolver,
the typed-data encoder and a signing connector to produce permit signatures
and the argument payload of each contract's ``permit`` function.

Standard permit call data (7 x 32 bytes, nonce is implicit on-chain)::

    owner | spender | value | deadline | v | r | s

DAI-style permit call data (8 x 32 bytes)::

    holder | spender | nonce | expiry | allowed | v | r | s

Every failure aborts the whole flow: invalid input raises
``InvalidArgumentError`` before any query is made, query failures raise
``ContractQueryError`` and signer failures raise ``SigningError``.
"""

from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import ValidationError
from eth_utils import to_checksum_address

from ..exceptions import InvalidArgumentError, SigningError
from ..schemas.bases import BasePermitParams
from ..utils import get_logger
from .connectors import PrivateKeyConnector, SignerConnector
from .constants import DAI_PERMIT_TYPEHASH, PERMIT_TYPEHASH
from .domains import DomainCache, DomainResolver
from .encoding import encode_digest
from .permit_abi import encode_arguments, get_dai_permit_abi, get_permit_abi
from .providers import ContractQueryProvider, Web3QueryProvider
from .schemas import (
    DaiPermitParams,
    EVMECDSASignature,
    PermitParams,
    validate_address,
    validate_chain_id,
)
from .standards import DaiPermitTypedData, PermitTypedData

logger = get_logger(__name__)

ParamsT = TypeVar("ParamsT", bound=BasePermitParams)


def _coerce_params(model: Type[ParamsT], params: Union[ParamsT, Mapping[str, Any]]) -> ParamsT:
    if isinstance(params, model):
        return params
    try:
        return model.model_validate(params)
    except ValidationError as exc:
        errors = exc.errors()
        field = str(errors[0]["loc"][0]) if errors and errors[0].get("loc") else None
        raise InvalidArgumentError(f"Invalid {model.__name__}: {exc}", field=field) from exc


class PermitUtils:
    """
    Builds and signs EIP-2612 and DAI-style permits.

    Args:
        connector: Signs digests on behalf of the permit owner.
        provider: Executes read-only calls against token contracts.
        cache: Domain cache; defaults to the process-wide cache.

    Example::

        utils = PermitUtils(PrivateKeyConnector(key), Web3QueryProvider.from_chain_id(56))
        nonce = await utils.get_token_nonce(token, owner)
        call_data = await utils.build_permit_call_data(
            PermitParams(owner=owner, spender=spender, value="1000000000",
                         nonce=nonce, deadline=192689033),
            56, "1INCH Token", token,
        )
    """

    def __init__(
        self,
        connector: SignerConnector,
        provider: ContractQueryProvider,
        cache: Optional[DomainCache] = None,
    ):
        self.connector = connector
        self.resolver = DomainResolver(provider, cache)

    @classmethod
    def from_env(cls, chain_id: int, request_timeout: int = 60) -> "PermitUtils":
        """
        Build from ``evm_private_key`` and the RPC endpoint of ``chain_id``
        (``evm_rpc_url`` when set).
        """
        return cls(
            PrivateKeyConnector.from_env(),
            Web3QueryProvider.from_chain_id(chain_id, request_timeout=request_timeout),
        )

    # ------------------------------------------------------------------
    # Typed data
    # ------------------------------------------------------------------

    async def build_permit_typed_data(
        self,
        params: Union[PermitParams, Mapping[str, Any]],
        chain_id: int,
        token_name: Optional[str],
        token_address: str,
        version: Optional[str] = None,
    ) -> PermitTypedData:
        """EIP-712 payload of a standard permit, ready for ``eth_signTypedData_v4``."""
        permit = _coerce_params(PermitParams, params)
        validate_address("token_address", token_address)
        validate_chain_id(chain_id)

        domain = await self.resolver.resolve_domain(
            token_address, chain_id, token_name=token_name, version=version
        )
        return PermitTypedData(domain=domain, message=permit.to_message())

    async def build_dai_permit_typed_data(
        self,
        params: Union[DaiPermitParams, Mapping[str, Any]],
        chain_id: int,
        token_name: Optional[str],
        token_address: str,
        version: Optional[str] = None,
    ) -> DaiPermitTypedData:
        """EIP-712 payload of a DAI-style permit."""
        permit = _coerce_params(DaiPermitParams, params)
        validate_address("token_address", token_address)
        validate_chain_id(chain_id)

        domain = await self.resolver.resolve_domain(
            token_address, chain_id, token_name=token_name, version=version
        )
        return DaiPermitTypedData(domain=domain, message=permit.to_message())

    async def _sign_typed_data(
        self,
        signer: str,
        typed_data: Union[PermitTypedData, DaiPermitTypedData],
        type_hash: bytes,
    ) -> str:
        digest = encode_digest(typed_data.domain, type_hash, typed_data.message)
        signature = await self.connector.sign(signer, digest, typed_data.to_dict())
        if signature is None or len(signature) != 65:
            raise SigningError(
                f"Signer returned {0 if signature is None else len(signature)} bytes, expected 65"
            )
        logger.debug(
            f"Signed permit for {signer} on {typed_data.domain.verifyingContract} "
            f"(chain {typed_data.domain.chainId})"
        )
        return "0x" + bytes(signature).hex()

    # ------------------------------------------------------------------
    # Signatures
    # ------------------------------------------------------------------

    async def build_permit_signature(
        self,
        params: Union[PermitParams, Mapping[str, Any]],
        chain_id: int,
        token_name: Optional[str],
        token_address: str,
        version: Optional[str] = None,
    ) -> str:
        """
        Sign an EIP-2612 permit.

        Args:
            params: Permit fields (model or mapping).
            chain_id: Chain id of the token deployment.
            token_name: Token name used in the domain; queried when ``None``.
            token_address: Token contract (``verifyingContract``).
            version: Domain version; detected from the token when ``None``.

        Returns:
            0x-prefixed 65-byte ``r || s || v`` signature, v being 27 or 28.
        """
        typed_data = await self.build_permit_typed_data(
            params, chain_id, token_name, token_address, version
        )
        return await self._sign_typed_data(typed_data.message.owner, typed_data, PERMIT_TYPEHASH)

    async def build_dai_like_permit_signature(
        self,
        params: Union[DaiPermitParams, Mapping[str, Any]],
        chain_id: int,
        token_name: Optional[str],
        token_address: str,
        version: Optional[str] = None,
    ) -> str:
        """Sign a DAI-style permit. Same flow as ``build_permit_signature``."""
        typed_data = await self.build_dai_permit_typed_data(
            params, chain_id, token_name, token_address, version
        )
        return await self._sign_typed_data(typed_data.message.holder, typed_data, DAI_PERMIT_TYPEHASH)

    # ------------------------------------------------------------------
    # Call data
    # ------------------------------------------------------------------

    async def build_permit_call_data(
        self,
        params: Union[PermitParams, Mapping[str, Any]],
        chain_id: int,
        token_name: Optional[str],
        token_address: str,
        version: Optional[str] = None,
    ) -> str:
        """
        Sign a standard permit and ABI-encode the ``permit`` arguments.

        Returns:
            0x-prefixed hex of ``owner | spender | value | deadline | v | r | s``.
        """
        permit = _coerce_params(PermitParams, params)
        signature = EVMECDSASignature.from_packed(
            await self.build_permit_signature(permit, chain_id, token_name, token_address, version),
            signature_type="EIP2612",
        )
        data = encode_arguments(get_permit_abi(), [
            to_checksum_address(permit.owner),
            to_checksum_address(permit.spender),
            permit.value,
            permit.deadline,
            signature.v,
            signature.r_bytes,
            signature.s_bytes,
        ])
        return "0x" + data.hex()

    async def build_dai_like_permit_call_data(
        self,
        params: Union[DaiPermitParams, Mapping[str, Any]],
        chain_id: int,
        token_name: Optional[str],
        token_address: str,
        version: Optional[str] = None,
    ) -> str:
        """
        Sign a DAI-style permit and ABI-encode the ``permit`` arguments.

        Returns:
            0x-prefixed hex of
            ``holder | spender | nonce | expiry | allowed | v | r | s``.
        """
        permit = _coerce_params(DaiPermitParams, params)
        signature = EVMECDSASignature.from_packed(
            await self.build_dai_like_permit_signature(permit, chain_id, token_name, token_address, version),
            signature_type="DAI",
        )
        data = encode_arguments(get_dai_permit_abi(), [
            to_checksum_address(permit.holder),
            to_checksum_address(permit.spender),
            permit.nonce,
            permit.expiry,
            permit.allowed,
            signature.v,
            signature.r_bytes,
            signature.s_bytes,
        ])
        return "0x" + data.hex()

    # ------------------------------------------------------------------
    # Token queries
    # ------------------------------------------------------------------

    async def get_token_nonce(self, token_address: str, owner_address: str) -> int:
        return await self.resolver.get_token_nonce(token_address, owner_address)

    async def get_domain_separator(self, token_address: str, chain_id: Optional[int] = None) -> str:
        return await self.resolver.get_domain_separator(token_address, chain_id)

    async def get_permit_type_hash(self, token_address: str) -> str:
        return await self.resolver.get_permit_type_hash(token_address)

    async def get_domain_type_hash(self, token_address: str) -> str:
        return await self.resolver.get_domain_type_hash(token_address)
