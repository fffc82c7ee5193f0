"""
EIP-712 Domain Resolution

Determines the EIP-712 domain a token checks permit signatures against, by
querying the token contract through a ``ContractQueryProvider``:

* ``name()`` is required (unless the caller already knows it),
* the declared domain type hash tells whether the domain has a ``version``
  member at all,
* ``version()`` is optional and defaults to ``"1"``.

Resolved domains are kept in a ``DomainCache`` keyed by
``(chain_id, token_address)``. Name and version are immutable on-chain, so
the cache is never invalidated. Domains built from a caller-supplied name or
version are returned but not cached. Nonces are never cached.
"""

import dataclasses
from typing import Any, Dict, Optional, Sequence, Tuple

from eth_utils import to_checksum_address

from ..exceptions import ContractQueryError, UnsupportedTokenError
from ..utils import get_logger
from .constants import (
    DEFAULT_DOMAIN_VERSION,
    DOMAIN_SEPARATOR_GETTERS,
    DOMAIN_TYPEHASH_GETTERS,
    PERMIT_TYPEHASH_GETTERS,
    VERSIONLESS_DOMAIN_TYPEHASHES,
)
from .encoding import hash_domain
from .permit_abi import (
    decode_function_result,
    encode_function_call,
    function_signature,
    get_bytes32_getter_abi,
    get_name_abi,
    get_nonces_abi,
    get_version_abi,
)
from .providers import ContractQueryProvider
from .schemas import validate_address, validate_chain_id
from .standards import EIP712Domain

logger = get_logger(__name__)


class DomainCache:
    """
    In-memory store of resolved domains keyed by ``(chain_id, token)``.

    Concurrent population is last-writer-wins; every writer stores the same
    immutable value, so no lock is taken.
    """

    def __init__(self) -> None:
        self._domains: Dict[Tuple[int, str], EIP712Domain] = {}

    @staticmethod
    def _key(chain_id: int, token_address: str) -> Tuple[int, str]:
        return int(chain_id), token_address.lower()

    def get(self, chain_id: int, token_address: str) -> Optional[EIP712Domain]:
        return self._domains.get(self._key(chain_id, token_address))

    def set(self, chain_id: int, token_address: str, domain: EIP712Domain) -> None:
        self._domains[self._key(chain_id, token_address)] = domain

    def __contains__(self, key: Tuple[int, str]) -> bool:
        return self._key(*key) in self._domains

    def __len__(self) -> int:
        return len(self._domains)


#: Process-wide cache used when no cache is injected.
default_domain_cache = DomainCache()


def _hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()


class DomainResolver:
    """
    Resolves EIP-712 domain parameters of permit tokens.

    Args:
        provider: Executes the read-only contract calls.
        cache: Domain cache; defaults to the process-wide ``default_domain_cache``.

    Example::

        resolver = DomainResolver(Web3QueryProvider.from_chain_id(56))
        domain = await resolver.resolve_domain("0x1111...c302", 56)
    """

    def __init__(self, provider: ContractQueryProvider, cache: Optional[DomainCache] = None):
        self.provider = provider
        self.cache = cache if cache is not None else default_domain_cache

    # ------------------------------------------------------------------
    # Raw queries
    # ------------------------------------------------------------------

    async def _query(self, token_address: str, abi_entry: Dict[str, Any], args: Sequence[Any] = ()) -> Any:
        method = function_signature(abi_entry)
        try:
            data = encode_function_call(abi_entry, args)
            raw = await self.provider.call(token_address, data)
            return decode_function_result(abi_entry, raw)
        except ContractQueryError:
            raise
        except Exception as exc:
            raise ContractQueryError(
                f"Call {method} on {token_address} failed: {exc}",
                contract=token_address,
                method=method,
            ) from exc

    async def _query_first_bytes32(self, token_address: str, getters: Sequence[str]) -> bytes:
        """Try each ``bytes32`` getter in turn and return the first answer."""
        last_error: Optional[ContractQueryError] = None
        for getter in getters:
            try:
                return bytes(await self._query(token_address, get_bytes32_getter_abi(getter)))
            except ContractQueryError as exc:
                logger.debug(f"{getter}() unavailable on {token_address}: {exc}")
                last_error = exc

        raise ContractQueryError(
            f"None of {', '.join(g + '()' for g in getters)} answered on {token_address}",
            contract=token_address,
            method=" / ".join(g + "()" for g in getters),
        ) from last_error

    # ------------------------------------------------------------------
    # Token getters
    # ------------------------------------------------------------------

    async def get_token_name(self, token_address: str) -> str:
        validate_address("token_address", token_address)
        return await self._query(token_address, get_name_abi())

    async def get_token_version(self, token_address: str) -> str:
        """Return ``version()``, or ``"1"`` when the token has no such getter."""
        validate_address("token_address", token_address)
        try:
            return await self._query(token_address, get_version_abi())
        except ContractQueryError as exc:
            logger.debug(
                f"version() unavailable on {token_address}, defaulting to "
                f"{DEFAULT_DOMAIN_VERSION!r}: {exc}"
            )
            return DEFAULT_DOMAIN_VERSION

    async def get_token_nonce(self, token_address: str, owner_address: str) -> int:
        """Current ``nonces(owner)``; always queried, never cached."""
        validate_address("token_address", token_address)
        validate_address("owner_address", owner_address)
        owner = to_checksum_address(owner_address)
        return int(await self._query(token_address, get_nonces_abi(), [owner]))

    async def get_permit_type_hash(self, token_address: str) -> str:
        """
        The token's declared permit type hash, as-is.

        No comparison against the standard constants is made; callers decide
        what a nonstandard value means.
        """
        validate_address("token_address", token_address)
        return _hex(await self._query_first_bytes32(token_address, PERMIT_TYPEHASH_GETTERS))

    async def get_domain_type_hash(self, token_address: str) -> str:
        """The token's declared EIP-712 domain type hash, as-is."""
        validate_address("token_address", token_address)
        return _hex(await self._query_first_bytes32(token_address, DOMAIN_TYPEHASH_GETTERS))

    async def get_domain_separator(self, token_address: str, chain_id: Optional[int] = None) -> str:
        """
        The token's own ``DOMAIN_SEPARATOR`` (or ``domainSeparator``).

        When the token exposes neither getter and ``chain_id`` is given, the
        separator of the resolved domain is computed locally instead.

        Raises:
            UnsupportedTokenError: If no separator can be queried or computed.
        """
        validate_address("token_address", token_address)
        if chain_id is not None:
            validate_chain_id(chain_id)

        try:
            return _hex(await self._query_first_bytes32(token_address, DOMAIN_SEPARATOR_GETTERS))
        except ContractQueryError as exc:
            if chain_id is None:
                raise UnsupportedTokenError(
                    f"Token {token_address} exposes no DOMAIN_SEPARATOR and no chain_id "
                    f"was given to compute one",
                    contract=token_address,
                    method=exc.method,
                ) from exc
            query_error = exc

        try:
            domain = await self.resolve_domain(token_address, chain_id)
        except ContractQueryError as exc:
            raise UnsupportedTokenError(
                f"Token {token_address} exposes neither a DOMAIN_SEPARATOR nor a "
                f"computable EIP-712 domain ({query_error})",
                contract=token_address,
                method=exc.method,
            ) from exc
        return _hex(hash_domain(domain))

    # ------------------------------------------------------------------
    # Domain resolution
    # ------------------------------------------------------------------

    async def _resolve_version(self, token_address: str) -> Optional[str]:
        try:
            declared = await self._query_first_bytes32(token_address, DOMAIN_TYPEHASH_GETTERS)
        except ContractQueryError:
            declared = None

        if declared in VERSIONLESS_DOMAIN_TYPEHASHES:
            logger.debug(f"{token_address} declares a domain without version")
            return None
        return await self.get_token_version(token_address)

    async def resolve_domain(
        self,
        token_address: str,
        chain_id: int,
        token_name: Optional[str] = None,
        version: Optional[str] = None,
    ) -> EIP712Domain:
        """
        Return the EIP-712 domain of ``token_address`` on ``chain_id``.

        Args:
            token_address: Token contract, used verbatim as ``verifyingContract``.
            chain_id: Chain id, used verbatim.
            token_name: Known token name; skips the ``name()`` query and takes
                precedence over a cached name.
            version: Known domain version; skips version detection.

        Raises:
            InvalidArgumentError: On a malformed address or chain id.
            ContractQueryError: If ``name()`` is needed and fails.
        """
        validate_address("token_address", token_address)
        validate_chain_id(chain_id)

        domain = self.cache.get(chain_id, token_address)
        if domain is None:
            logger.debug(f"Domain cache miss for ({chain_id}, {token_address})")
            name = token_name if token_name is not None else await self.get_token_name(token_address)
            resolved_version = version if version is not None else await self._resolve_version(token_address)
            domain = EIP712Domain(
                name=name,
                version=resolved_version,
                chainId=chain_id,
                verifyingContract=token_address,
            )
            # Only fully queried domains are shared with later callers.
            if token_name is None and version is None:
                self.cache.set(chain_id, token_address, domain)
            return domain

        logger.debug(f"Domain cache hit for ({chain_id}, {token_address})")

        overrides: Dict[str, Any] = {}
        if token_name is not None and token_name != domain.name:
            overrides["name"] = token_name
        if version is not None and version != domain.version:
            overrides["version"] = version
        if domain.verifyingContract != token_address:
            overrides["verifyingContract"] = token_address
        return dataclasses.replace(domain, **overrides) if overrides else domain
