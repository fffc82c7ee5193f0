"""
Permit Signature Verification

Off-chain checks mirroring what the token contract does in ``permit()``:
recompute the EIP-712 digest from the domain and message, recover the signer
and compare it with the owner (or holder). Also compares a locally computed
domain separator with the one the token reports.
"""

from typing import Union

from ..exceptions import SigningError
from ..utils import get_logger
from .connectors import recover_signer
from .constants import DAI_PERMIT_TYPEHASH, PERMIT_TYPEHASH
from .domains import DomainResolver
from .encoding import encode_digest, hash_domain
from .standards import DaiPermitMessage, EIP712Domain, PermitMessage

logger = get_logger(__name__)


def verify_permit_signature(
    domain: EIP712Domain,
    message: PermitMessage,
    signature: Union[str, bytes],
) -> bool:
    """
    Check an EIP-2612 permit signature was produced by ``message.owner``.

    Returns:
        False when the signature recovers to another address or is malformed.
    """
    digest = encode_digest(domain, PERMIT_TYPEHASH, message)
    try:
        recovered = recover_signer(digest, signature)
    except SigningError as exc:
        logger.debug(f"Permit signature rejected: {exc}")
        return False
    return recovered.lower() == message.owner.lower()


def verify_dai_permit_signature(
    domain: EIP712Domain,
    message: DaiPermitMessage,
    signature: Union[str, bytes],
) -> bool:
    """Check a DAI-style permit signature was produced by ``message.holder``."""
    digest = encode_digest(domain, DAI_PERMIT_TYPEHASH, message)
    try:
        recovered = recover_signer(digest, signature)
    except SigningError as exc:
        logger.debug(f"DAI permit signature rejected: {exc}")
        return False
    return recovered.lower() == message.holder.lower()


async def check_domain_separator(resolver: DomainResolver, domain: EIP712Domain) -> bool:
    """
    Compare the separator of ``domain`` with the token's ``DOMAIN_SEPARATOR``.

    A mismatch means signatures built from ``domain`` would be rejected
    on-chain (wrong name, version or chain).

    Raises:
        UnsupportedTokenError: If the token exposes no separator getter.
    """
    local = "0x" + hash_domain(domain).hex()
    remote = await resolver.get_domain_separator(domain.verifyingContract)
    if local.lower() != remote.lower():
        logger.warning(
            f"Domain separator mismatch for {domain.verifyingContract}: "
            f"computed {local}, token reports {remote}"
        )
        return False
    return True
