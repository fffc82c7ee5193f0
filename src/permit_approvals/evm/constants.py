"""
EVM Permit Constants and Chain Configuration

EIP-712 type strings, their type hashes, the field layout of both permit
dialects, and environment-aware RPC / private key lookup.
"""

import os
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, Field
from eth_utils import keccak
import dotenv

dotenv.load_dotenv()


# ---------------------------------------------------------------------------
# EIP-712 type strings
# ---------------------------------------------------------------------------

DOMAIN_TYPE: str = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
DOMAIN_WITHOUT_VERSION_TYPE: str = "EIP712Domain(string name,uint256 chainId,address verifyingContract)"
PERMIT_TYPE: str = "Permit(address owner,address spender,uint256 value,uint256 nonce,uint256 deadline)"
DAI_PERMIT_TYPE: str = "Permit(address holder,address spender,uint256 nonce,uint256 expiry,bool allowed)"

DOMAIN_TYPEHASH: bytes = keccak(text=DOMAIN_TYPE)
DOMAIN_WITHOUT_VERSION_TYPEHASH: bytes = keccak(text=DOMAIN_WITHOUT_VERSION_TYPE)
PERMIT_TYPEHASH: bytes = keccak(text=PERMIT_TYPE)
DAI_PERMIT_TYPEHASH: bytes = keccak(text=DAI_PERMIT_TYPE)

#: Declared domain type hashes that mark a token whose domain has no
#: ``version`` member. Some tokens (e.g. Keep3r) hash ``uint`` instead of
#: ``uint256`` in their declared constant.
VERSIONLESS_DOMAIN_TYPEHASHES: Tuple[bytes, ...] = (
    DOMAIN_WITHOUT_VERSION_TYPEHASH,
    keccak(text="EIP712Domain(string name,uint chainId,address verifyingContract)"),
)

#: Domain version used when a token does not expose ``version()``.
DEFAULT_DOMAIN_VERSION: str = "1"

#: ``0x1901`` prefix of the final EIP-712 digest preimage.
EIP712_PREFIX: bytes = b"\x19\x01"

MAX_UINT256: int = 2**256 - 1


# ---------------------------------------------------------------------------
# Struct layouts (field name, ABI type) in declared order
# ---------------------------------------------------------------------------

DOMAIN_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("name", "string"),
    ("version", "string"),
    ("chainId", "uint256"),
    ("verifyingContract", "address"),
)

DOMAIN_WITHOUT_VERSION_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("name", "string"),
    ("chainId", "uint256"),
    ("verifyingContract", "address"),
)

PERMIT_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("owner", "address"),
    ("spender", "address"),
    ("value", "uint256"),
    ("nonce", "uint256"),
    ("deadline", "uint256"),
)

DAI_PERMIT_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("holder", "address"),
    ("spender", "address"),
    ("nonce", "uint256"),
    ("expiry", "uint256"),
    ("allowed", "bool"),
)


# ---------------------------------------------------------------------------
# Getter names tried, in order, when querying a token
# ---------------------------------------------------------------------------

DOMAIN_SEPARATOR_GETTERS: Tuple[str, ...] = ("DOMAIN_SEPARATOR", "domainSeparator")
PERMIT_TYPEHASH_GETTERS: Tuple[str, ...] = ("PERMIT_TYPEHASH", "PERMIT_TYPE_HASH")
DOMAIN_TYPEHASH_GETTERS: Tuple[str, ...] = ("DOMAIN_TYPEHASH", "DOMAIN_TYPE_HASH", "EIP712_DOMAIN_TYPEHASH")


# ---------------------------------------------------------------------------
# Chain configuration
# ---------------------------------------------------------------------------

class EvmChainConfig(BaseModel):
    """EVM network entry used to pick a default RPC endpoint."""
    chain_id: int
    name: str = Field(..., description="Human-readable network name")
    public_rpc_url: str = Field(..., description="Public RPC endpoint (used when evm_rpc_url is unset)")


_EVM_CHAINS: Dict[int, EvmChainConfig] = {
    config.chain_id: config
    for config in (
        EvmChainConfig(chain_id=1, name="Ethereum Mainnet", public_rpc_url="https://ethereum-rpc.publicnode.com"),
        EvmChainConfig(chain_id=56, name="BNB Smart Chain", public_rpc_url="https://bsc-dataseed.binance.org"),
        EvmChainConfig(chain_id=137, name="Polygon Mainnet", public_rpc_url="https://polygon-rpc.com"),
        EvmChainConfig(chain_id=8453, name="Base", public_rpc_url="https://mainnet.base.org"),
        EvmChainConfig(chain_id=11155111, name="Sepolia", public_rpc_url="https://rpc.sepolia.org"),
    )
}


def get_chain_config(chain_id: int) -> Optional[EvmChainConfig]:
    """Return the known configuration for ``chain_id``, or ``None``."""
    return _EVM_CHAINS.get(chain_id)


def get_rpc_url(chain_id: int) -> str:
    """
    Resolve the RPC endpoint for ``chain_id``.

    The ``evm_rpc_url`` environment variable (also read from ``.env``) wins
    over the built-in public endpoints.

    Raises:
        ValueError: If no override is set and the chain is unknown.
    """
    override = os.getenv("evm_rpc_url")
    if override:
        return override

    config = get_chain_config(chain_id)
    if config is None:
        raise ValueError(
            f"No RPC endpoint known for chain_id={chain_id}; set evm_rpc_url."
        )
    return config.public_rpc_url


def get_private_key_from_env() -> Optional[str]:
    """Return the signing key from ``evm_private_key``, if set."""
    return os.getenv("evm_private_key")
