from .exceptions import (
    PermitError,
    InvalidArgumentError,
    ContractQueryError,
    UnsupportedTokenError,
    SigningError,
)
from .utils import setup_logger
from .evm import (
    PermitUtils,
    PermitParams,
    DaiPermitParams,
    EIP712Domain,
    DomainCache,
    DomainResolver,
    SignerConnector,
    PrivateKeyConnector,
    Web3ProviderConnector,
    ContractQueryProvider,
    Web3QueryProvider,
)

__version__ = "0.1.0"

__all__ = [
    "PermitError",
    "InvalidArgumentError",
    "ContractQueryError",
    "UnsupportedTokenError",
    "SigningError",
    "setup_logger",
    "PermitUtils",
    "PermitParams",
    "DaiPermitParams",
    "EIP712Domain",
    "DomainCache",
    "DomainResolver",
    "SignerConnector",
    "PrivateKeyConnector",
    "Web3ProviderConnector",
    "ContractQueryProvider",
    "Web3QueryProvider",
]
