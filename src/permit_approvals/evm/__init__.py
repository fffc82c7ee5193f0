from .permits import PermitUtils
from .schemas import (
    EVMECDSASignature,
    PermitParams,
    DaiPermitParams,
)
from .standards import (
    EIP712Domain,
    PermitMessage,
    DaiPermitMessage,
    PermitTypedData,
    DaiPermitTypedData,
)
from .encoding import (
    hash_domain,
    hash_struct,
    encode_digest,
)
from .domains import DomainCache, DomainResolver
from .connectors import (
    SignerConnector,
    PrivateKeyConnector,
    Web3ProviderConnector,
    recover_signer,
)
from .providers import ContractQueryProvider, Web3QueryProvider
from .verifies import (
    verify_permit_signature,
    verify_dai_permit_signature,
    check_domain_separator,
)

__all__ = [
    "PermitUtils",
    "EVMECDSASignature",
    "PermitParams",
    "DaiPermitParams",
    "EIP712Domain",
    "PermitMessage",
    "DaiPermitMessage",
    "PermitTypedData",
    "DaiPermitTypedData",
    "hash_domain",
    "hash_struct",
    "encode_digest",
    "DomainCache",
    "DomainResolver",
    "SignerConnector",
    "PrivateKeyConnector",
    "Web3ProviderConnector",
    "recover_signer",
    "ContractQueryProvider",
    "Web3QueryProvider",
    "verify_permit_signature",
    "verify_dai_permit_signature",
    "check_domain_separator",
]
