"""
Exception and Error Definitions Module

Defines the exception hierarchy for permit construction, domain resolution
and signing. Every failure aborts the permit-building flow; no partial
signature or call data is ever returned to the caller.

Exception Hierarchy:
    PermitError (root)
    ├── InvalidArgumentError
    ├── ContractQueryError
    │   └── UnsupportedTokenError
    └── SigningError
"""

from typing import Optional


class PermitError(Exception):
    """
    Root exception class for all project-specific exceptions.

    Catch this class to handle any failure raised while resolving a token
    domain, encoding a permit or signing it.
    """
    pass


class InvalidArgumentError(PermitError, ValueError):
    """
    Raised when caller input is malformed, before any network call is made.

    This includes scenarios such as:
    - Address that is not a 0x-prefixed 20-byte hex string
    - Negative amount, nonce or deadline, or a value above uint256
    - Non-positive chain id

    Attributes:
        field: Name of the offending field, when known
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ContractQueryError(PermitError):
    """
    Raised when a read call against a token contract fails.

    This includes scenarios such as:
    - RPC connectivity issues
    - Contract call revert (e.g. getter not implemented)
    - Return data that cannot be decoded as the expected type

    Attributes:
        contract: Address of the queried contract
        method: Getter that was called (e.g. ``nonces(address)``)
    """

    def __init__(self, message: str, contract: Optional[str] = None, method: Optional[str] = None):
        super().__init__(message)
        self.contract = contract
        self.method = method


class UnsupportedTokenError(ContractQueryError):
    """
    Raised when a token exposes neither a computable EIP-712 domain nor a
    queryable ``DOMAIN_SEPARATOR``.
    """
    pass


class SigningError(PermitError):
    """
    Raised when the signing connector refuses or fails to produce a signature.

    This includes scenarios such as:
    - Connector asked to sign for an address it does not control
    - Wallet/provider rejected the ``eth_signTypedData_v4`` request
    - Signer returned something other than a 65-byte signature
    """
    pass
