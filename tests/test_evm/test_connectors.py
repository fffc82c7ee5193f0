"""
Signing Connector Test Suite

Tests for PrivateKeyConnector, Web3ProviderConnector and signer recovery.
Wallet RPC calls are simulated with AsyncMock.
"""

import json
from unittest.mock import AsyncMock, Mock

import pytest
from eth_account import Account

from permit_approvals.exceptions import SigningError
from permit_approvals.evm.connectors import (
    PrivateKeyConnector,
    Web3ProviderConnector,
    recover_signer,
)
from permit_approvals.evm.constants import PERMIT_TYPEHASH
from permit_approvals.evm.encoding import encode_digest
from permit_approvals.evm.schemas import PermitParams
from permit_approvals.evm.standards import EIP712Domain, PermitTypedData

from test_mocks import (
    MOCK_CHAIN_ID,
    MOCK_OTHER_ADDRESS,
    MOCK_PERMIT_PARAMS,
    MOCK_PERMIT_SIGNATURE,
    MOCK_PRIVATE_KEY,
    MOCK_TOKEN_ADDRESS,
    MOCK_TOKEN_NAME,
    MOCK_WALLET_ADDRESS,
)


@pytest.fixture
def typed_data():
    domain = EIP712Domain(
        name=MOCK_TOKEN_NAME,
        version="1",
        chainId=MOCK_CHAIN_ID,
        verifyingContract=MOCK_TOKEN_ADDRESS,
    )
    return PermitTypedData(domain=domain, message=PermitParams(**MOCK_PERMIT_PARAMS).to_message())


@pytest.fixture
def digest(typed_data):
    return encode_digest(typed_data.domain, PERMIT_TYPEHASH, typed_data.message)


def create_mock_wallet(response):
    """AsyncWeb3 stand-in whose provider answers ``make_request`` with ``response``."""
    w3 = Mock()
    w3.provider.make_request = AsyncMock(return_value=response)
    return w3


class TestPrivateKeyConnector:

    def test_address(self):
        connector = PrivateKeyConnector(MOCK_PRIVATE_KEY)
        assert connector.address.lower() == MOCK_WALLET_ADDRESS

    def test_missing_key(self):
        with pytest.raises(ValueError, match="Private key not provided"):
            PrivateKeyConnector("")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("evm_private_key", MOCK_PRIVATE_KEY)
        assert PrivateKeyConnector.from_env().address.lower() == MOCK_WALLET_ADDRESS

    @pytest.mark.asyncio
    async def test_sign_reference_vector(self, digest):
        connector = PrivateKeyConnector(MOCK_PRIVATE_KEY)
        signature = await connector.sign(MOCK_WALLET_ADDRESS, digest)
        assert "0x" + signature.hex() == MOCK_PERMIT_SIGNATURE

    @pytest.mark.asyncio
    async def test_sign_then_recover(self):
        connector = PrivateKeyConnector(MOCK_PRIVATE_KEY)
        digest = bytes(range(32))
        signature = await connector.sign(MOCK_WALLET_ADDRESS, digest)
        assert len(signature) == 65
        assert signature[64] in (27, 28)
        assert connector.recover(digest, signature).lower() == MOCK_WALLET_ADDRESS

    @pytest.mark.asyncio
    async def test_refuses_foreign_address(self, digest):
        connector = PrivateKeyConnector(MOCK_PRIVATE_KEY)
        with pytest.raises(SigningError):
            await connector.sign(MOCK_OTHER_ADDRESS, digest)

    @pytest.mark.asyncio
    async def test_refuses_wrong_digest_length(self):
        connector = PrivateKeyConnector(MOCK_PRIVATE_KEY)
        with pytest.raises(SigningError):
            await connector.sign(MOCK_WALLET_ADDRESS, b"\x00" * 31)


class TestRecoverSigner:

    def test_recover_reference_signature(self, digest):
        assert recover_signer(digest, MOCK_PERMIT_SIGNATURE).lower() == MOCK_WALLET_ADDRESS

    def test_accepts_zero_one_recovery_id(self, digest):
        raw = bytes.fromhex(MOCK_PERMIT_SIGNATURE[2:])
        assert recover_signer(digest, raw[:64] + bytes([raw[64] - 27])).lower() == MOCK_WALLET_ADDRESS

    def test_other_digest_recovers_other_address(self, digest):
        assert recover_signer(bytes(range(32)), MOCK_PERMIT_SIGNATURE).lower() != MOCK_WALLET_ADDRESS

    def test_rejects_wrong_length(self, digest):
        with pytest.raises(SigningError):
            recover_signer(digest, "0x1234")


class TestWeb3ProviderConnector:

    @pytest.mark.asyncio
    async def test_sign_typed_data(self, digest, typed_data):
        w3 = create_mock_wallet({"jsonrpc": "2.0", "id": 1, "result": MOCK_PERMIT_SIGNATURE})
        connector = Web3ProviderConnector(w3)

        signature = await connector.sign(MOCK_WALLET_ADDRESS, digest, typed_data.to_dict())

        assert "0x" + signature.hex() == MOCK_PERMIT_SIGNATURE
        method, params = w3.provider.make_request.call_args.args
        assert method == "eth_signTypedData_v4"
        assert params[0] == MOCK_WALLET_ADDRESS
        assert json.loads(params[1])["primaryType"] == "Permit"

    @pytest.mark.asyncio
    async def test_normalises_recovery_id(self, digest, typed_data):
        raw = bytes.fromhex(MOCK_PERMIT_SIGNATURE[2:])
        w3 = create_mock_wallet({"result": "0x" + (raw[:64] + bytes([raw[64] - 27])).hex()})

        signature = await Web3ProviderConnector(w3).sign(MOCK_WALLET_ADDRESS, digest, typed_data.to_dict())
        assert signature == raw

    @pytest.mark.asyncio
    async def test_requires_typed_data(self, digest):
        connector = Web3ProviderConnector(create_mock_wallet({"result": MOCK_PERMIT_SIGNATURE}))
        with pytest.raises(SigningError):
            await connector.sign(MOCK_WALLET_ADDRESS, digest)

    @pytest.mark.asyncio
    async def test_wallet_error(self, digest, typed_data):
        w3 = create_mock_wallet({"error": {"code": 4001, "message": "User rejected the request."}})
        with pytest.raises(SigningError, match="refused"):
            await Web3ProviderConnector(w3).sign(MOCK_WALLET_ADDRESS, digest, typed_data.to_dict())

    @pytest.mark.asyncio
    async def test_transport_failure(self, digest, typed_data):
        w3 = Mock()
        w3.provider.make_request = AsyncMock(side_effect=ConnectionError("connection refused"))
        with pytest.raises(SigningError):
            await Web3ProviderConnector(w3).sign(MOCK_WALLET_ADDRESS, digest, typed_data.to_dict())

    @pytest.mark.asyncio
    async def test_signature_from_another_account(self, digest, typed_data):
        other = Account.create()
        foreign = "0x" + bytes(other.unsafe_sign_hash(digest).signature).hex()
        w3 = create_mock_wallet({"result": foreign})

        with pytest.raises(SigningError, match="recovers to"):
            await Web3ProviderConnector(w3).sign(MOCK_WALLET_ADDRESS, digest, typed_data.to_dict())

    @pytest.mark.asyncio
    async def test_non_hex_wallet_result(self, digest, typed_data):
        w3 = create_mock_wallet({"result": "0x" + "zz" * 65})
        with pytest.raises(SigningError, match="not valid hex"):
            await Web3ProviderConnector(w3).sign(MOCK_WALLET_ADDRESS, digest, typed_data.to_dict())


class TestRecoverSignerInput:

    def test_non_hex_signature(self, digest):
        with pytest.raises(SigningError):
            recover_signer(digest, "0x" + "zz" * 65)
