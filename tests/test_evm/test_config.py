"""
Configuration and Logging Test Suite

Tests for RPC endpoint resolution, environment lookups, the web3 query
provider wiring and the package logger setup.
"""

import logging
from unittest.mock import AsyncMock, Mock

import pytest

from permit_approvals.evm.constants import (
    get_chain_config,
    get_private_key_from_env,
    get_rpc_url,
)
from permit_approvals.evm.providers import Web3QueryProvider
from permit_approvals.utils import get_logger, logger, setup_logger

from test_mocks import MOCK_PRIVATE_KEY, MOCK_TOKEN_ADDRESS


class TestRpcConfig:

    def test_known_chain(self, monkeypatch):
        monkeypatch.delenv("evm_rpc_url", raising=False)
        assert get_rpc_url(56) == get_chain_config(56).public_rpc_url

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("evm_rpc_url", "http://127.0.0.1:8545")
        assert get_rpc_url(56) == "http://127.0.0.1:8545"
        assert get_rpc_url(999999) == "http://127.0.0.1:8545"

    def test_unknown_chain(self, monkeypatch):
        monkeypatch.delenv("evm_rpc_url", raising=False)
        assert get_chain_config(999999) is None
        with pytest.raises(ValueError):
            get_rpc_url(999999)

    def test_private_key_from_env(self, monkeypatch):
        monkeypatch.setenv("evm_private_key", MOCK_PRIVATE_KEY)
        assert get_private_key_from_env() == MOCK_PRIVATE_KEY


class TestWeb3QueryProvider:

    @pytest.mark.asyncio
    async def test_call(self):
        w3 = Mock()
        w3.eth.call = AsyncMock(return_value=b"\x00" * 32)
        provider = Web3QueryProvider(w3)

        result = await provider.call(MOCK_TOKEN_ADDRESS, bytes.fromhex("06fdde03"))

        assert result == b"\x00" * 32
        tx = w3.eth.call.call_args.args[0]
        assert tx["data"] == "0x06fdde03"
        assert tx["to"].lower() == MOCK_TOKEN_ADDRESS

    @pytest.mark.asyncio
    async def test_call_at_block(self):
        w3 = Mock()
        w3.eth.call = AsyncMock(return_value=b"")
        await Web3QueryProvider(w3, block_identifier="latest").call(MOCK_TOKEN_ADDRESS, b"\x01\x02\x03\x04")
        assert w3.eth.call.call_args.args[1] == "latest"

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        w3 = Mock()
        w3.eth.call = AsyncMock(side_effect=ConnectionError("down"))
        with pytest.raises(ConnectionError):
            await Web3QueryProvider(w3).call(MOCK_TOKEN_ADDRESS, b"\x01\x02\x03\x04")

    def test_from_chain_id(self, monkeypatch):
        monkeypatch.setenv("evm_rpc_url", "http://127.0.0.1:8545")
        provider = Web3QueryProvider.from_chain_id(56, request_timeout=5)
        assert provider.w3.provider.endpoint_uri == "http://127.0.0.1:8545"


class TestLogger:

    def test_module_loggers_are_children(self):
        assert get_logger("permit_approvals.evm.permits").name == "permit_approvals.evm.permits"
        assert get_logger("tests").name == "permit_approvals.tests"

    def test_setup_logger_is_idempotent(self):
        setup_logger("DEBUG")
        handlers = len(logger.handlers)
        setup_logger(logging.WARNING)

        assert len(logger.handlers) == handlers
        assert logger.level == logging.WARNING
