"""
EIP-712 Encoding Test Suite

Tests for domain separator, struct hash and digest computation:
- Known type hashes and domain separators
- Determinism and sensitivity to every field
- Agreement with eth_account's typed-data encoder
"""

import dataclasses

import pytest
from eth_account.messages import encode_typed_data

from permit_approvals.evm.constants import (
    DAI_PERMIT_TYPEHASH,
    DOMAIN_TYPEHASH,
    PERMIT_TYPEHASH,
    VERSIONLESS_DOMAIN_TYPEHASHES,
)
from permit_approvals.evm.encoding import encode_digest, hash_domain, hash_struct
from permit_approvals.evm.standards import (
    DaiPermitMessage,
    DaiPermitTypedData,
    EIP712Domain,
    PermitMessage,
    PermitTypedData,
)

from test_mocks import (
    MOCK_CHAIN_ID,
    MOCK_DAI_PERMIT_TYPEHASH,
    MOCK_DEADLINE,
    MOCK_OTHER_ADDRESS,
    MOCK_SPENDER_ADDRESS,
    MOCK_TOKEN_ADDRESS,
    MOCK_TOKEN_DOMAIN_SEPARATOR,
    MOCK_TOKEN_NAME,
    MOCK_VERSIONLESS_DOMAIN_TYPEHASH,
    MOCK_VERSIONLESS_TOKEN_ADDRESS,
    MOCK_VERSIONLESS_TOKEN_NAME,
    MOCK_WALLET_ADDRESS,
)


@pytest.fixture
def domain():
    return EIP712Domain(
        name=MOCK_TOKEN_NAME,
        version="1",
        chainId=MOCK_CHAIN_ID,
        verifyingContract=MOCK_TOKEN_ADDRESS,
    )


@pytest.fixture
def message():
    return PermitMessage(
        owner=MOCK_WALLET_ADDRESS,
        spender=MOCK_SPENDER_ADDRESS,
        value=1000000000,
        nonce=0,
        deadline=MOCK_DEADLINE,
    )


@pytest.fixture
def dai_message():
    return DaiPermitMessage(
        holder=MOCK_WALLET_ADDRESS,
        spender=MOCK_SPENDER_ADDRESS,
        nonce=0,
        expiry=MOCK_DEADLINE,
        allowed=True,
    )


class TestTypeHashes:

    def test_domain_typehash(self):
        assert DOMAIN_TYPEHASH.hex() == "8b73c3c69bb8fe3d512ecc4cf759cc79239f7b179b0ffacaa9a75d522b39400f"

    def test_permit_typehash(self):
        assert PERMIT_TYPEHASH.hex() == "6e71edae12b1b97f4d1f60370fef10105fa2faae0126114a169c64845d6126c9"

    def test_dai_permit_typehash(self):
        assert "0x" + DAI_PERMIT_TYPEHASH.hex() == MOCK_DAI_PERMIT_TYPEHASH

    def test_declared_uint_variant_is_versionless(self):
        assert bytes.fromhex(MOCK_VERSIONLESS_DOMAIN_TYPEHASH[2:]) in VERSIONLESS_DOMAIN_TYPEHASHES


class TestHashDomain:

    def test_reference_domain_separator(self, domain):
        assert "0x" + hash_domain(domain).hex() == MOCK_TOKEN_DOMAIN_SEPARATOR

    def test_address_case_does_not_matter(self, domain):
        upper = dataclasses.replace(domain, verifyingContract="0x" + MOCK_TOKEN_ADDRESS[2:].upper())
        assert hash_domain(upper) == hash_domain(domain)

    @pytest.mark.parametrize("field,value", [
        ("name", "Other Token"),
        ("version", "2"),
        ("chainId", 1),
        ("verifyingContract", MOCK_OTHER_ADDRESS),
    ])
    def test_each_field_changes_separator(self, domain, field, value):
        assert hash_domain(dataclasses.replace(domain, **{field: value})) != hash_domain(domain)

    def test_versionless_differs_from_versioned(self, domain):
        assert hash_domain(dataclasses.replace(domain, version=None)) != hash_domain(domain)


class TestDigest:

    def test_deterministic(self, domain, message):
        assert encode_digest(domain, PERMIT_TYPEHASH, message) == encode_digest(domain, PERMIT_TYPEHASH, message)
        assert len(encode_digest(domain, PERMIT_TYPEHASH, message)) == 32

    @pytest.mark.parametrize("field,value", [
        ("owner", MOCK_OTHER_ADDRESS),
        ("spender", MOCK_OTHER_ADDRESS),
        ("value", 1000000001),
        ("nonce", 1),
        ("deadline", MOCK_DEADLINE + 1),
    ])
    def test_each_permit_field_changes_digest(self, domain, message, field, value):
        changed = dataclasses.replace(message, **{field: value})
        assert encode_digest(domain, PERMIT_TYPEHASH, changed) != encode_digest(domain, PERMIT_TYPEHASH, message)

    def test_allowed_changes_dai_digest(self, domain, dai_message):
        revoked = dataclasses.replace(dai_message, allowed=False)
        assert (
            encode_digest(domain, DAI_PERMIT_TYPEHASH, revoked)
            != encode_digest(domain, DAI_PERMIT_TYPEHASH, dai_message)
        )

    def test_unsupported_message_type(self):
        with pytest.raises(TypeError):
            hash_struct(PERMIT_TYPEHASH, {"owner": MOCK_WALLET_ADDRESS})


class TestAgainstEthAccount:
    """The hand-built encoding must match a generic EIP-712 implementation."""

    def test_permit_typed_data(self, domain, message):
        signable = encode_typed_data(full_message=PermitTypedData(domain, message).to_dict())
        assert signable.header == hash_domain(domain)
        assert signable.body == hash_struct(PERMIT_TYPEHASH, message)

    def test_dai_permit_typed_data(self, domain, dai_message):
        signable = encode_typed_data(full_message=DaiPermitTypedData(domain, dai_message).to_dict())
        assert signable.header == hash_domain(domain)
        assert signable.body == hash_struct(DAI_PERMIT_TYPEHASH, dai_message)

    def test_versionless_domain(self, message):
        domain = EIP712Domain(
            name=MOCK_VERSIONLESS_TOKEN_NAME,
            version=None,
            chainId=MOCK_CHAIN_ID,
            verifyingContract=MOCK_VERSIONLESS_TOKEN_ADDRESS,
        )
        typed_data = PermitTypedData(domain, message).to_dict()
        assert "version" not in typed_data["domain"]
        assert [f["name"] for f in typed_data["types"]["EIP712Domain"]] == [
            "name", "chainId", "verifyingContract"
        ]

        signable = encode_typed_data(full_message=typed_data)
        assert signable.header == hash_domain(domain)
