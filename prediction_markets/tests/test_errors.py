"""Tests for revert decoding."""

import pytest
from eth_abi import encode
from eth_utils import keccak
from web3.exceptions import ContractCustomError, ContractLogicError

from ..contracts.errors import (
    ERROR_KINDS,
    AmountMismatch,
    InvalidResolveDelay,
    OnlyBinaryMarketSupported,
    decode_revert,
    translate_contract_error,
)
from ..contracts.abi import ERROR_ABIS
from ..exceptions import DomainRevertError, UnmatchedRevertError


def selector(signature: str) -> bytes:
    return keccak(text=signature)[:4]


class TestDecodeRevert:
    """Raw revert data to typed errors."""

    def test_only_binary_market_supported(self):
        error = decode_revert(selector("OnlyBinaryMarketSupported()"))
        assert isinstance(error, OnlyBinaryMarketSupported)
        assert error.message == "Only binary market supported"
        assert error.args == ()

    def test_hex_string_input(self):
        error = decode_revert("0x" + selector("MarketClosed()").hex())
        assert error.name == "MarketClosed"
        assert error.message == "Market is closed"

    def test_arguments_are_decoded(self):
        data = selector("AmountMismatch(uint256,uint256)") + encode(["uint256", "uint256"], [5, 7])
        error = decode_revert(data)
        assert error == AmountMismatch(expected=5, actual=7)
        assert error.args == (5, 7)
        assert error.message == "Amount 7 does not match expected amount 5"

    def test_resolve_delay_bounds_in_message(self):
        data = selector("InvalidResolveDelay(uint256,uint256)") + encode(
            ["uint256", "uint256"], [60, 604800]
        )
        error = decode_revert(data)
        assert isinstance(error, InvalidResolveDelay)
        assert error.message == "Invalid resolve delay. Must be between 60 and 604800"

    def test_address_arguments_checksummed(self):
        account = "0x70997970c51812dc3a010c7d01b50e0d17dc79c8"
        data = selector("OwnableUnauthorizedAccount(address)") + encode(["address"], [account])
        error = decode_revert(data)
        assert error.account == "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
        assert error.message == (
            "The account address 0x70997970C51812dc3A010C7d01b50e0d17dc79C8 is unauthorized."
        )

    def test_amm_error(self):
        error = decode_revert(selector("InsufficientLiquidity()"))
        assert error.message == "The pool does not have enough liquidity to complete the trade."

    def test_oracle_error(self):
        error = decode_revert(selector("OutcomeNotResolvedYet()"))
        assert error.message == "Outcome not resolved yet"

    def test_shared_error_uses_factory_wording(self):
        assert decode_revert(selector("ZeroAddress()")).message == "The address is zero."
        assert decode_revert(selector("InvalidInitialization()")).message == (
            "The initialization is invalid."
        )

    @pytest.mark.parametrize("data", [None, "", "0x", b"\x01\x02", "0xdeadbeef", "not hex"])
    def test_unknown_data_returns_none(self, data):
        assert decode_revert(data) is None

    def test_truncated_arguments_return_none(self):
        data = selector("AmountMismatch(uint256,uint256)") + b"\x00" * 10
        assert decode_revert(data) is None


def test_every_abi_error_has_a_class():
    """Each custom error in the known ABIs decodes to a typed error."""
    names = {
        fragment["name"]
        for abi in ERROR_ABIS
        for fragment in abi
        if fragment["type"] == "error"
    }
    assert names <= set(ERROR_KINDS)


class TestTranslateContractError:
    def test_custom_error_becomes_domain_revert(self):
        data = "0x" + selector("MinimumSharesNotMet()").hex()
        translated = translate_contract_error(ContractCustomError(data, data=data))

        assert isinstance(translated, DomainRevertError)
        assert translated.name == "MinimumSharesNotMet"
        assert str(translated) == "Minimum shares not met"

    def test_unknown_revert_keeps_reason(self):
        translated = translate_contract_error(
            ContractLogicError("execution reverted: something else", data="0x12345678")
        )
        assert isinstance(translated, UnmatchedRevertError)
        assert translated.reason == "execution reverted: something else"
        assert translated.data == "0x12345678"
