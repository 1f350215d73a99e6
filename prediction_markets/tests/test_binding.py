"""Tests for ContractBinding: calls, transactions, receipts and log scans."""

from unittest.mock import Mock

import pytest
import requests
from eth_utils import keccak
from hexbytes import HexBytes
from web3.exceptions import ContractCustomError

from ..contracts.abi import MARKET_ABI
from ..contracts.binding import ContractBinding
from ..exceptions import (
    ConfigurationError,
    DomainRevertError,
    MissingEventError,
    TransactionFailedError,
    TransportError,
)

MARKET = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
USER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
TX_HASH = HexBytes(b"\xab" * 32)


@pytest.fixture
def connection():
    mock = Mock()
    mock.endpoint = "http://localhost:8545"
    mock.receipt_timeout = 5
    mock.get_default_account.return_value = USER
    return mock


@pytest.fixture
def binding(connection):
    binding = ContractBinding(connection, MARKET.lower(), MARKET_ABI, log_chunk_size=10)
    binding.contract = Mock()
    return binding


def revert_data(signature: str) -> str:
    return "0x" + keccak(text=signature)[:4].hex()


class TestSender:

    def test_address_is_checksummed(self, binding):
        assert binding.address == MARKET

    def test_explicit_sender_wins(self, binding):
        binding.set_default_sender(OTHER)
        assert binding.resolve_sender(USER.lower()) == USER

    def test_binding_default_before_connection_default(self, binding):
        binding.set_default_sender(OTHER)
        assert binding.resolve_sender() == OTHER

    def test_connection_default(self, binding):
        assert binding.resolve_sender() == USER

    def test_no_sender_available(self, binding, connection):
        connection.get_default_account.return_value = None
        with pytest.raises(ConfigurationError):
            binding.resolve_sender()


class TestCall:

    def test_returns_decoded_value(self, binding):
        binding.contract.functions.getFeeBPS.return_value.call.return_value = 100
        assert binding.call("getFeeBPS") == 100

    def test_custom_error_translated(self, binding):
        binding.contract.functions.getResolveOutcomeIndex.return_value.call.side_effect = (
            ContractCustomError(data=revert_data("OracleNotResolved()"))
        )
        with pytest.raises(DomainRevertError, match="Oracle not resolved"):
            binding.call("getResolveOutcomeIndex")

    def test_connection_failure_is_transport_error(self, binding):
        binding.contract.functions.state.return_value.call.side_effect = (
            requests.exceptions.ConnectionError("refused")
        )
        with pytest.raises(TransportError) as exc:
            binding.call("state")
        assert exc.value.endpoint == "http://localhost:8545"


class TestSend:

    def test_attaches_sender_and_value(self, binding, connection):
        fn = binding.contract.functions.buyShares.return_value
        fn.transact.return_value = TX_HASH
        receipt = {"status": 1, "blockNumber": 3, "gasUsed": 21000, "transactionHash": TX_HASH}
        connection.web3.eth.wait_for_transaction_receipt.return_value = receipt

        assert binding.send("buyShares", 1, 0, 0, 99, value=1) is receipt
        fn.transact.assert_called_once_with({"from": USER, "value": 1})
        connection.web3.eth.wait_for_transaction_receipt.assert_called_once_with(TX_HASH, timeout=5)

    def test_zero_value_not_attached(self, binding, connection):
        fn = binding.contract.functions.closeMarket.return_value
        fn.transact.return_value = TX_HASH
        connection.web3.eth.wait_for_transaction_receipt.return_value = {
            "status": 1, "blockNumber": 3, "gasUsed": 21000
        }

        binding.send("closeMarket")
        fn.transact.assert_called_once_with({"from": USER})

    def test_gas_estimation_revert_translated(self, binding):
        binding.contract.functions.closeMarket.return_value.transact.side_effect = (
            ContractCustomError(data=revert_data("MarketCloseTimeNotPassed()"))
        )
        with pytest.raises(DomainRevertError, match="Market close time has not passed"):
            binding.send("closeMarket")

    def test_reverted_receipt_replayed_for_reason(self, binding, connection):
        binding.contract.functions.resolveMarket.return_value.transact.return_value = TX_HASH
        connection.web3.eth.wait_for_transaction_receipt.return_value = {
            "status": 0, "blockNumber": 8, "gasUsed": 50000
        }
        connection.web3.eth.get_transaction.return_value = {
            "from": USER, "to": MARKET, "input": "0x", "value": 0
        }
        connection.web3.eth.call.side_effect = ContractCustomError(
            data=revert_data("MarketResolveDelayNotPassed()")
        )

        with pytest.raises(DomainRevertError, match="Market resolve delay has not passed"):
            binding.send("resolveMarket")

        connection.web3.eth.call.assert_called_once_with(
            {"from": USER, "to": MARKET, "data": "0x", "value": 0}, 7
        )

    def test_reverted_receipt_without_reason(self, binding, connection):
        binding.contract.functions.resolveMarket.return_value.transact.return_value = TX_HASH
        connection.web3.eth.wait_for_transaction_receipt.return_value = {
            "status": 0, "blockNumber": 8, "gasUsed": 50000
        }
        connection.web3.eth.get_transaction.return_value = {
            "from": USER, "to": MARKET, "input": "0x", "value": 0
        }
        connection.web3.eth.call.return_value = b""

        with pytest.raises(TransactionFailedError) as exc:
            binding.send("resolveMarket")
        assert exc.value.tx_hash == TX_HASH.to_0x_hex()
        assert exc.value.block_number == 8


class TestLogs:

    def test_scans_in_chunks(self, binding):
        event = binding.contract.events.SharesBought.return_value
        event.get_logs.side_effect = lambda **kwargs: [kwargs["from_block"]]

        logs = binding.get_logs("SharesBought", {"_buyer": USER}, from_block=0, to_block=25)

        assert logs == [0, 10, 20]
        ranges = [(c.kwargs["from_block"], c.kwargs["to_block"]) for c in event.get_logs.call_args_list]
        assert ranges == [(0, 9), (10, 19), (20, 25)]
        assert all(c.kwargs["argument_filters"] == {"_buyer": USER} for c in event.get_logs.call_args_list)

    def test_defaults_to_start_block_and_latest(self, binding, connection):
        binding.set_start_block(95)
        connection.get_block_number.return_value = 100
        event = binding.contract.events.SharesSold.return_value
        event.get_logs.return_value = []

        binding.get_logs("SharesSold")

        event.get_logs.assert_called_once_with(argument_filters=None, from_block=95, to_block=100)

    def test_empty_range(self, binding):
        event = binding.contract.events.SharesSold.return_value
        assert binding.get_logs("SharesSold", from_block=10, to_block=9) == []
        event.get_logs.assert_not_called()


class TestReceiptEvents:

    def test_extracts_event_from_this_contract(self, binding):
        ours = {"address": MARKET, "args": {"_amount": 1}}
        theirs = {"address": OTHER, "args": {"_amount": 2}}
        binding.contract.events.FeesClaimed.return_value.process_receipt.return_value = [theirs, ours]

        assert binding.extract_event({"transactionHash": TX_HASH}, "FeesClaimed") is ours

    def test_missing_event(self, binding):
        binding.contract.events.LiquidityAdded.return_value.process_receipt.return_value = []

        with pytest.raises(MissingEventError, match="LiquidityAdded event not found") as exc:
            binding.extract_event({"transactionHash": TX_HASH}, "LiquidityAdded")
        assert exc.value.tx_hash == TX_HASH.to_0x_hex()
