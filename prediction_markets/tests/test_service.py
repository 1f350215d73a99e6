"""Tests for the service facade and the contracts registry."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import Mock

import pytest

from ..connection import ConnectionRegistry
from ..contracts.market_factory import MarketFactory
from ..exceptions import ChainNotConfiguredError, DomainRevertError, ValidationError
from ..contracts.errors import MarketClosed
from ..models import ChainConfig, CreateMarketArgs, MarketInfoFull, MarketState, UserPosition
from ..service import ContractsRegistry, PredictionMarketsService

FACTORY = "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0"
MARKET = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
MARKET_2 = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
USER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def full_info(address: str) -> MarketInfoFull:
    return MarketInfoFull(
        address=address,
        question="Will it rain tomorrow?",
        outcome_count=2,
        close_time=datetime(2030, 1, 1, tzinfo=timezone.utc),
        create_time=datetime(2029, 1, 1, tzinfo=timezone.utc),
        outcome_names=["Yes", "No"],
        outcome_prices=[Decimal("0.5"), Decimal("0.5")],
        fee_bps=100,
        state=MarketState.OPEN,
        resolve_delay=3600,
        resolved=False,
        creator=USER,
        oracle=MARKET_2,
        market_amm=MARKET_2,
    )


def fake_market(address: str) -> Mock:
    market = Mock()
    market.address = address
    market.get_full_info.return_value = full_info(address)
    return market


@pytest.fixture
def factory():
    return Mock()


@pytest.fixture
def service(factory):
    contracts = Mock()
    contracts.get_market_factory.return_value = factory
    return PredictionMarketsService(contracts, batch_max_workers=2)


class TestPredictionMarketsService:

    def test_create_market(self, service, factory):
        factory.create_market.return_value = fake_market(MARKET)
        args = CreateMarketArgs(
            question="Will it rain tomorrow?",
            outcome_names=["Yes", "No"],
            close_time=1893456000,
            initial_liquidity=10**18,
            resolve_delay_seconds=3600,
            fee_bps=100,
        )

        result = service.create_market(31337, args)

        service.contracts.get_market_factory.assert_called_once_with(31337)
        factory.create_market.assert_called_once_with(args)
        assert result.address == MARKET
        assert result.market_info.question == "Will it rain tomorrow?"

    def test_create_market_error_propagates(self, service, factory):
        factory.create_market.side_effect = ValidationError("Only binary markets are supported")

        with pytest.raises(ValidationError, match="Only binary markets"):
            service.create_market(31337, Mock())

    def test_get_markets_keyed_by_address(self, service, factory):
        factory.get_markets.return_value = [fake_market(MARKET), fake_market(MARKET_2)]

        markets = service.get_markets(31337)

        assert list(markets) == [MARKET, MARKET_2]
        assert markets[MARKET_2].address == MARKET_2

    def test_get_markets_empty(self, service, factory):
        factory.get_markets.return_value = []
        assert service.get_markets(31337) == {}

    def test_get_markets_revert_propagates(self, service, factory):
        broken = fake_market(MARKET)
        broken.get_full_info.side_effect = DomainRevertError(MarketClosed())
        factory.get_markets.return_value = [broken]

        with pytest.raises(DomainRevertError) as exc:
            service.get_markets(31337)
        assert exc.value.name == "MarketClosed"

    def test_get_user_markets(self, service, factory):
        factory.get_user_created_markets.return_value = [fake_market(MARKET)]

        markets = service.get_user_markets(31337, USER.lower())

        factory.get_user_created_markets.assert_called_once_with(USER)
        assert [m.address for m in markets] == [MARKET]

    def test_get_user_markets_invalid_user(self, service):
        with pytest.raises(ValidationError):
            service.get_user_markets(31337, "0x1234")

    def test_get_user_positions(self, service, factory):
        first, second = fake_market(MARKET), fake_market(MARKET_2)
        first.get_user_positions.return_value = [UserPosition(outcome_index=0, shares=5)]
        second.get_user_positions.return_value = []
        factory.get_markets.return_value = [first, second]

        positions = service.get_user_positions(31337, USER)

        first.get_user_positions.assert_called_once_with(USER)
        assert positions[MARKET][0].shares == 5
        assert positions[MARKET_2] == []


def fake_connection(chain_id: int) -> Mock:
    connection = Mock()
    connection.get_chain_id.return_value = chain_id
    return connection


class TestContractsRegistry:

    @pytest.fixture
    def connections(self):
        registry = ConnectionRegistry()
        registry.register(31337, fake_connection(31337))
        registry.register(137, fake_connection(137))
        return registry

    def test_factory_for_configured_chain(self, connections):
        chains = [ChainConfig(name="local", chain_id=31337, rpc_url="http://localhost:8545",
                              market_factory_address=FACTORY, market_factory_start_block=7)]
        contracts = ContractsRegistry(connections, chains, log_chunk_size=500)

        factory = contracts.get_market_factory(31337)

        assert isinstance(factory, MarketFactory)
        assert factory.address == FACTORY
        assert factory.start_block == 7
        assert factory.binding.log_chunk_size == 500

    def test_chain_without_factory_address(self, connections):
        chains = [ChainConfig(name="polygon", chain_id=137, rpc_url="https://polygon.example")]
        contracts = ContractsRegistry(connections, chains)

        with pytest.raises(ChainNotConfiguredError,
                           match="MarketFactory address not configured for chain 137"):
            contracts.get_market_factory(137)

    def test_chain_without_connection(self, connections):
        with pytest.raises(ChainNotConfiguredError, match="Connection not initialized for chain 1"):
            ContractsRegistry(connections, []).get_market_factory(1)

    def test_get_market(self, connections):
        market = ContractsRegistry(connections, []).get_market(137, MARKET.lower())
        assert market.address == MARKET
