"""
Service facade over the market clients.

One method per inbound operation, keyed by chain id, so an HTTP layer can
delegate to it directly. Market reads fan out over a thread pool.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from .config import PredictionMarketsSettings, get_chains, get_settings
from .connection import ConnectionRegistry
from .contracts.binding import DEFAULT_LOG_CHUNK_SIZE
from .contracts.market import Market
from .contracts.market_factory import MarketFactory
from .exceptions import ChainNotConfiguredError
from .metrics import track_time
from .models import ChainConfig, CreateMarketArgs, CreateMarketResult, MarketInfoFull, UserPosition
from .utils.structured_logging import get_logger, set_correlation_id
from .utils.validators import validate_address

logger = get_logger(__name__)


class ContractsRegistry:
    """
    MarketFactory clients keyed by chain id.

    Args:
        connections: Connection per chain
        chains: Chain configuration carrying factory addresses
        log_chunk_size: Block span per eth_getLogs request
    """

    def __init__(
        self,
        connections: ConnectionRegistry,
        chains: List[ChainConfig],
        log_chunk_size: int = DEFAULT_LOG_CHUNK_SIZE
    ):
        self.connections = connections
        self.log_chunk_size = log_chunk_size
        self._chains: Dict[int, ChainConfig] = {chain.chain_id: chain for chain in chains}

    @classmethod
    def from_settings(
        cls,
        connections: ConnectionRegistry,
        settings: Optional[PredictionMarketsSettings] = None
    ) -> "ContractsRegistry":
        settings = settings or get_settings()
        return cls(connections, get_chains(settings), settings.log_scan_chunk_size)

    def get_market_factory(self, chain_id: int) -> MarketFactory:
        """
        Raises:
            ChainNotConfiguredError: If the chain has no connection or no
                factory address
        """
        connection = self.connections.get(chain_id)
        chain = self._chains.get(chain_id)
        if chain is None or not chain.market_factory_address:
            raise ChainNotConfiguredError(
                f"MarketFactory address not configured for chain {chain_id}",
                chain_id=chain_id
            )
        return MarketFactory.at(
            connection,
            chain.market_factory_address,
            start_block=chain.market_factory_start_block,
            log_chunk_size=self.log_chunk_size
        )

    def get_market(self, chain_id: int, address: str) -> Market:
        return Market.at(
            self.connections.get(chain_id),
            address,
            log_chunk_size=self.log_chunk_size
        )


class PredictionMarketsService:
    """
    Inbound operations: create a market, list markets, list a user's markets
    and positions.

    Example:
        >>> settings = get_settings()
        >>> get_metrics(port=settings.metrics_port)
        >>> connections = ConnectionRegistry.from_settings(settings)
        >>> service = PredictionMarketsService(
        ...     ContractsRegistry.from_settings(connections, settings),
        ...     batch_max_workers=settings.batch_max_workers,
        ... )
        >>> service.get_markets(31337)
    """

    def __init__(self, contracts: ContractsRegistry, batch_max_workers: int = 8):
        self.contracts = contracts
        self.batch_max_workers = batch_max_workers

    @track_time("create_market")
    def create_market(self, chain_id: int, args: CreateMarketArgs) -> CreateMarketResult:
        set_correlation_id()
        factory = self.contracts.get_market_factory(chain_id)

        try:
            market = factory.create_market(args)
            market_info = market.get_full_info()
        except Exception as e:
            logger.error(
                "create_market_failed",
                str(e),
                chain_id=chain_id,
                error_type=type(e).__name__
            )
            raise

        logger.info("market_created", chain_id=chain_id, market=market.address)
        return CreateMarketResult(address=market.address, market_info=market_info)

    @track_time("get_markets")
    def get_markets(self, chain_id: int) -> Dict[str, MarketInfoFull]:
        """Full info of every factory market, keyed by market address."""
        set_correlation_id()
        factory = self.contracts.get_market_factory(chain_id)

        try:
            infos = self._fetch_full_info(factory.get_markets())
        except Exception as e:
            logger.error("get_markets_failed", str(e), chain_id=chain_id,
                         error_type=type(e).__name__)
            raise

        logger.info("markets_fetched", chain_id=chain_id, count=len(infos))
        return {info.address: info for info in infos}

    @track_time("get_user_markets")
    def get_user_markets(self, chain_id: int, user: str) -> List[MarketInfoFull]:
        """Full info of the markets `user` created."""
        set_correlation_id()
        user = validate_address(user, "user")
        factory = self.contracts.get_market_factory(chain_id)

        try:
            infos = self._fetch_full_info(factory.get_user_created_markets(user))
        except Exception as e:
            logger.error("get_user_markets_failed", str(e), chain_id=chain_id,
                         user=user, error_type=type(e).__name__)
            raise

        logger.info("user_markets_fetched", chain_id=chain_id, user=user, count=len(infos))
        return infos

    @track_time("get_user_positions")
    def get_user_positions(self, chain_id: int, user: str) -> Dict[str, List[UserPosition]]:
        """Positions of `user` in every factory market, keyed by market address."""
        set_correlation_id()
        user = validate_address(user, "user")
        factory = self.contracts.get_market_factory(chain_id)

        try:
            markets = factory.get_markets()
            with ThreadPoolExecutor(max_workers=self.batch_max_workers) as executor:
                positions = list(executor.map(
                    lambda market: market.get_user_positions(user), markets
                ))
        except Exception as e:
            logger.error("get_user_positions_failed", str(e), chain_id=chain_id,
                         user=user, error_type=type(e).__name__)
            raise

        logger.info("user_positions_fetched", chain_id=chain_id, user=user,
                    markets=len(markets))
        return {market.address: market_positions
                for market, market_positions in zip(markets, positions)}

    def _fetch_full_info(self, markets: List[Market]) -> List[MarketInfoFull]:
        if not markets:
            return []
        with ThreadPoolExecutor(max_workers=self.batch_max_workers) as executor:
            return list(executor.map(lambda market: market.get_full_info(), markets))
