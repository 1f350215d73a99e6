"""
Prediction Markets Client Library

Client for an on-chain binary prediction market protocol: a factory that
deploys markets, each pricing two outcome shares with an AMM, with liquidity
provision, fee accrual and oracle-driven resolution.
"""

from .connection import AnvilConnection, Connection, ConnectionRegistry, HttpConnection
from .contracts import (
    ArtifactStore,
    CentralizedOracle,
    ContractBinding,
    Market,
    MarketAMM,
    MarketFactory,
    decode_revert,
)
from .models import (
    AddLiquidityArgs,
    AddLiquidityResult,
    BuySharesArgs,
    BuySharesResult,
    ClaimResult,
    CreateMarketArgs,
    CreateMarketResult,
    FormattedETH,
    MarketFactoryDeployOptions,
    MarketInfo,
    MarketInfoFull,
    MarketPoolData,
    MarketResolutionData,
    MarketState,
    OracleDeployOptions,
    PoolSnapshot,
    RemoveLiquidityArgs,
    RemoveLiquidityResult,
    SellSharesArgs,
    SellSharesResult,
    UserFeeState,
    UserPosition,
    format_eth,
)
from .exceptions import (
    PredictionMarketsError,
    ValidationError,
    ExpiredDeadlineError,
    ContractError,
    DomainRevertError,
    UnmatchedRevertError,
    MissingEventError,
    TransactionFailedError,
    DeploymentError,
    DecodingError,
    TransportError,
    ConfigurationError,
    ChainNotConfiguredError,
    ArtifactError,
)
from .config import PredictionMarketsSettings, get_settings, get_chains
from .logging_config import setup_logging, setup_logging_from_settings
from .metrics import get_metrics
from .service import ContractsRegistry, PredictionMarketsService

__version__ = "0.1.0"

__all__ = [
    # Connections
    "Connection",
    "HttpConnection",
    "AnvilConnection",
    "ConnectionRegistry",
    # Contracts
    "ArtifactStore",
    "CentralizedOracle",
    "ContractBinding",
    "Market",
    "MarketAMM",
    "MarketFactory",
    "decode_revert",
    # Models
    "AddLiquidityArgs",
    "AddLiquidityResult",
    "BuySharesArgs",
    "BuySharesResult",
    "ClaimResult",
    "CreateMarketArgs",
    "CreateMarketResult",
    "FormattedETH",
    "MarketFactoryDeployOptions",
    "MarketInfo",
    "MarketInfoFull",
    "MarketPoolData",
    "MarketResolutionData",
    "MarketState",
    "OracleDeployOptions",
    "PoolSnapshot",
    "RemoveLiquidityArgs",
    "RemoveLiquidityResult",
    "SellSharesArgs",
    "SellSharesResult",
    "UserFeeState",
    "UserPosition",
    "format_eth",
    # Exceptions
    "PredictionMarketsError",
    "ValidationError",
    "ExpiredDeadlineError",
    "ContractError",
    "DomainRevertError",
    "UnmatchedRevertError",
    "MissingEventError",
    "TransactionFailedError",
    "DeploymentError",
    "DecodingError",
    "TransportError",
    "ConfigurationError",
    "ChainNotConfiguredError",
    "ArtifactError",
    # Config
    "PredictionMarketsSettings",
    "get_settings",
    "get_chains",
    # Observability
    "setup_logging",
    "setup_logging_from_settings",
    "get_metrics",
    # Service
    "ContractsRegistry",
    "PredictionMarketsService",
]
