"""
Configuration management for the prediction markets client.

Loads settings from environment variables with validation.
"""

from typing import Optional
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import ChainConfig

# Chain ids of the supported networks
ETHEREUM_CHAIN_ID = 1
POLYGON_CHAIN_ID = 137
SEPOLIA_CHAIN_ID = 11155111
LOCAL_CHAIN_ID = 31337

LOCAL_RPC_URL = "http://localhost:8545"


class PredictionMarketsSettings(BaseSettings):
    """
    Prediction markets client settings.

    Loads from environment variables with PREDICTION_MARKETS_ prefix.
    """
    model_config = SettingsConfigDict(
        env_prefix="PREDICTION_MARKETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # RPC endpoints; chains without one are not served
    ethereum_rpc_url: Optional[str] = Field(None, description="Ethereum mainnet RPC URL")
    polygon_rpc_url: Optional[str] = Field(None, description="Polygon RPC URL")
    sepolia_rpc_url: Optional[str] = Field(None, description="Sepolia RPC URL")
    local_rpc_url: Optional[str] = Field(
        default=LOCAL_RPC_URL,
        description="Local development node (anvil/hardhat) RPC URL"
    )

    # Deployed MarketFactory proxies
    ethereum_market_factory: Optional[str] = Field(None, description="MarketFactory on Ethereum")
    polygon_market_factory: Optional[str] = Field(None, description="MarketFactory on Polygon")
    sepolia_market_factory: Optional[str] = Field(None, description="MarketFactory on Sepolia")
    local_market_factory: Optional[str] = Field(None, description="MarketFactory on the local node")

    # Block the factory was deployed at; log scans start here
    ethereum_market_factory_start_block: Optional[int] = Field(None, ge=0)
    polygon_market_factory_start_block: Optional[int] = Field(None, ge=0)
    sepolia_market_factory_start_block: Optional[int] = Field(None, ge=0)
    local_market_factory_start_block: Optional[int] = Field(None, ge=0)

    # Signing
    wallet_private_key: Optional[SecretStr] = Field(
        None,
        description="Private key added to every connection for signing"
    )

    # Timeouts
    request_timeout: float = Field(default=30.0, ge=1.0, description="RPC request timeout (seconds)")
    receipt_timeout: float = Field(default=120.0, ge=1.0, description="Transaction receipt timeout (seconds)")

    # Log scanning
    log_scan_chunk_size: int = Field(
        default=10_000,
        ge=1,
        description="Max block span of a single eth_getLogs request"
    )

    # Batch operations
    batch_max_workers: int = Field(default=8, ge=1, le=50,
                                   description="ThreadPoolExecutor workers for batch reads")

    # Compiled contracts for deployments
    artifacts_dir: str = Field(default="out", description="Foundry/Hardhat artifacts directory")

    # Metrics
    metrics_port: Optional[int] = Field(None, ge=1, le=65535, description="Prometheus metrics HTTP port")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(None, description="Also write logs to this rotating file")
    log_json: bool = Field(default=False, description="Emit JSON logs")

    def __repr__(self) -> str:
        """Safe repr without sensitive data."""
        return (
            f"PredictionMarketsSettings("
            f"chains={[chain.chain_id for chain in get_chains(self)]}, "
            f"wallet_configured={self.wallet_private_key is not None}"
            ")"
        )


def get_settings() -> PredictionMarketsSettings:
    """
    Get prediction markets settings.

    Returns:
        Validated settings instance
    """
    return PredictionMarketsSettings()


def get_chains(settings: PredictionMarketsSettings) -> list[ChainConfig]:
    """
    Chains that have an RPC URL configured.

    Args:
        settings: Loaded settings

    Returns:
        One ChainConfig per served chain
    """
    candidates = [
        ("ethereum", ETHEREUM_CHAIN_ID),
        ("polygon", POLYGON_CHAIN_ID),
        ("sepolia", SEPOLIA_CHAIN_ID),
        ("local", LOCAL_CHAIN_ID),
    ]

    chains = []
    for name, chain_id in candidates:
        rpc_url = getattr(settings, f"{name}_rpc_url")
        if not rpc_url:
            continue
        chains.append(ChainConfig(
            name=name,
            chain_id=chain_id,
            rpc_url=rpc_url,
            market_factory_address=getattr(settings, f"{name}_market_factory"),
            market_factory_start_block=getattr(settings, f"{name}_market_factory_start_block"),
        ))
    return chains
