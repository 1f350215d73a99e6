"""
Type definitions for the prediction markets client.

Uses Pydantic for runtime validation. On-chain amounts stay integer wei;
prices and percentages are Decimal for exact display values.
"""

from enum import IntEnum
from typing import Optional, Union
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils.numeric import from_wei

TimestampInput = Union[datetime, int, float, str, Decimal]
UintInput = Union[int, str, Decimal]


class MarketState(IntEnum):
    """Market lifecycle. Transitions only move forward."""
    OPEN = 0
    CLOSED = 1
    RESOLVED = 2


class FormattedETH(BaseModel):
    """Wei amount with its gwei and ether representations."""
    model_config = ConfigDict(frozen=True)

    wei: int
    gwei: Decimal
    eth: Decimal


def format_eth(wei: int) -> FormattedETH:
    """
    Build a FormattedETH from an integer wei amount.

    Example:
        >>> format_eth(10**18).eth
        Decimal('1')
    """
    wei = int(wei)
    return FormattedETH(wei=wei, gwei=from_wei(wei, "gwei"), eth=from_wei(wei, "ether"))


# Pool models
class Shares(BaseModel):
    """Outcome share counts."""
    total: int = Field(..., ge=0)
    available: int = Field(..., ge=0)


class Outcome(BaseModel):
    """Single market outcome."""
    name: str
    shares: Shares


class MarketPoolData(BaseModel):
    """Pool reserves as returned by getPoolData."""
    balance: int = Field(..., ge=0)
    liquidity: int = Field(..., ge=0)
    total_available_shares: int = Field(..., ge=0)
    outcomes: list[Outcome]

    def snapshot(self) -> "PoolSnapshot":
        """Point-in-time AMM input for this pool."""
        return PoolSnapshot(
            liquidity=self.liquidity,
            outcome_shares=[outcome.shares.available for outcome in self.outcomes],
        )


class PoolSnapshot(BaseModel):
    """AMM pool state: the MarketPoolState tuple of the AMM pure functions."""
    model_config = ConfigDict(frozen=True)

    liquidity: int = Field(..., ge=0)
    outcome_shares: list[int]

    def as_tuple(self) -> tuple:
        return (self.liquidity, list(self.outcome_shares))


class LiquidityQuote(BaseModel):
    """Result of the AMM's getAddLiquidityData."""
    liquidity_shares: int
    outcome_shares_to_return: list[int]
    new_outcome_shares: list[int]


class RemoveLiquidityQuote(BaseModel):
    """Result of the AMM's getRemoveLiquidityData."""
    liquidity_value: int
    outcome_shares_to_return: list[int]
    new_outcome_shares: list[int]


# Market views
class MarketInfo(BaseModel):
    """Basic market information."""
    address: str
    question: str
    outcome_count: int
    close_time: datetime
    create_time: datetime
    closed_at: Optional[datetime] = None


class MarketInfoFull(MarketInfo):
    """Market information composed from every view function."""
    outcome_names: list[str]
    outcome_prices: list[Decimal]
    fee_bps: int
    state: MarketState
    resolve_delay: int
    resolved: bool
    resolved_outcome_index: Optional[int] = None
    creator: str
    oracle: str
    market_amm: str


class MarketResolutionData(BaseModel):
    """Resolution status."""
    resolved: bool
    resolved_outcome_index: Optional[int] = None
    resolve_delay: int


class UserFeeState(BaseModel):
    """Liquidity provider fee balances (wei)."""
    claimable: int
    claimed: int


class UserPosition(BaseModel):
    """
    User position in one outcome, rebuilt from trade events.

    pnl = closing_volume + current_shares_value - open_volume
    """
    outcome_index: int
    shares: int = 0
    shares_bought: int = 0
    open_volume: int = 0
    closing_volume: int = 0
    avg_entry_price: Decimal = Decimal(0)
    pnl: int = 0
    pnl_percentage: Decimal = Decimal(0)
    current_price: Decimal = Decimal(0)
    current_shares_value: int = 0


# Trading requests
class AddLiquidityArgs(BaseModel):
    """Add liquidity request. amount is wei."""
    amount: UintInput
    deadline: TimestampInput


class RemoveLiquidityArgs(BaseModel):
    """Remove liquidity request. shares is liquidity shares."""
    shares: UintInput
    deadline: TimestampInput


class BuySharesArgs(BaseModel):
    """Buy outcome shares request."""
    amount: UintInput
    outcome_index: UintInput
    min_outcome_shares: UintInput = 0
    deadline: TimestampInput


class SellSharesArgs(BaseModel):
    """Sell outcome shares request. received_amount is the wei to receive."""
    received_amount: UintInput
    outcome_index: UintInput
    max_outcome_shares: UintInput
    deadline: TimestampInput


# Trading results
class AddLiquidityResult(BaseModel):
    liquidity_shares: int
    outcome_shares: list[int]


class RemoveLiquidityResult(BaseModel):
    amount: FormattedETH
    outcome_shares: list[int]


class BuySharesResult(BaseModel):
    """Buy result. amount is net of fee."""
    amount: FormattedETH
    shares_bought: int
    fee: FormattedETH
    executed_price: Decimal


class SellSharesResult(BaseModel):
    received_amount: FormattedETH
    shares_sold: int
    fee: FormattedETH
    executed_price: Decimal


class ClaimResult(BaseModel):
    amount: FormattedETH


# Factory
class CreateMarketArgs(BaseModel):
    """Market creation request."""
    question: str
    outcome_names: list[str]
    close_time: TimestampInput
    oracle: Optional[str] = None
    initial_liquidity: UintInput
    resolve_delay_seconds: UintInput
    fee_bps: UintInput

    @field_validator("initial_liquidity", "resolve_delay_seconds", "fee_bps", mode="before")
    @classmethod
    def keep_signed(cls, v):
        """Negative values are rejected with the client's own messages, not here."""
        if isinstance(v, float):
            return Decimal(str(v))
        return v


class MarketFactoryDeployOptions(BaseModel):
    """Factory deployment. Missing implementations are deployed first."""
    owner: str
    market_implementation: Optional[str] = None
    market_amm_implementation: Optional[str] = None
    default_oracle_implementation: Optional[str] = None


class OracleDeployOptions(BaseModel):
    owner: str


class ChainConfig(BaseModel):
    """RPC and contract addresses for one chain."""
    name: str
    chain_id: int
    rpc_url: str
    market_factory_address: Optional[str] = None
    market_factory_start_block: Optional[int] = None


class CreateMarketResult(BaseModel):
    """Address and full info of a newly created market."""
    address: str
    market_info: MarketInfoFull
