"""
MarketAMM client.

The AMM contract exposes its pricing curve as pure functions over a pool
snapshot. Quotes are obtained by calling those functions with eth_call, so
the client always prices exactly like the deployed contract.
"""

import logging
from decimal import Decimal
from typing import Optional

from ..connection import Connection
from ..models import LiquidityQuote, PoolSnapshot, RemoveLiquidityQuote
from ..utils.numeric import price_from_raw, to_uint
from .abi import MARKET_AMM_ABI
from .binding import ContractBinding
from .deployable import ArtifactStore, Deployable

logger = logging.getLogger(__name__)


class MarketAMM(Deployable):
    """Read-only pricing client for a MarketAMM deployment."""

    ARTIFACT_NAME = "MarketAMM"
    ABI = MARKET_AMM_ABI

    def __init__(self, binding: ContractBinding):
        self.binding = binding

    @classmethod
    def at(cls, connection: Connection, address: str) -> "MarketAMM":
        return cls(ContractBinding(connection, address, cls.ABI))

    @classmethod
    def deploy(
        cls,
        connection: Connection,
        artifacts: ArtifactStore,
        sender: Optional[str] = None
    ) -> "MarketAMM":
        """Deploy a MarketAMM. Markets share one stateless instance."""
        return cls.at(connection, cls.deploy_implementation(connection, artifacts, sender))

    @property
    def address(self) -> str:
        return self.binding.address

    def get_buy_shares(self, amount: int, outcome_index: int, snapshot: PoolSnapshot) -> int:
        """Shares received for `amount` wei (after fees) on an outcome."""
        return self.binding.call(
            "getBuyOutcomeData",
            to_uint(amount, "amount"),
            to_uint(outcome_index, "outcome index"),
            snapshot.as_tuple()
        )

    def get_sell_shares(self, amount: int, outcome_index: int, snapshot: PoolSnapshot) -> int:
        """Shares that must be sold to receive `amount` wei."""
        return self.binding.call(
            "getSellOutcomeData",
            to_uint(amount, "amount"),
            to_uint(outcome_index, "outcome index"),
            snapshot.as_tuple()
        )

    def get_outcome_price(
        self,
        outcome_index: int,
        total_available_shares: int,
        snapshot: PoolSnapshot
    ) -> Decimal:
        raw = self.binding.call(
            "getOutcomePrice",
            to_uint(outcome_index, "outcome index"),
            to_uint(total_available_shares, "total available shares"),
            snapshot.as_tuple()
        )
        return price_from_raw(raw)

    def add_liquidity_quote(self, amount: int, snapshot: PoolSnapshot) -> LiquidityQuote:
        liquidity_shares, to_return, new_shares = self.binding.call(
            "getAddLiquidityData",
            to_uint(amount, "amount"),
            snapshot.as_tuple()
        )
        return LiquidityQuote(
            liquidity_shares=liquidity_shares,
            outcome_shares_to_return=list(to_return),
            new_outcome_shares=list(new_shares),
        )

    def remove_liquidity_quote(self, shares: int, snapshot: PoolSnapshot) -> RemoveLiquidityQuote:
        liquidity_value, to_return, new_shares = self.binding.call(
            "getRemoveLiquidityData",
            to_uint(shares, "shares"),
            snapshot.as_tuple()
        )
        return RemoveLiquidityQuote(
            liquidity_value=liquidity_value,
            outcome_shares_to_return=list(to_return),
            new_outcome_shares=list(new_shares),
        )

    def claim_liquidity_quote(
        self,
        liquidity_shares: int,
        resolved_outcome_shares: int,
        liquidity: int
    ) -> int:
        """Wei paid out for liquidity shares once the market is resolved."""
        return self.binding.call(
            "getClaimLiquidityData",
            to_uint(liquidity_shares, "liquidity shares"),
            to_uint(resolved_outcome_shares, "resolved outcome shares"),
            to_uint(liquidity, "liquidity")
        )

    def __repr__(self) -> str:
        return f"MarketAMM(address={self.address})"
