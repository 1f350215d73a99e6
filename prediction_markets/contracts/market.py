"""
Market client.

Trading (liquidity, buys, sells, claims), state transitions, views and
position reconstruction for a single binary prediction market.

Every amount is integer wei on the wire. Results carry wei plus Decimal
display values; prices are 1e18-scaled integers on-chain and Decimal here.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from web3.types import TxReceipt

from ..connection import Connection
from ..exceptions import DecodingError, DomainRevertError, UnmatchedRevertError
from ..models import (
    AddLiquidityArgs,
    AddLiquidityResult,
    BuySharesArgs,
    BuySharesResult,
    ClaimResult,
    LiquidityQuote,
    MarketInfo,
    MarketInfoFull,
    MarketPoolData,
    MarketResolutionData,
    MarketState,
    Outcome,
    PoolSnapshot,
    RemoveLiquidityArgs,
    RemoveLiquidityQuote,
    RemoveLiquidityResult,
    SellSharesArgs,
    SellSharesResult,
    Shares,
    UserFeeState,
    UserPosition,
    format_eth,
)
from ..utils.numeric import BPS, ONE, fixed_point_ratio, price_from_raw, to_uint
from ..utils.validators import assert_deadline, validate_address
from .abi import MARKET_ABI
from .binding import DEFAULT_LOG_CHUNK_SIZE, ContractBinding
from .deployable import Deployable
from .market_amm import MarketAMM
from .positions import reconstruct_positions

logger = logging.getLogger(__name__)


def _from_unix(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


class Market(Deployable):
    """
    Client for one deployed Market.

    Markets are created by the MarketFactory; use MarketFactory.create_market
    or Market.at for an existing address.

    Example:
        >>> market = Market.at(connection, "0x...", start_block=120)
        >>> market.buy_shares(BuySharesArgs(
        ...     amount=10**17, outcome_index=0, min_outcome_shares=0,
        ...     deadline=int(time.time()) + 300,
        ... ))
    """

    ARTIFACT_NAME = "Market"
    ABI = MARKET_ABI

    def __init__(self, binding: ContractBinding):
        self.binding = binding
        self._amm: Optional[MarketAMM] = None

    @classmethod
    def at(
        cls,
        connection: Connection,
        address: str,
        start_block: Optional[int] = None,
        default_sender: Optional[str] = None,
        log_chunk_size: int = DEFAULT_LOG_CHUNK_SIZE
    ) -> "Market":
        return cls(ContractBinding(
            connection,
            address,
            cls.ABI,
            start_block=start_block,
            default_sender=default_sender,
            log_chunk_size=log_chunk_size
        ))

    @property
    def address(self) -> str:
        return self.binding.address

    @property
    def start_block(self) -> Optional[int]:
        return self.binding.start_block

    def set_start_block(self, block_number: Optional[int]) -> "Market":
        self.binding.set_start_block(block_number)
        return self

    def set_default_sender(self, sender: Optional[str]) -> "Market":
        self.binding.set_default_sender(sender)
        return self

    @property
    def amm(self) -> MarketAMM:
        """AMM this market prices against (address read once)."""
        if self._amm is None:
            self._amm = MarketAMM.at(self.binding.connection, self.get_market_amm_address())
        return self._amm

    # ========== Trading ==========

    def add_liquidity(self, args: AddLiquidityArgs, sender: Optional[str] = None) -> AddLiquidityResult:
        """
        Provide liquidity. The pool may return outcome shares to balance itself.

        Raises:
            ExpiredDeadlineError: If the deadline has passed
            DomainRevertError: On contract revert (e.g. MarketClosed)
            MissingEventError: If LiquidityAdded was not emitted
        """
        deadline = assert_deadline(args.deadline)
        amount = to_uint(args.amount, "amount")
        sender = self.binding.resolve_sender(sender)
        outcome_count = self.get_info().outcome_count

        shares_before = self.get_user_outcome_shares(sender, outcome_count)
        receipt = self.binding.send("addLiquidity", amount, deadline, value=amount, sender=sender)
        event = self.binding.extract_event(receipt, "LiquidityAdded")
        shares_after = self.get_user_outcome_shares(sender, outcome_count)

        result = AddLiquidityResult(
            liquidity_shares=event["args"]["_liquidityShares"],
            outcome_shares=_diff(shares_after, shares_before),
        )
        logger.info(f"Added liquidity to {self.address}: {result.liquidity_shares} shares")
        return result

    def remove_liquidity(
        self,
        args: RemoveLiquidityArgs,
        sender: Optional[str] = None
    ) -> RemoveLiquidityResult:
        """Burn liquidity shares for wei plus any outcome shares the pool returns."""
        deadline = assert_deadline(args.deadline)
        shares = to_uint(args.shares, "shares")
        sender = self.binding.resolve_sender(sender)
        outcome_count = self.get_info().outcome_count

        shares_before = self.get_user_outcome_shares(sender, outcome_count)
        receipt = self.binding.send("removeLiquidity", shares, deadline, sender=sender)
        event = self.binding.extract_event(receipt, "LiquidityRemoved")
        shares_after = self.get_user_outcome_shares(sender, outcome_count)

        return RemoveLiquidityResult(
            amount=format_eth(event["args"]["_amount"]),
            outcome_shares=_diff(shares_after, shares_before),
        )

    def buy_shares(self, args: BuySharesArgs, sender: Optional[str] = None) -> BuySharesResult:
        """
        Buy outcome shares for `amount` wei (fee included).

        The executed price is the fee-free amount divided by the shares
        received, truncated to 18 decimals.
        """
        deadline = assert_deadline(args.deadline)
        amount = to_uint(args.amount, "amount")
        outcome_index = to_uint(args.outcome_index, "outcome index")
        min_shares = to_uint(args.min_outcome_shares, "min outcome shares")

        receipt = self.binding.send(
            "buyShares", amount, outcome_index, min_shares, deadline,
            value=amount,
            sender=sender
        )
        event_args = self.binding.extract_event(receipt, "SharesBought")["args"]

        fee = event_args["_fee"]
        shares = event_args["_shares"]
        amount_after_fee = amount - fee

        logger.info(
            f"Bought {shares} shares of outcome {outcome_index} on {self.address} "
            f"(fee {fee})"
        )
        return BuySharesResult(
            amount=format_eth(amount_after_fee),
            shares_bought=shares,
            fee=format_eth(fee),
            executed_price=fixed_point_ratio(amount_after_fee, shares),
        )

    def sell_shares(self, args: SellSharesArgs, sender: Optional[str] = None) -> SellSharesResult:
        """
        Sell outcome shares to receive `received_amount` wei.

        No value is attached; the contract pays out.
        """
        deadline = assert_deadline(args.deadline)
        received_amount = to_uint(args.received_amount, "received amount")
        outcome_index = to_uint(args.outcome_index, "outcome index")
        max_shares = to_uint(args.max_outcome_shares, "max outcome shares")

        receipt = self.binding.send(
            "sellShares", received_amount, outcome_index, max_shares, deadline,
            sender=sender
        )
        event_args = self.binding.extract_event(receipt, "SharesSold")["args"]

        received = event_args["_amount"]
        shares = event_args["_shares"]

        logger.info(f"Sold {shares} shares of outcome {outcome_index} on {self.address}")
        return SellSharesResult(
            received_amount=format_eth(received),
            shares_sold=shares,
            fee=format_eth(event_args["_fee"]),
            executed_price=fixed_point_ratio(received, shares),
        )

    def close_market(self, sender: Optional[str] = None) -> TxReceipt:
        """Move the market from Open to Closed once its close time has passed."""
        return self.binding.send("closeMarket", sender=sender)

    def resolve_market(self, sender: Optional[str] = None) -> TxReceipt:
        """Move the market from Closed to Resolved using the oracle's outcome."""
        return self.binding.send("resolveMarket", sender=sender)

    def claim_fees(self, sender: Optional[str] = None) -> ClaimResult:
        return self._claim("claimFees", "FeesClaimed", sender)

    def claim_liquidity(self, sender: Optional[str] = None) -> ClaimResult:
        return self._claim("claimLiquidity", "LiquidityClaimed", sender)

    def claim_rewards(self, sender: Optional[str] = None) -> ClaimResult:
        return self._claim("claimRewards", "RewardsClaimed", sender)

    def _claim(self, fn_name: str, event_name: str, sender: Optional[str]) -> ClaimResult:
        receipt = self.binding.send(fn_name, sender=sender)
        amount = self.binding.extract_event(receipt, event_name)["args"]["_amount"]
        logger.info(f"{event_name} on {self.address}: {amount} wei")
        return ClaimResult(amount=format_eth(amount))

    # ========== Views ==========

    def get_info(self) -> MarketInfo:
        question, outcome_count, close_time, create_time, closed_at = self.binding.call("getInfo")
        return MarketInfo(
            address=self.address,
            question=question,
            outcome_count=outcome_count,
            close_time=_from_unix(close_time),
            create_time=_from_unix(create_time),
            closed_at=_from_unix(closed_at) if closed_at > 0 else None,
        )

    def get_full_info(self) -> MarketInfoFull:
        """
        Everything the market exposes, in one model.

        Any failing read fails the whole call.
        """
        info = self.get_info()
        outcomes = self.get_outcomes()
        resolved_outcome_index = self.get_resolved_outcome()

        return MarketInfoFull(
            **info.model_dump(),
            outcome_names=[outcome.name for outcome in outcomes],
            outcome_prices=self.get_outcome_prices(info.outcome_count),
            fee_bps=self.get_fee_bps(),
            state=self.get_market_state(),
            resolve_delay=self.get_resolve_delay(),
            resolved=resolved_outcome_index is not None,
            resolved_outcome_index=resolved_outcome_index,
            creator=self.get_creator(),
            oracle=self.get_oracle(),
            market_amm=self.get_market_amm_address(),
        )

    def get_pool_data(self) -> MarketPoolData:
        balance, liquidity, total_available, outcomes = self.binding.call("getPoolData")
        return MarketPoolData(
            balance=balance,
            liquidity=liquidity,
            total_available_shares=total_available,
            outcomes=[
                Outcome(name=name, shares=Shares(total=total, available=available))
                for name, (total, available) in outcomes
            ],
        )

    def get_pool_snapshot(self) -> PoolSnapshot:
        return self.get_pool_data().snapshot()

    def get_outcomes(self) -> List[Outcome]:
        names, total_shares, pool_shares = self.binding.call("getOutcomes")
        return [
            Outcome(name=name, shares=Shares(total=total, available=available))
            for name, total, available in zip(names, total_shares, pool_shares)
        ]

    def get_market_state(self) -> MarketState:
        """
        Raises:
            DecodingError: If the contract reports an unknown state
        """
        raw = self.binding.call("state")
        try:
            return MarketState(raw)
        except ValueError as e:
            raise DecodingError(f"Invalid market state: {raw}") from e

    def get_user_outcome_shares(self, user: str, outcome_count: Optional[int] = None) -> List[int]:
        """User's shares for every outcome, by outcome index."""
        user = validate_address(user, "user")
        if outcome_count is None:
            outcome_count = self.get_info().outcome_count
        return [
            self.binding.call("getUserOutcomeShares", user, index)
            for index in range(outcome_count)
        ]

    def get_user_liquidity_shares(self, user: str) -> int:
        return self.binding.call("getUserLiquidityShares", validate_address(user, "user"))

    def get_user_claimable_fees(self, user: str) -> int:
        return self.binding.call("getClaimableFees", validate_address(user, "user"))

    def get_user_claimed_fees(self, user: str) -> int:
        return self.binding.call("getUserClaimedFees", validate_address(user, "user"))

    def get_user_fee_state(self, user: str) -> UserFeeState:
        return UserFeeState(
            claimable=self.get_user_claimable_fees(user),
            claimed=self.get_user_claimed_fees(user),
        )

    def get_user_shares_value(self, user: str, outcome_index: int) -> int:
        """Wei value of the user's current shares in one outcome at the live price."""
        outcome_index = to_uint(outcome_index, "outcome index")
        shares = self.get_user_outcome_shares(user)
        if outcome_index >= len(shares):
            raise DecodingError(f"Outcome index {outcome_index} out of range")
        return shares[outcome_index] * self._get_outcome_price_raw(outcome_index) // ONE

    def get_outcome_price(self, outcome_index: int) -> Decimal:
        return price_from_raw(self._get_outcome_price_raw(outcome_index))

    def get_outcome_prices(self, outcome_count: Optional[int] = None) -> List[Decimal]:
        if outcome_count is None:
            outcome_count = self.get_info().outcome_count
        return [self.get_outcome_price(index) for index in range(outcome_count)]

    def _get_outcome_price_raw(self, outcome_index: int) -> int:
        return self.binding.call("getOutcomePrice", to_uint(outcome_index, "outcome index"))

    def get_resolution_data(self) -> MarketResolutionData:
        resolved_outcome_index = self.get_resolved_outcome()
        return MarketResolutionData(
            resolved=resolved_outcome_index is not None,
            resolved_outcome_index=resolved_outcome_index,
            resolve_delay=self.get_resolve_delay(),
        )

    def get_resolved_outcome(self) -> Optional[int]:
        """
        Winning outcome index, or None while the market is unresolved.

        The contract reverts until resolution; that revert is the only one
        the client absorbs.
        """
        try:
            return self.binding.call("getResolveOutcomeIndex")
        except (DomainRevertError, UnmatchedRevertError) as e:
            logger.debug(f"Market {self.address} not resolved: {e.message}")
            return None

    def get_fee_bps(self) -> int:
        return self.binding.call("getFeeBPS")

    def get_resolve_delay(self) -> int:
        return self.binding.call("resolveDelay")

    def get_creator(self) -> str:
        return self.binding.call("creator")

    def get_oracle(self) -> str:
        return self.binding.call("oracle")

    def get_market_amm_address(self) -> str:
        return self.binding.call("marketAMM")

    # ========== Quotes ==========

    def calc_buy_shares(self, amount: int, outcome_index: int) -> int:
        """
        Shares a buy of `amount` wei would receive now.

        The fee is deducted first, exactly as the contract does.
        """
        amount = to_uint(amount, "amount")
        fee = amount * self.get_fee_bps() // BPS
        return self.amm.get_buy_shares(amount - fee, outcome_index, self.get_pool_snapshot())

    def calc_sell_shares(self, amount: int, outcome_index: int) -> int:
        """Shares that must be sold now to receive `amount` wei."""
        return self.amm.get_sell_shares(amount, outcome_index, self.get_pool_snapshot())

    def quote_add_liquidity(self, amount: int) -> LiquidityQuote:
        return self.amm.add_liquidity_quote(amount, self.get_pool_snapshot())

    def quote_remove_liquidity(self, shares: int) -> RemoveLiquidityQuote:
        return self.amm.remove_liquidity_quote(shares, self.get_pool_snapshot())

    # ========== Positions ==========

    def get_user_positions(self, user: str) -> List[UserPosition]:
        """
        Rebuild the user's position and PnL per outcome from trade events.

        pnl = closing volume + current shares value - open volume
        """
        user = validate_address(user, "user")
        outcome_count = self.get_info().outcome_count
        raw_prices = [self._get_outcome_price_raw(index) for index in range(outcome_count)]
        to_block = self.binding.connection.get_block_number()

        with ThreadPoolExecutor(max_workers=2) as executor:
            buys_future = executor.submit(
                self.binding.get_logs, "SharesBought", {"_buyer": user}, None, to_block
            )
            sells_future = executor.submit(
                self.binding.get_logs, "SharesSold", {"_seller": user}, None, to_block
            )
            buys = buys_future.result()
            sells = sells_future.result()

        logger.debug(
            f"Replaying {len(buys)} buys and {len(sells)} sells for {user} on {self.address}"
        )
        return reconstruct_positions(outcome_count, raw_prices, buys, sells)

    def __repr__(self) -> str:
        return f"Market(address={self.address})"


def _diff(after: List[int], before: List[int]) -> List[int]:
    return [a - b for a, b in zip(after, before)]
