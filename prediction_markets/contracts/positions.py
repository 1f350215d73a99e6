"""
Position and PnL reconstruction from trade events.

Positions are not stored on-chain; they are rebuilt by replaying a user's
SharesBought and SharesSold events and valuing the remaining shares at the
live outcome price.
"""

from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Sequence

from ..exceptions import DecodingError
from ..models import UserPosition
from ..utils.numeric import ONE, fixed_point_ratio, price_from_raw


def _event_args(log: Mapping[str, Any]) -> Mapping[str, Any]:
    return log["args"] if "args" in log else log


def reconstruct_positions(
    outcome_count: int,
    raw_prices: Sequence[int],
    buys: Iterable[Mapping[str, Any]],
    sells: Iterable[Mapping[str, Any]]
) -> List[UserPosition]:
    """
    Reduce a user's trade events into one position per outcome.

    Args:
        outcome_count: Number of market outcomes
        raw_prices: Current 1e18-scaled price per outcome
        buys: SharesBought logs (or their args) for the user
        sells: SharesSold logs (or their args) for the user

    Returns:
        Positions indexed by outcome, including outcomes never traded

    Raises:
        DecodingError: If an event refers to an outcome the market lacks
    """
    if len(raw_prices) != outcome_count:
        raise DecodingError(
            f"Expected {outcome_count} outcome prices, got {len(raw_prices)}"
        )

    open_volume = [0] * outcome_count
    closing_volume = [0] * outcome_count
    shares = [0] * outcome_count
    shares_bought = [0] * outcome_count

    for log in sells:
        args = _event_args(log)
        index = _outcome_index(args, outcome_count)
        closing_volume[index] += args["_amount"]
        shares[index] -= args["_shares"]

    for log in buys:
        args = _event_args(log)
        index = _outcome_index(args, outcome_count)
        # Cost basis excludes the fee
        open_volume[index] += args["_amount"] - args["_fee"]
        shares_bought[index] += args["_shares"]
        shares[index] += args["_shares"]

    positions = []
    for index in range(outcome_count):
        price_raw = raw_prices[index]
        current_value = shares[index] * price_raw // ONE if shares[index] > 0 else 0
        pnl = closing_volume[index] + current_value - open_volume[index]

        if open_volume[index] > 0:
            pnl_percentage = Decimal(pnl) * 100 / Decimal(open_volume[index])
        else:
            pnl_percentage = Decimal(0)

        if shares_bought[index] > 0:
            avg_entry_price = fixed_point_ratio(open_volume[index], shares_bought[index])
        else:
            avg_entry_price = Decimal(0)

        positions.append(UserPosition(
            outcome_index=index,
            shares=shares[index],
            shares_bought=shares_bought[index],
            open_volume=open_volume[index],
            closing_volume=closing_volume[index],
            avg_entry_price=avg_entry_price,
            pnl=pnl,
            pnl_percentage=pnl_percentage,
            current_price=price_from_raw(price_raw),
            current_shares_value=current_value,
        ))

    return positions


def _outcome_index(args: Mapping[str, Any], outcome_count: int) -> int:
    index = args["_outcomeIndex"]
    if not 0 <= index < outcome_count:
        raise DecodingError(f"Event outcome index {index} out of range")
    return index
