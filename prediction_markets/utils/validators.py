"""
Input validation utilities.

Validates deadlines, addresses and market creation arguments before any
transaction is built.
"""

import time
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any, Optional, Union

from web3 import Web3

from ..exceptions import ValidationError, ExpiredDeadlineError
from .numeric import BPS, to_uint

MIN_QUESTION_LENGTH = 6
BINARY_OUTCOME_COUNT = 2
MIN_RESOLVE_DELAY = 60          # 1 minute
MAX_RESOLVE_DELAY = 604_800     # 7 days
MIN_FEE_BPS = 0
MAX_FEE_BPS = BPS

TimestampLike = Union[datetime, int, float, str, Decimal]


def to_timestamp(value: TimestampLike, field_name: str = "timestamp") -> int:
    """
    Normalize a date or unix-seconds value to integer unix seconds.

    Naive datetimes are taken as UTC.

    Args:
        value: datetime, or unix seconds as int/float/str/Decimal

    Returns:
        Unix timestamp in seconds (floored)

    Raises:
        ValidationError: If the value cannot be interpreted as a time
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name}: {value!r}")

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())

    if isinstance(value, int):
        return value

    try:
        if isinstance(value, str):
            dec = Decimal(value.strip())
        elif isinstance(value, float):
            dec = Decimal(str(value))
        elif isinstance(value, Decimal):
            dec = value
        else:
            raise ValidationError(f"Invalid {field_name} type: {type(value).__name__}")
    except InvalidOperation as e:
        raise ValidationError(f"Invalid {field_name}: {value!r}") from e

    return int(dec.to_integral_value(rounding=ROUND_FLOOR))


def assert_deadline(deadline: TimestampLike, now: Optional[float] = None) -> int:
    """
    Fail fast if a transaction deadline has already passed.

    The contract checks the deadline again on-chain; this only avoids sending
    a transaction that is certain to revert.

    Returns:
        The deadline as unix seconds

    Raises:
        ExpiredDeadlineError: If the deadline is in the past
    """
    timestamp = to_timestamp(deadline, "deadline")
    current = time.time() if now is None else now

    if timestamp < current:
        raise ExpiredDeadlineError(
            "Invalid Deadline: Deadline has passed",
            deadline=timestamp
        )

    return timestamp


def validate_address(address: Any, field_name: str = "address") -> str:
    """
    Validate an Ethereum address and return its checksum form.

    Raises:
        ValidationError: If address is malformed
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise ValidationError(f"Invalid {field_name}: {address!r}")
    return Web3.to_checksum_address(address)


def validate_create_market_args(
    question: str,
    outcome_names: list,
    close_time: TimestampLike,
    initial_liquidity: Any,
    resolve_delay_seconds: Any,
    fee_bps: Any,
    now: Optional[float] = None
) -> dict:
    """
    Validate market creation arguments before submission.

    Returns:
        Dict of normalized wire values: close_time, initial_liquidity,
        resolve_delay, fee_bps

    Raises:
        ValidationError: On the first failing rule
    """
    if len(question) <= MIN_QUESTION_LENGTH:
        raise ValidationError("Question must be longer than 6 characters")

    if len(outcome_names) != BINARY_OUTCOME_COUNT:
        raise ValidationError("Only binary markets are supported")

    close_timestamp = to_timestamp(close_time, "close time")
    current = int(time.time()) if now is None else int(now)
    if close_timestamp <= current:
        raise ValidationError("Close time must be greater than current time")

    # Zero liquidity is accepted; only negative amounts are rejected
    liquidity = _to_int(initial_liquidity, "initial liquidity")
    if liquidity < 0:
        raise ValidationError("Initial liquidity must be greater than 0")

    resolve_delay = _to_int(resolve_delay_seconds, "resolve delay")
    if resolve_delay < MIN_RESOLVE_DELAY or resolve_delay > MAX_RESOLVE_DELAY:
        raise ValidationError(
            "Resolve delay must be greater than 1 minute and less than 7 days"
        )

    fee = _to_int(fee_bps, "fee BPS")
    if fee < MIN_FEE_BPS or fee > MAX_FEE_BPS:
        raise ValidationError(f"Fee BPS must be between {MIN_FEE_BPS} and {MAX_FEE_BPS}")

    return {
        "close_time": close_timestamp,
        "initial_liquidity": to_uint(liquidity, "initial liquidity"),
        "resolve_delay": resolve_delay,
        "fee_bps": fee,
    }


def _to_int(value: Any, field_name: str) -> int:
    """Signed integer conversion; range checks are left to the caller."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name}: {value!r}")
    if isinstance(value, int):
        return value
    try:
        dec = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValidationError(f"Invalid {field_name}: {value!r}") from e
    if dec != dec.to_integral_value():
        raise ValidationError(f"{field_name} must be an integer, got {value!r}")
    return int(dec)
