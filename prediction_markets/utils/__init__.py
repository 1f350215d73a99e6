"""Utility modules for the prediction markets client."""

from .numeric import BPS, ONE, fixed_point_ratio, from_wei, price_from_raw, to_uint
from .validators import (
    assert_deadline,
    to_timestamp,
    validate_address,
    validate_create_market_args,
)

__all__ = [
    "BPS",
    "ONE",
    "fixed_point_ratio",
    "from_wei",
    "price_from_raw",
    "to_uint",
    "assert_deadline",
    "to_timestamp",
    "validate_address",
    "validate_create_market_args",
]
