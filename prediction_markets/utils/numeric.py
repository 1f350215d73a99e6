"""
Fixed-point helpers for on-chain amounts.

Contracts work in integer wei and 1e18-scaled prices. These helpers convert
between those integers and Decimal display values without going through float.
"""

from typing import Any
from decimal import Decimal

from web3 import Web3

from ..exceptions import ValidationError

# 1e18 fixed-point scale used by the AMM for prices
ONE = 10 ** 18
# Basis points denominator for fees
BPS = 10_000
MAX_UINT256 = 2 ** 256 - 1


def to_uint(value: Any, field_name: str = "value") -> int:
    """
    Normalize an integer-like argument to the uint256 wire format.

    Accepts int, str and integral Decimal. Floats are rejected because they
    cannot carry wei amounts exactly.

    Raises:
        ValidationError: If the value is not a non-negative integer in range
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer, got bool")

    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        try:
            result = int(value.strip(), 0)
        except ValueError as e:
            raise ValidationError(f"Invalid integer for {field_name}: {value}") from e
    elif isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValidationError(f"{field_name} must be integral, got {value}")
        result = int(value)
    else:
        raise ValidationError(f"{field_name} must be an integer, got {type(value).__name__}")

    if result < 0 or result > MAX_UINT256:
        raise ValidationError(f"{field_name} out of uint256 range: {result}")

    return result


def fixed_point_ratio(numerator: int, denominator: int) -> Decimal:
    """
    Divide two wei integers into a Decimal with 18 digits of precision.

    Scales the numerator by ONE before the integer division, then rescales, so
    the result truncates exactly like the contract's fixed-point math.

    Examples:
        >>> fixed_point_ratio(99, 200)
        Decimal('0.495')
    """
    if denominator == 0:
        return Decimal(0)
    return Decimal(numerator * ONE // denominator) / Decimal(ONE)


def price_from_raw(raw_price: int) -> Decimal:
    """Convert a 1e18-scaled contract price to Decimal."""
    return Decimal(raw_price) / Decimal(ONE)


def from_wei(wei: int, unit: str = "ether") -> Decimal:
    """
    Convert wei to a Decimal amount in the given unit.

    Examples:
        >>> from_wei(1500000000000000000)
        Decimal('1.5')
    """
    return Decimal(Web3.from_wei(wei, unit))

