"""Tests for input validators."""

import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from ..exceptions import ExpiredDeadlineError, ValidationError
from ..utils.validators import (
    assert_deadline,
    to_timestamp,
    validate_address,
    validate_create_market_args,
)

NOW = 1_700_000_000


def create_args(**overrides):
    args = dict(
        question="Will it rain tomorrow?",
        outcome_names=["Yes", "No"],
        close_time=NOW + 3600,
        initial_liquidity=10**18,
        resolve_delay_seconds=3600,
        fee_bps=100,
        now=NOW,
    )
    args.update(overrides)
    return args


class TestCreateMarketValidation:
    """Market creation arguments are checked before anything is sent."""

    def test_valid_args_return_wire_values(self):
        wire = validate_create_market_args(**create_args())
        assert wire == {
            "close_time": NOW + 3600,
            "initial_liquidity": 10**18,
            "resolve_delay": 3600,
            "fee_bps": 100,
        }

    def test_question_of_six_characters_rejected(self):
        with pytest.raises(ValidationError, match="Question must be longer than 6 characters"):
            validate_create_market_args(**create_args(question="Rain??"))

    def test_question_of_seven_characters_accepted(self):
        validate_create_market_args(**create_args(question="Rain???"))

    @pytest.mark.parametrize("names", [["Yes"], ["A", "B", "C"], []])
    def test_non_binary_outcomes_rejected(self, names):
        with pytest.raises(ValidationError, match="Only binary markets are supported"):
            validate_create_market_args(**create_args(outcome_names=names))

    def test_close_time_not_in_future_rejected(self):
        with pytest.raises(ValidationError, match="Close time must be greater than current time"):
            validate_create_market_args(**create_args(close_time=NOW))

    def test_close_time_as_datetime(self):
        close = datetime.fromtimestamp(NOW + 60, tz=timezone.utc)
        wire = validate_create_market_args(**create_args(close_time=close))
        assert wire["close_time"] == NOW + 60

    def test_negative_liquidity_rejected(self):
        with pytest.raises(ValidationError, match="Initial liquidity must be greater than 0"):
            validate_create_market_args(**create_args(initial_liquidity=-1))

    def test_zero_liquidity_accepted(self):
        wire = validate_create_market_args(**create_args(initial_liquidity=0))
        assert wire["initial_liquidity"] == 0

    @pytest.mark.parametrize("delay,ok", [(59, False), (60, True), (604800, True), (604801, False)])
    def test_resolve_delay_boundaries(self, delay, ok):
        args = create_args(resolve_delay_seconds=delay)
        if ok:
            assert validate_create_market_args(**args)["resolve_delay"] == delay
        else:
            with pytest.raises(ValidationError,
                               match="Resolve delay must be greater than 1 minute and less than 7 days"):
                validate_create_market_args(**args)

    @pytest.mark.parametrize("fee,ok", [(-1, False), (0, True), (10000, True), (10001, False)])
    def test_fee_boundaries(self, fee, ok):
        args = create_args(fee_bps=fee)
        if ok:
            assert validate_create_market_args(**args)["fee_bps"] == fee
        else:
            with pytest.raises(ValidationError, match="Fee BPS must be between 0 and 10000"):
                validate_create_market_args(**args)

    def test_string_amounts_are_normalized(self):
        wire = validate_create_market_args(**create_args(
            initial_liquidity="1000000000000000000", fee_bps="250"
        ))
        assert wire["initial_liquidity"] == 10**18
        assert wire["fee_bps"] == 250


class TestDeadline:
    """Deadline pre-flight check."""

    def test_future_deadline_returns_timestamp(self):
        assert assert_deadline(NOW + 10, now=NOW) == NOW + 10

    def test_deadline_equal_to_now_accepted(self):
        assert assert_deadline(NOW, now=NOW) == NOW

    def test_past_deadline_rejected(self):
        with pytest.raises(ExpiredDeadlineError, match="Invalid Deadline: Deadline has passed") as exc:
            assert_deadline(NOW - 1, now=NOW)
        assert exc.value.deadline == NOW - 1

    def test_expired_deadline_is_validation_error(self):
        with pytest.raises(ValidationError):
            assert_deadline(datetime.now(timezone.utc) - timedelta(minutes=5))

    def test_uses_wall_clock_by_default(self):
        assert assert_deadline(int(time.time()) + 600) > 0


class TestTimestamps:
    def test_naive_datetime_is_utc(self):
        assert to_timestamp(datetime(2024, 1, 1)) == 1704067200

    def test_fractional_seconds_floored(self):
        assert to_timestamp(1.9) == 1
        assert to_timestamp(Decimal("10.5")) == 10
        assert to_timestamp("42.99") == 42

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError):
            to_timestamp("tomorrow")

    def test_bool_rejected(self):
        with pytest.raises(ValidationError):
            to_timestamp(True)


def test_validate_address():
    """Addresses come back checksummed."""
    lower = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"
    assert validate_address(lower) == "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

    with pytest.raises(ValidationError):
        validate_address("0x1234")

    with pytest.raises(ValidationError):
        validate_address(None)
