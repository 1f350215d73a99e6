"""Tests for position and PnL reconstruction."""

from decimal import Decimal

import pytest

from ..contracts.positions import reconstruct_positions
from ..exceptions import DecodingError

HALF = 5 * 10**17


def trade(outcome_index, amount, fee, shares):
    return {"args": {"_outcomeIndex": outcome_index, "_amount": amount, "_fee": fee, "_shares": shares}}


class TestReconstructPositions:

    def test_no_trades_gives_zero_positions(self):
        positions = reconstruct_positions(2, [HALF, HALF], [], [])

        assert [p.outcome_index for p in positions] == [0, 1]
        for position in positions:
            assert position.shares == 0
            assert position.open_volume == 0
            assert position.closing_volume == 0
            assert position.pnl == 0
            assert position.pnl_percentage == Decimal(0)
            assert position.avg_entry_price == Decimal(0)
            assert position.current_price == Decimal("0.5")

    def test_buy_then_partial_sell(self):
        """
        Buy 1 ETH (fee 0.01) for 1.98 shares, then sell 0.99 shares for 0.6 ETH
        with the price at 0.5.
        """
        buys = [trade(0, 10**18, 10**16, 198 * 10**16)]
        sells = [trade(0, 6 * 10**17, 10**15, 99 * 10**16)]

        yes, no = reconstruct_positions(2, [HALF, HALF], buys, sells)

        assert yes.open_volume == 99 * 10**16
        assert yes.closing_volume == 6 * 10**17
        assert yes.shares_bought == 198 * 10**16
        assert yes.shares == 99 * 10**16
        assert yes.avg_entry_price == Decimal("0.5")
        assert yes.current_shares_value == 495 * 10**15
        assert yes.pnl == 105 * 10**15
        assert yes.pnl_percentage == Decimal(105 * 10**15) * 100 / Decimal(99 * 10**16)

        assert no.pnl == 0
        assert no.shares == 0

    def test_buy_then_sell_everything(self):
        """Buy 100 wei with a 1 wei fee, then sell all 150 shares for 120 wei."""
        buys = [trade(0, 100, 1, 150)]
        sells = [trade(0, 120, 2, 150)]

        yes, no = reconstruct_positions(2, [HALF, HALF], buys, sells)

        assert yes.shares == 0
        assert yes.open_volume == 99
        assert yes.closing_volume == 120
        assert yes.current_shares_value == 0
        assert yes.pnl == 120 - 99
        assert no.open_volume == 0

    def test_loss_is_negative(self):
        buys = [trade(1, 10**18, 0, 2 * 10**18)]
        positions = reconstruct_positions(2, [9 * 10**17, 10**17], buys, [])

        assert positions[1].current_shares_value == 2 * 10**17
        assert positions[1].pnl == -8 * 10**17
        assert positions[1].pnl_percentage == Decimal(-80)

    def test_oversold_shares_valued_at_zero(self):
        sells = [trade(0, 10**17, 0, 10**17)]
        position = reconstruct_positions(2, [HALF, HALF], [], sells)[0]

        assert position.shares == -10**17
        assert position.current_shares_value == 0
        assert position.pnl == 10**17
        assert position.avg_entry_price == Decimal(0)
        assert position.pnl_percentage == Decimal(0)

    def test_event_outcome_out_of_range(self):
        with pytest.raises(DecodingError):
            reconstruct_positions(2, [HALF, HALF], [trade(2, 1, 0, 1)], [])

    def test_price_count_must_match(self):
        with pytest.raises(DecodingError):
            reconstruct_positions(2, [HALF], [], [])
