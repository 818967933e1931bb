"""
Tests for trade analysis (aggregate by side and exit reason).
"""
import pytest

from backtest_core.evaluation.trade_analysis import (
    aggregate_trades_by_exit_reason,
    aggregate_trades_by_side,
)
from backtest_core.evaluation.types import ExitReason, PositionSide, Trade


@pytest.fixture
def trades():
    return [
        Trade(PositionSide.LONG, 100.0, 110.0, 1.0, 10.0, 0, 1),
        Trade(PositionSide.LONG, 100.0, 95.0, 2.0, -10.0, 1, 2),
        Trade(PositionSide.SHORT, 50.0, 45.0, 1.0, 5.0, 2, 3, exit_reason=ExitReason.END_OF_DATA),
    ]


class TestAggregateTrades:
    """Test grouping of closed trades."""

    def test_by_side(self, trades):
        """Long and short trades are aggregated separately."""
        out = aggregate_trades_by_side(trades)
        assert set(out) == {"long", "short"}
        assert out["long"]["count"] == 2
        assert out["long"]["win_rate_pct"] == pytest.approx(50.0)
        assert out["long"]["total_pnl"] == pytest.approx(0.0)
        assert out["long"]["avg_win_pct"] == pytest.approx(10.0)
        assert out["long"]["avg_loss_pct"] == pytest.approx(-5.0)
        assert out["short"]["count"] == 1
        assert out["short"]["avg_pnl_pct"] == pytest.approx(10.0)

    def test_by_exit_reason(self, trades):
        """Trades are grouped by signal exit and end-of-data exit."""
        out = aggregate_trades_by_exit_reason(trades)
        assert out["signal"]["count"] == 2
        assert out["end_of_data"]["count"] == 1

    def test_empty(self):
        """No trades gives zero counts for every group."""
        out = aggregate_trades_by_side([])
        assert out["long"]["count"] == 0
        assert out["short"]["win_rate_pct"] == 0.0
