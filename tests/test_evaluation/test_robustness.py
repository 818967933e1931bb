"""
Tests for trade-order robustness (Monte Carlo reshuffle of trade P&L).
"""
import numpy as np
import pytest

from backtest_core.evaluation.robustness import trade_order_robustness
from backtest_core.evaluation.types import PositionSide, Trade
from backtest_core.shared.errors import InvalidParameterError


@pytest.fixture
def pnls():
    return [100.0, -300.0, 200.0, -100.0, 50.0]


class TestTradeOrderRobustness:
    """Test drawdown distribution over random orderings."""

    def test_original_drawdown(self, pnls):
        """Drawdown of the ledger in its original order."""
        result = trade_order_robustness(pnls, 1000.0, iterations=50, seed=1)
        # 1000 -> 1100 -> 800: (1100 - 800) / 1100
        assert result.original_max_drawdown == pytest.approx(300 / 1100)

    def test_seed_is_reproducible(self, pnls):
        """Same seed gives the same distribution."""
        first = trade_order_robustness(pnls, 1000.0, iterations=200, seed=42)
        second = trade_order_robustness(pnls, 1000.0, iterations=200, seed=42)
        np.testing.assert_array_equal(first.drawdowns, second.drawdowns)
        assert first.mean_max_drawdown == second.mean_max_drawdown

    def test_distribution_statistics(self, pnls):
        """Percentiles are ordered and bounded by the worst ordering."""
        result = trade_order_robustness(pnls, 1000.0, iterations=500, seed=3)
        assert len(result.drawdowns) == 500
        assert result.p5_max_drawdown <= result.median_max_drawdown <= result.p95_max_drawdown
        assert result.p95_max_drawdown <= result.worst_max_drawdown
        # Worst possible ordering: both losses first, 1000 -> 700 -> 600
        assert result.worst_max_drawdown <= 0.4 + 1e-12
        assert 0.0 <= result.probability_worse <= 1.0

    def test_drawdowns_read_only(self, pnls):
        """The drawdown array cannot be modified."""
        result = trade_order_robustness(pnls, 1000.0, iterations=10, seed=0)
        assert not result.drawdowns.flags.writeable

    def test_accepts_trades(self):
        """Trade objects are reduced to their P&L."""
        trades = [
            Trade(PositionSide.LONG, 100.0, 90.0, 1.0, -10.0, 0, 1),
            Trade(PositionSide.SHORT, 100.0, 90.0, 1.0, 10.0, 1, 2),
        ]
        result = trade_order_robustness(trades, 100.0, iterations=20, seed=0)
        assert result.original_max_drawdown == pytest.approx(0.1)

    def test_all_winners_never_draw_down(self):
        """Only winning trades never draw down in any order."""
        result = trade_order_robustness([10.0, 20.0, 5.0], 100.0, iterations=20, seed=0)
        assert result.worst_max_drawdown == 0.0
        assert result.probability_worse == 0.0

    def test_no_trades(self):
        """No trades gives zero drawdowns."""
        result = trade_order_robustness([], 100.0, iterations=10, seed=0)
        assert result.original_max_drawdown == 0.0
        assert result.worst_max_drawdown == 0.0

    def test_invalid_arguments(self, pnls):
        """Zero iterations or non-positive capital raise InvalidParameterError."""
        with pytest.raises(InvalidParameterError):
            trade_order_robustness(pnls, 1000.0, iterations=0)
        with pytest.raises(InvalidParameterError):
            trade_order_robustness(pnls, 0.0)
