"""
Tests for BacktestEngine: position state machine, fills, fees and equity curve.
"""
import numpy as np
import pandas as pd
import pytest

from backtest_core import run_backtest
from backtest_core.data.synthetic import generate_synthetic_candles
from backtest_core.evaluation.config import BacktestConfig
from backtest_core.evaluation.engine import BacktestEngine
from backtest_core.evaluation.types import ExitReason, PositionSide
from backtest_core.signals.config import SignalConfig
from backtest_core.shared.errors import MalformedCandleError
from backtest_core.shared.types import Candle


def make_candles(closes):
    timestamps = pd.date_range("2024-01-01", periods=len(closes), freq="h")
    return [
        Candle(timestamp=ts, open=c, high=c + 1, low=c - 1, close=c, volume=1000.0)
        for ts, c in zip(timestamps, closes)
    ]


@pytest.fixture
def crossover_candles():
    """Falling then rising: one bullish SMA(3)/SMA(5) crossover, on index 21."""
    closes = [100.0 - i for i in range(20)] + [81.0 + 2 * (i - 19) for i in range(20, 40)]
    return make_candles(closes)


@pytest.fixture
def bearish_crossover_candles():
    """Rising then falling: one bearish crossover, on index 21."""
    closes = [100.0 + i for i in range(20)] + [119.0 - 2 * (i - 19) for i in range(20, 40)]
    return make_candles(closes)


@pytest.fixture
def synthetic_candles():
    return generate_synthetic_candles(400, trend="crossover", seed=7, volatility=2.0)


def small_config(**kwargs):
    signal_kwargs = {
        k: kwargs.pop(k)
        for k in list(kwargs)
        if k in ("fast_period", "slow_period", "confidence_threshold", "signal_mode")
    }
    signal = SignalConfig(**{"fast_period": 3, "slow_period": 5, **signal_kwargs})
    return BacktestConfig(signal=signal, **{"window_size": 10, **kwargs})


class TestSingleCrossover:
    """One engineered crossover gives exactly one trade."""

    def test_one_buy_one_trade(self, crossover_candles):
        """One crossover gives one actionable signal and one trade."""
        result = run_backtest(crossover_candles, small_config())
        buys = [s for s in result.actionable_signals if s.direction == 1]
        assert len(result.actionable_signals) == 1
        assert buys[0].timestamp == crossover_candles[21].timestamp
        assert len(result.trades) == 1

    def test_fill_on_next_candle_close_with_slippage(self, crossover_candles):
        """Entry fills at the next candle's close plus slippage; exit at the last close minus slippage."""
        config = small_config(slippage_rate=0.01, fee_rate=0.0)
        trade = run_backtest(crossover_candles, config).trades[0]
        assert trade.side is PositionSide.LONG
        assert trade.opened_at == crossover_candles[22].timestamp
        assert trade.entry_price == pytest.approx(87.0 * 1.01)
        assert trade.exit_price == pytest.approx(121.0 * 0.99)
        assert trade.exit_reason is ExitReason.END_OF_DATA
        assert trade.closed_at == crossover_candles[-1].timestamp

    def test_trade_pnl_and_fees(self, crossover_candles):
        """Trade P&L is gross P&L minus entry and exit fees."""
        config = small_config(fee_rate=0.001, slippage_rate=0.0)
        result = run_backtest(crossover_candles, config)
        trade = result.trades[0]
        size = 10000.0 / 87.0
        entry_fee = 87.0 * size * 0.001
        exit_fee = 121.0 * size * 0.001
        assert trade.size == pytest.approx(size)
        assert trade.fees == pytest.approx(entry_fee + exit_fee)
        assert trade.pnl == pytest.approx(size * (121.0 - 87.0) - entry_fee - exit_fee)
        assert result.final_equity == pytest.approx(10000.0 + trade.pnl)
        assert result.total_pnl == pytest.approx(trade.pnl)

    def test_threshold_one_no_trades(self, crossover_candles):
        """confidence_threshold 1.0 gives no signals and no trades."""
        result = run_backtest(crossover_candles, small_config(confidence_threshold=1.0))
        assert result.actionable_signals == ()
        assert result.trades == ()
        assert result.final_equity == pytest.approx(10000.0)

    def test_short_on_bearish_crossover(self, bearish_crossover_candles):
        """A bearish crossover opens a profitable short."""
        result = run_backtest(bearish_crossover_candles, small_config(slippage_rate=0.0, fee_rate=0.0))
        assert len(result.trades) == 1
        trade = result.trades[0]
        assert trade.side is PositionSide.SHORT
        assert trade.entry_price == pytest.approx(113.0)
        assert trade.exit_price == pytest.approx(79.0)
        assert trade.pnl > 0

    def test_no_short_when_disallowed(self, bearish_crossover_candles):
        """With allow_short off a sell signal from flat opens nothing."""
        result = run_backtest(bearish_crossover_candles, small_config(allow_short=False))
        assert result.trades == ()
        assert len(result.actionable_signals) == 1

    def test_position_left_open_without_close_at_end(self, crossover_candles):
        """Without close_at_end the position stays open and is marked to market."""
        config = small_config(close_at_end=False, fee_rate=0.0, slippage_rate=0.0)
        result = run_backtest(crossover_candles, config)
        assert result.trades == ()
        assert result.final_position.side is PositionSide.LONG
        # Mark-to-market at the last close
        size = 10000.0 / 87.0
        assert result.final_equity == pytest.approx(10000.0 + size * (121.0 - 87.0))


class TestEquityCurve:
    """Test equity curve construction."""

    def test_one_point_per_step(self, crossover_candles):
        """One equity point and one signal per replayed candle."""
        result = run_backtest(crossover_candles, small_config())
        assert len(result.equity_curve) == len(crossover_candles) - 10
        assert len(result.signals) == len(result.equity_curve)
        assert result.equity_curve[0].timestamp == crossover_candles[10].timestamp

    def test_mark_to_market(self, crossover_candles):
        """Open positions are valued at the current close."""
        config = small_config(fee_rate=0.0, slippage_rate=0.0)
        result = run_backtest(crossover_candles, config)
        size = 10000.0 / 87.0
        # Step for candle 25 (close 93): curve index 25 - 10
        assert result.equity_curve[15].equity == pytest.approx(10000.0 + size * (93.0 - 87.0))

    def test_last_point_is_realized_after_force_close(self, crossover_candles):
        """The last equity point equals the realized final equity."""
        result = run_backtest(crossover_candles, small_config())
        assert result.equity_curve[-1].equity == pytest.approx(result.final_equity)
        assert result.final_equity == pytest.approx(10000.0 + sum(t.pnl for t in result.trades))
        assert not result.final_position.is_open

    def test_equity_series(self, crossover_candles):
        """equity_series is indexed by candle timestamps."""
        series = run_backtest(crossover_candles, small_config()).equity_series()
        assert len(series) == 30
        assert series.index[0] == crossover_candles[10].timestamp


class TestEngineInvariants:
    """Test properties that hold for any data."""

    def test_idempotent(self, synthetic_candles):
        """Same candles and config give an equal result."""
        config = small_config(fast_period=5, slow_period=20, window_size=30)
        assert run_backtest(synthetic_candles, config) == run_backtest(synthetic_candles, config)

    def test_flat_series(self):
        """A flat price series trades nothing and never draws down."""
        result = run_backtest(make_candles([100.0] * 60), small_config())
        assert result.trades == ()
        assert result.max_drawdown == 0.0
        assert all(p.equity == pytest.approx(10000.0) for p in result.equity_curve)

    def test_not_enough_candles(self, crossover_candles):
        """Fewer candles than window_size give an empty result, not an error."""
        result = run_backtest(crossover_candles[:10], small_config())
        assert result.trades == ()
        assert result.equity_curve == ()
        assert result.total_pnl == 0.0
        assert result.win_rate == 0.0
        assert result.final_equity == pytest.approx(10000.0)

    def test_fee_monotonicity(self, synthetic_candles):
        """Higher fee_rate never increases total P&L."""
        pnls = [
            run_backtest(
                synthetic_candles,
                small_config(fast_period=5, slow_period=20, window_size=30, fee_rate=fee),
            ).total_pnl
            for fee in (0.0, 0.0005, 0.001, 0.005, 0.01)
        ]
        assert all(later <= earlier for earlier, later in zip(pnls, pnls[1:]))

    def test_slippage_monotonicity(self, synthetic_candles):
        """Higher slippage_rate never increases total P&L."""
        pnls = [
            run_backtest(
                synthetic_candles,
                small_config(fast_period=5, slow_period=20, window_size=30, slippage_rate=s),
            ).total_pnl
            for s in (0.0, 0.001, 0.005)
        ]
        assert all(later <= earlier for earlier, later in zip(pnls, pnls[1:]))

    def test_single_position_and_reversals(self, synthetic_candles):
        """Trades never overlap and their P&L sums to the equity change."""
        result = run_backtest(synthetic_candles, small_config(fast_period=5, slow_period=20, window_size=30))
        trades = result.trades
        assert len(trades) > 1
        for prev, nxt in zip(trades, trades[1:]):
            assert prev.closed_at <= nxt.opened_at
            assert prev.exit_reason is ExitReason.SIGNAL
        assert sum(t.pnl for t in trades) == pytest.approx(result.final_equity - 10000.0)

    def test_position_size_pct_scales_size(self, crossover_candles):
        """position_size_pct scales the entry size."""
        full = run_backtest(crossover_candles, small_config()).trades[0]
        half = run_backtest(crossover_candles, small_config(position_size_pct=0.5)).trades[0]
        assert half.size == pytest.approx(full.size / 2)

    def test_window_smaller_than_slow_period_warns(self, crossover_candles, caplog):
        """A window too short for the slow average logs a warning."""
        with caplog.at_level("WARNING", logger="backtest_core.evaluation.engine"):
            result = BacktestEngine(small_config(window_size=5)).run(crossover_candles)
        assert "window_size 5" in caplog.text
        assert result.trades == ()


class TestCandleValidation:
    """Malformed candles abort the run before any processing."""

    def test_nan_close(self, crossover_candles):
        """A NaN close aborts the run with the candle index."""
        candles = list(crossover_candles)
        c = candles[5]
        candles[5] = Candle(c.timestamp, c.open, c.high, c.low, float("nan"), c.volume)
        with pytest.raises(MalformedCandleError) as exc_info:
            run_backtest(candles, small_config())
        assert exc_info.value.index == 5
        assert "close" in str(exc_info.value)

    def test_infinite_volume(self, crossover_candles):
        """An infinite volume aborts the run."""
        candles = list(crossover_candles)
        c = candles[30]
        candles[30] = Candle(c.timestamp, c.open, c.high, c.low, c.close, np.inf)
        with pytest.raises(MalformedCandleError, match="index 30"):
            run_backtest(candles, small_config())

    def test_decreasing_timestamp(self, crossover_candles):
        """A timestamp earlier than its predecessor aborts the run."""
        candles = list(crossover_candles)
        candles[12], candles[13] = candles[13], candles[12]
        with pytest.raises(MalformedCandleError) as exc_info:
            run_backtest(candles, small_config())
        assert exc_info.value.index == 13

    def test_equal_timestamps_allowed(self):
        """Repeated timestamps are accepted."""
        candles = [Candle(timestamp=0, open=1, high=1, low=1, close=1)] * 15
        assert run_backtest(candles, small_config()).trades == ()

    def test_is_value_error(self, crossover_candles):
        """MalformedCandleError is a ValueError."""
        candles = list(crossover_candles)
        c = candles[0]
        candles[0] = Candle(c.timestamp, None, c.high, c.low, c.close)
        with pytest.raises(ValueError):
            run_backtest(candles, small_config())
