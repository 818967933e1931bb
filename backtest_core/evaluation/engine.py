"""
Backtest engine: replay signals against price history with a single position.

Drives a sliding window of candles through the signal processor, keeps at
most one open position (flat, long or short), fills at the close of the
candle after each window with fees and slippage, and records an equity
curve and trade ledger.
"""
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import BacktestConfig
from .performance import analyze_performance
from .types import (
    FLAT, BacktestResult, EquityPoint, ExitReason, Position, PositionSide, Trade,
)
from ..signals.processor import SignalProcessor
from ..shared.errors import MalformedCandleError
from ..shared.types import Candle, Signal

logger = logging.getLogger(__name__)

__all__ = ["BacktestEngine", "run_backtest", "validate_candles"]

_CANDLE_FIELDS = ("open", "high", "low", "close", "volume")


def validate_candles(candles: Sequence[Candle]) -> None:
    """
    Check every candle before a run.

    Raises:
        MalformedCandleError: Non-finite or non-numeric OHLCV value, or a
            timestamp earlier than the previous candle's
    """
    prev_timestamp = None
    for index, candle in enumerate(candles):
        for name in _CANDLE_FIELDS:
            value = getattr(candle, name, None)
            try:
                finite = bool(np.isfinite(float(value)))
            except (TypeError, ValueError):
                raise MalformedCandleError(index, f"{name} is not a number ({value!r})") from None
            if not finite:
                raise MalformedCandleError(index, f"{name} is not finite ({value!r})")

        timestamp = candle.timestamp
        if prev_timestamp is not None:
            try:
                decreasing = timestamp < prev_timestamp
            except TypeError:
                raise MalformedCandleError(
                    index, f"timestamp {timestamp!r} is not comparable to {prev_timestamp!r}"
                ) from None
            if decreasing:
                raise MalformedCandleError(
                    index, f"timestamp {timestamp} is earlier than previous {prev_timestamp}"
                )
        prev_timestamp = timestamp


class BacktestEngine:
    """
    Simulates trading one instrument from a candle sequence.

    Features:
    - At most one live position; an opposite signal closes it and (if allowed) reverses
    - Buys fill above the close and sells below it by slippage_rate
    - fee_rate of the fill notional is charged on every fill
    - Deterministic: the same candles and config always give an equal result

    Usage:
        engine = BacktestEngine(BacktestConfig(window_size=30))
        result = engine.run(candles)
    """

    def __init__(self, config: Optional[BacktestConfig] = None):
        self.config = config or BacktestConfig()
        self.processor = SignalProcessor(self.config.signal)
        required = self.config.signal.required_window
        if self.config.window_size < required:
            logger.warning(
                f"window_size {self.config.window_size} is smaller than slow_period + 1 ({required}); "
                f"every window will produce no signal"
            )

    # Fill prices -----------------------------------------------------------

    def _buy_price(self, price: float) -> float:
        return price * (1 + self.config.slippage_rate)

    def _sell_price(self, price: float) -> float:
        return price * (1 - self.config.slippage_rate)

    def _fee(self, fill_price: float, size: float) -> float:
        """Fee for one fill (entry or exit)."""
        return fill_price * size * self.config.fee_rate

    # Position transitions --------------------------------------------------

    def _open(self, side: PositionSide, candle: Candle, realized: float) -> Tuple[Position, float]:
        """Open a position at the candle close. Returns (position, realized equity after entry fee)."""
        if realized <= 0:
            logger.info(f"Skipping {side.value} entry at {candle.timestamp}: equity {realized:.2f} <= 0")
            return FLAT, realized

        fill = self._buy_price(candle.close) if side is PositionSide.LONG else self._sell_price(candle.close)
        size = realized * self.config.position_size_pct / fill
        fee = self._fee(fill, size)
        logger.info(f"Open {side.value} {size:.6f} @ {fill:.4f} at {candle.timestamp} (fee {fee:.4f})")
        position = Position(side=side, entry_price=fill, size=size, opened_at=candle.timestamp, entry_fee=fee)
        return position, realized - fee

    def _close(self, position: Position, candle: Candle, reason: ExitReason) -> Tuple[Trade, float]:
        """Close the position at the candle close. Returns (trade, realized equity change)."""
        if position.side is PositionSide.LONG:
            fill = self._sell_price(candle.close)
        else:
            fill = self._buy_price(candle.close)
        gross = position.side.sign * position.size * (fill - position.entry_price)
        exit_fee = self._fee(fill, position.size)
        trade = Trade(
            side=position.side,
            entry_price=position.entry_price,
            exit_price=fill,
            size=position.size,
            pnl=gross - position.entry_fee - exit_fee,
            opened_at=position.opened_at,
            closed_at=candle.timestamp,
            fees=position.entry_fee + exit_fee,
            exit_reason=reason,
        )
        logger.info(
            f"Close {position.side.value} {position.size:.6f} @ {fill:.4f} at {candle.timestamp} "
            f"({reason.value}, pnl {trade.pnl:.4f})"
        )
        return trade, gross - exit_fee

    # Run -------------------------------------------------------------------

    def run(self, candles: Sequence[Candle]) -> BacktestResult:
        """
        Replay the candle sequence.

        For each i from window_size to len(candles) - 1 the window
        candles[i - window_size : i] is classified and the signal is filled
        at candles[i].close. With close_at_end an open position is closed on
        the last candle and the last equity point becomes the realized equity.

        Raises:
            MalformedCandleError: If any candle is malformed (checked before the run)
        """
        candles = list(candles)
        validate_candles(candles)
        config = self.config
        window_size = config.window_size

        realized = float(config.initial_capital)
        position = FLAT
        trades: List[Trade] = []
        equity_curve: List[EquityPoint] = []
        signals: List[Signal] = []

        if len(candles) <= window_size:
            logger.debug(f"{len(candles)} candles <= window_size {window_size}; nothing to replay")

        for i in range(window_size, len(candles)):
            window = candles[i - window_size:i]
            signal = self.processor.process(window)
            signals.append(signal)
            candle = candles[i]

            if signal.direction > 0:
                if position.side is PositionSide.SHORT:
                    trade, change = self._close(position, candle, ExitReason.SIGNAL)
                    trades.append(trade)
                    realized += change
                    position = FLAT
                if position.side is PositionSide.NONE:
                    position, realized = self._open(PositionSide.LONG, candle, realized)
            elif signal.direction < 0:
                if position.side is PositionSide.LONG:
                    trade, change = self._close(position, candle, ExitReason.SIGNAL)
                    trades.append(trade)
                    realized += change
                    position = FLAT
                if position.side is PositionSide.NONE and config.allow_short:
                    position, realized = self._open(PositionSide.SHORT, candle, realized)

            equity = realized + position.unrealized_pnl(candle.close)
            equity_curve.append(EquityPoint(timestamp=candle.timestamp, equity=equity))

        if config.close_at_end and position.is_open:
            last = candles[-1]
            trade, change = self._close(position, last, ExitReason.END_OF_DATA)
            trades.append(trade)
            realized += change
            position = FLAT
            equity_curve[-1] = EquityPoint(timestamp=last.timestamp, equity=realized)

        final_equity = equity_curve[-1].equity if equity_curve else realized
        summary = analyze_performance(trades, equity_curve, config.initial_capital, config.timeframe)

        return BacktestResult(
            trades=tuple(trades),
            equity_curve=tuple(equity_curve),
            signals=tuple(signals),
            total_pnl=summary.total_pnl,
            win_rate=summary.win_rate,
            profit_factor=summary.profit_factor,
            max_drawdown=summary.max_drawdown,
            sharpe_ratio=summary.sharpe_ratio,
            final_position=position,
            final_equity=final_equity,
            summary=summary,
            config=config,
        )


def run_backtest(candles: Sequence[Candle], config: Optional[BacktestConfig] = None) -> BacktestResult:
    """Run one backtest (boundary function)."""
    return BacktestEngine(config).run(candles)
