"""
Walk-forward evaluation types: per-window outcome and overall result.

Kept apart from walk_forward.py so reporting code can import these types
without pulling in the sweep machinery.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .config import BacktestConfig
from .types import BacktestResult, EquityPoint, PerformanceSummary, Trade


@dataclass(frozen=True)
class WalkForwardWindow:
    """One train/test split. Indices are half-open candle positions in the full sequence."""
    index: int
    train_start: int
    train_end: int
    test_start: int
    test_end: int
    best_config: BacktestConfig  # Winner of the sweep on the train segment
    train_score: float  # Its metric value on the train segment
    test_result: BacktestResult  # Its out-of-sample run (warm-up + test candles)


@dataclass(frozen=True)
class WalkForwardResult:
    """Out-of-sample performance over all walk-forward windows."""
    metric: str
    windows: Tuple[WalkForwardWindow, ...]
    trades: Tuple[Trade, ...]  # Out-of-sample trades of every window, in order
    equity_curve: Tuple[EquityPoint, ...]  # Test-segment curves chained by cumulative P&L
    summary: PerformanceSummary

    @property
    def total_pnl(self) -> float:
        return self.summary.total_pnl
