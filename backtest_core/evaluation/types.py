"""
Backtest types: positions, trades, equity points, performance summary, result.

Kept apart from engine.py so analyzers and sweeps can import these types
without pulling in BacktestEngine.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

import pandas as pd

from ..shared.types import Signal, Timestamp

if TYPE_CHECKING:
    from .config import BacktestConfig


class PositionSide(Enum):
    """Side of the single live position."""
    LONG = "long"
    SHORT = "short"
    NONE = "none"

    @property
    def sign(self) -> int:
        """+1 for long, -1 for short, 0 when flat."""
        if self is PositionSide.LONG:
            return 1
        if self is PositionSide.SHORT:
            return -1
        return 0


class ExitReason(Enum):
    """Why a position was closed."""
    SIGNAL = "signal"  # Opposite signal
    END_OF_DATA = "end_of_data"  # Force-closed on the last candle


@dataclass(frozen=True)
class Position:
    """The live position; side NONE means flat."""
    side: PositionSide = PositionSide.NONE
    entry_price: float = 0.0  # Fill price after slippage
    size: float = 0.0  # Units held
    opened_at: Optional[Timestamp] = None
    entry_fee: float = 0.0

    @property
    def is_open(self) -> bool:
        return self.side is not PositionSide.NONE

    def unrealized_pnl(self, price: float) -> float:
        """Mark-to-market P&L at price (fees excluded)."""
        return self.side.sign * self.size * (price - self.entry_price)


FLAT = Position()


@dataclass(frozen=True)
class Trade:
    """A closed position. pnl is net of entry and exit fees."""
    side: PositionSide
    entry_price: float
    exit_price: float
    size: float
    pnl: float
    opened_at: Optional[Timestamp]
    closed_at: Optional[Timestamp]
    fees: float = 0.0  # Entry + exit fee
    exit_reason: ExitReason = ExitReason.SIGNAL

    @property
    def is_win(self) -> bool:
        return self.pnl > 0

    @property
    def return_pct(self) -> float:
        """Net P&L as a percentage of the entry notional."""
        notional = self.entry_price * self.size
        return (self.pnl / notional) * 100 if notional else 0.0


@dataclass(frozen=True)
class EquityPoint:
    """Realized equity plus open-position mark-to-market at one step."""
    timestamp: Timestamp
    equity: float


@dataclass(frozen=True)
class PerformanceSummary:
    """Aggregate statistics of a trade ledger and equity curve."""
    total_pnl: float = 0.0
    total_return_pct: float = 0.0

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0  # Fraction in [0, 1]

    # Risk/reward metrics
    profit_factor: float = 0.0  # Gross profit / |gross loss| (inf when there are no losses)
    average_win: float = 0.0
    average_loss: float = 0.0  # Negative number
    expectancy: float = 0.0  # Mean P&L per trade

    max_drawdown: float = 0.0  # Fraction of peak equity in [0, 1]
    sharpe_ratio: float = 0.0
    total_fees: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class BacktestResult:
    """Outcome of one backtest run. Constructed once; never mutated."""
    trades: Tuple[Trade, ...]
    equity_curve: Tuple[EquityPoint, ...]
    signals: Tuple[Signal, ...]  # One per processed window
    total_pnl: float
    win_rate: float
    profit_factor: float
    max_drawdown: float
    sharpe_ratio: float
    final_position: Position
    final_equity: float
    summary: PerformanceSummary
    config: Optional["BacktestConfig"] = None

    @property
    def actionable_signals(self) -> Tuple[Signal, ...]:
        """Buy and sell signals that survived the confidence and separation filters."""
        return tuple(s for s in self.signals if s.is_actionable)

    def equity_series(self) -> pd.Series:
        """Equity curve as a pandas Series indexed by timestamp."""
        return pd.Series(
            [p.equity for p in self.equity_curve],
            index=[p.timestamp for p in self.equity_curve],
            name="equity",
            dtype=float,
        )

    def trades_frame(self) -> pd.DataFrame:
        """Trade ledger as a DataFrame (one row per trade)."""
        columns = [
            'side', 'entry_price', 'exit_price', 'size', 'pnl',
            'opened_at', 'closed_at', 'fees', 'exit_reason',
        ]
        rows = [
            {
                'side': t.side.value,
                'entry_price': t.entry_price,
                'exit_price': t.exit_price,
                'size': t.size,
                'pnl': t.pnl,
                'opened_at': t.opened_at,
                'closed_at': t.closed_at,
                'fees': t.fees,
                'exit_reason': t.exit_reason.value,
            }
            for t in self.trades
        ]
        return pd.DataFrame(rows, columns=columns)
