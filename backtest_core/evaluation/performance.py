"""
Performance analysis: reduce a trade ledger and equity curve to summary statistics.

All functions are pure; the same ledger and curve always give the same summary.
"""
import logging
from typing import Optional, Sequence, Union

import numpy as np

from .types import EquityPoint, PerformanceSummary, Trade
from ..shared.errors import InvalidParameterError
from ..shared.defaults import PERIODS_PER_YEAR

logger = logging.getLogger(__name__)


def periods_per_year(timeframe: Optional[str]) -> int:
    """Annualization factor for a candle interval; 1 when timeframe is None."""
    if timeframe is None:
        return 1
    try:
        return PERIODS_PER_YEAR[timeframe]
    except KeyError:
        raise InvalidParameterError(
            f"Unknown timeframe {timeframe!r}. Available: {', '.join(PERIODS_PER_YEAR)}"
        ) from None


def _equity_values(equity_curve: Sequence[Union[EquityPoint, float]]) -> np.ndarray:
    return np.array(
        [p.equity if isinstance(p, EquityPoint) else p for p in equity_curve],
        dtype=np.float64,
    )


def calculate_max_drawdown(equities: Sequence[float], initial_capital: Optional[float] = None) -> float:
    """
    Maximum drawdown as a fraction of the running peak.

    The running peak starts at initial_capital when given, so a curve that
    only ever falls below its starting capital still reports a drawdown.
    """
    values = _equity_values(equities)
    if initial_capital is not None:
        values = np.concatenate(([float(initial_capital)], values))
    if values.size == 0:
        return 0.0

    peaks = np.maximum.accumulate(values)
    with np.errstate(divide="ignore", invalid="ignore"):
        drawdowns = np.where(peaks > 0, (peaks - values) / peaks, 0.0)
    return float(max(drawdowns.max(), 0.0))


def calculate_sharpe_ratio(
    equities: Sequence[float],
    initial_capital: float,
    timeframe: Optional[str] = None,
) -> float:
    """
    Sharpe ratio of per-step equity returns (risk-free rate 0).

    mean(r) / std(r) * sqrt(periods_per_year), population std. Returns 0 when
    there are fewer than two returns or the returns do not vary.

    Returns are only defined while the previous equity is positive: the
    series stops at the step where equity first reaches zero or below (that
    step's loss is kept), so a ruined account never scores later moves.
    """
    values = np.concatenate(([float(initial_capital)], _equity_values(equities)))
    if values.size < 3:
        return 0.0
    ruined = np.flatnonzero(values[:-1] <= 0)
    if ruined.size:
        logger.warning(
            f"Equity reached {values[ruined[0]]:.2f} at step {ruined[0]}; "
            f"Sharpe ratio uses only the {ruined[0]} returns before ruin"
        )
        values = values[:ruined[0] + 1]
    returns = np.diff(values) / values[:-1]
    if returns.size < 2:
        return 0.0
    std = returns.std()
    if std == 0 or not np.isfinite(std):
        return 0.0
    return float(returns.mean() / std * np.sqrt(periods_per_year(timeframe)))


def analyze_performance(
    trades: Sequence[Trade],
    equity_curve: Sequence[Union[EquityPoint, float]],
    initial_capital: float,
    timeframe: Optional[str] = None,
) -> PerformanceSummary:
    """
    Summarize a backtest.

    Args:
        trades: Closed trades in ledger order
        equity_curve: EquityPoints (or plain equity values), one per step
        initial_capital: Starting equity (first drawdown peak and return base)
        timeframe: Candle interval for Sharpe annualization, e.g. "1h"; None = no annualization

    Returns:
        PerformanceSummary
    """
    if initial_capital <= 0:
        raise InvalidParameterError(f"initial_capital must be > 0, got {initial_capital}")

    pnls = [t.pnl for t in trades]
    total_trades = len(pnls)
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    gross_profit = sum(wins)
    gross_loss = abs(sum(losses))

    if total_trades == 0:
        profit_factor = 0.0
    elif gross_loss > 0:
        profit_factor = gross_profit / gross_loss
    else:
        profit_factor = float('inf') if gross_profit > 0 else 0.0

    total_pnl = float(sum(pnls))
    return PerformanceSummary(
        total_pnl=total_pnl,
        total_return_pct=(total_pnl / initial_capital) * 100,
        total_trades=total_trades,
        winning_trades=len(wins),
        losing_trades=len(losses),
        win_rate=(len(wins) / total_trades) if total_trades else 0.0,
        profit_factor=float(profit_factor),
        average_win=(gross_profit / len(wins)) if wins else 0.0,
        average_loss=(sum(losses) / len(losses)) if losses else 0.0,
        expectancy=(total_pnl / total_trades) if total_trades else 0.0,
        max_drawdown=calculate_max_drawdown(equity_curve, initial_capital),
        sharpe_ratio=calculate_sharpe_ratio(equity_curve, initial_capital, timeframe),
        total_fees=float(sum(t.fees for t in trades)),
    )
