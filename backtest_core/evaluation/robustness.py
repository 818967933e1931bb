"""
Trade-order robustness: how much of a backtest's drawdown is luck of ordering.

Reshuffles the realized trade P&L many times and reports the distribution of
maximum drawdowns. Total P&L is the same for every ordering; only the path,
and therefore the drawdown, changes.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from .types import Trade
from ..indicators.base import freeze, validate_period
from ..shared.errors import InvalidParameterError
from ..shared.defaults import ROBUSTNESS_ITERATIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RobustnessResult:
    """Max-drawdown distribution over random trade orderings."""
    iterations: int
    original_max_drawdown: float
    drawdowns: np.ndarray  # One per permutation, read-only
    mean_max_drawdown: float
    median_max_drawdown: float
    p5_max_drawdown: float
    p95_max_drawdown: float
    worst_max_drawdown: float
    probability_worse: float  # Fraction of orderings with a deeper drawdown than the original


def _max_drawdowns(pnl_paths: np.ndarray, initial_capital: float) -> np.ndarray:
    """Max drawdown of each row of P&L paths, peak starting at initial_capital."""
    start = np.full((pnl_paths.shape[0], 1), float(initial_capital))
    equity = np.concatenate((start, initial_capital + np.cumsum(pnl_paths, axis=1)), axis=1)
    peaks = np.maximum.accumulate(equity, axis=1)
    return ((peaks - equity) / peaks).max(axis=1)


def trade_order_robustness(
    trades: Sequence[Union[Trade, float]],
    initial_capital: float,
    iterations: int = ROBUSTNESS_ITERATIONS,
    seed: Optional[int] = None,
) -> RobustnessResult:
    """
    Monte Carlo reshuffle of trade order.

    Args:
        trades: Closed trades (or plain P&L values) in ledger order
        initial_capital: Starting equity
        iterations: Number of random orderings
        seed: Seed for numpy's default_rng; same seed gives the same distribution
    """
    validate_period("iterations", iterations)
    if initial_capital <= 0:
        raise InvalidParameterError(f"initial_capital must be > 0, got {initial_capital}")

    pnls = np.array([t.pnl if isinstance(t, Trade) else t for t in trades], dtype=np.float64)
    original = float(_max_drawdowns(pnls[np.newaxis, :], initial_capital)[0])

    rng = np.random.default_rng(seed)
    paths = np.array([rng.permutation(pnls) for _ in range(iterations)]).reshape(iterations, len(pnls))
    drawdowns = _max_drawdowns(paths, initial_capital)

    logger.debug(f"Reshuffled {len(pnls)} trades {iterations} times (seed {seed})")
    return RobustnessResult(
        iterations=iterations,
        original_max_drawdown=original,
        drawdowns=freeze(drawdowns),
        mean_max_drawdown=float(drawdowns.mean()),
        median_max_drawdown=float(np.median(drawdowns)),
        p5_max_drawdown=float(np.percentile(drawdowns, 5)),
        p95_max_drawdown=float(np.percentile(drawdowns, 95)),
        worst_max_drawdown=float(drawdowns.max()),
        probability_worse=float((drawdowns > original).mean()),
    )
