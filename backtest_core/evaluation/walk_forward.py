"""
Walk-forward evaluation: optimize on a train segment, test on the next one.

Slides consecutive (train, test) windows over the candle sequence. Each
train segment is swept over the parameter grid; the best config is then run
on the following test segment only, so every reported trade is out of sample.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from .config import BacktestConfig
from .engine import run_backtest
from .performance import analyze_performance
from .types import EquityPoint, Trade
from .walk_forward_types import WalkForwardResult, WalkForwardWindow
from ..indicators.base import validate_period
from ..grid_test.grid_search import generate_grid_configs
from ..grid_test.sweep import run_parameter_sweep, validate_metric
from ..shared.errors import InsufficientDataError, InvalidParameterError
from ..shared.defaults import SWEEP_METRIC
from ..shared.types import Candle

logger = logging.getLogger(__name__)


def run_walk_forward(
    candles: Sequence[Candle],
    base_config: Optional[BacktestConfig] = None,
    grid: Optional[Dict[str, Sequence[Any]]] = None,
    train_size: int = 200,
    test_size: int = 50,
    step: Optional[int] = None,
    metric: str = SWEEP_METRIC,
    max_workers: Optional[int] = 1,
    timeout: Optional[float] = None,
) -> WalkForwardResult:
    """
    Run a walk-forward test.

    The test segment of each window is prefixed with the last window_size
    candles before it (from the train side), so the first out-of-sample fill
    lands on the first test candle without any test data feeding the
    optimization. Test equity curves are chained: each window's curve is
    shifted by the P&L of all earlier windows.

    Args:
        candles: Full candle sequence
        base_config: Values for parameters not in the grid
        grid: Parameter grid (see generate_grid_configs)
        train_size: Candles per optimization segment
        test_size: Candles per out-of-sample segment
        step: Candles to advance per window (default test_size; must be >= test_size)
        metric: PerformanceSummary field the sweep ranks by
        max_workers: Sweep worker processes (1 = in process)
        timeout: Per-window sweep timeout in seconds

    Raises:
        InsufficientDataError: Fewer than train_size + test_size candles
        InvalidParameterError: Bad sizes, step or metric
    """
    base_config = base_config or BacktestConfig()
    validate_period("train_size", train_size)
    validate_period("test_size", test_size)
    step = test_size if step is None else step
    validate_period("step", step)
    if step < test_size:
        raise InvalidParameterError(
            f"step ({step}) must be >= test_size ({test_size}) so test segments do not overlap"
        )
    validate_metric(metric)

    candles = list(candles)
    needed = train_size + test_size
    if len(candles) < needed:
        raise InsufficientDataError(
            f"Insufficient data for walk-forward. Need at least {needed} candles "
            f"(train {train_size} + test {test_size}), got {len(candles)}."
        )

    configs = generate_grid_configs(base_config, grid, name_prefix="wf")
    if not configs:
        raise InvalidParameterError("Parameter grid produced no valid configs")

    windows: List[WalkForwardWindow] = []
    all_trades: List[Trade] = []
    chained_curve: List[EquityPoint] = []
    pnl_offset = 0.0

    start = 0
    while start + needed <= len(candles):
        train_end = start + train_size
        test_end = train_end + test_size
        sweep = run_parameter_sweep(
            candles[start:train_end], configs, metric=metric,
            max_workers=max_workers, timeout=timeout,
        )
        if sweep.best is None:
            logger.warning(
                f"Walk-forward window {len(windows)}: no completed train run "
                f"({len(sweep.failed)} failed, {len(sweep.cancelled)} cancelled); skipping"
            )
            start += step
            continue

        best = sweep.best.config
        warmup_start = max(train_end - best.window_size, 0)
        test_result = run_backtest(candles[warmup_start:test_end], best)

        windows.append(WalkForwardWindow(
            index=len(windows),
            train_start=start,
            train_end=train_end,
            test_start=train_end,
            test_end=test_end,
            best_config=best,
            train_score=sweep.best.score,
            test_result=test_result,
        ))
        all_trades.extend(test_result.trades)
        shift = pnl_offset + base_config.initial_capital - best.initial_capital
        chained_curve.extend(
            EquityPoint(timestamp=p.timestamp, equity=p.equity + shift)
            for p in test_result.equity_curve
        )
        pnl_offset += test_result.final_equity - best.initial_capital

        logger.info(
            f"Walk-forward window {len(windows) - 1}: best {best.name} "
            f"(train {metric} {sweep.best.score:.4f}), test pnl {test_result.total_pnl:.2f}"
        )
        start += step

    summary = analyze_performance(
        all_trades, chained_curve, base_config.initial_capital, base_config.timeframe
    )
    return WalkForwardResult(
        metric=metric,
        windows=tuple(windows),
        trades=tuple(all_trades),
        equity_curve=tuple(chained_curve),
        summary=summary,
    )
