"""
Parallel parameter sweep: run one backtest per config and rank the results.

Each run is independent; workers share nothing but the read-only candle
list, which is handed to every worker process once at start-up.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .grid_search import config_parameters
from ..evaluation.config import BacktestConfig
from ..evaluation.engine import BacktestEngine
from ..evaluation.types import BacktestResult, PerformanceSummary
from ..shared.errors import InvalidParameterError
from ..shared.defaults import SWEEP_METRIC
from ..shared.types import Candle

logger = logging.getLogger(__name__)

METRICS = tuple(f.name for f in fields(PerformanceSummary))
LOWER_IS_BETTER = frozenset({"max_drawdown", "total_fees", "losing_trades"})

# Candles for the current worker process (set once by the pool initializer)
_worker_candles: Optional[List[Candle]] = None


def _init_worker(candles: List[Candle]) -> None:
    global _worker_candles
    _worker_candles = candles


def _run_config_worker(index: int, config: BacktestConfig) -> Tuple[int, BacktestResult]:
    """
    Worker function for one backtest.

    This runs in a separate process. Must be a module-level function
    for pickling by ProcessPoolExecutor.
    """
    return index, BacktestEngine(config).run(_worker_candles)


@dataclass(frozen=True)
class RankedResult:
    """One completed run with its position in the ranking."""
    rank: int  # 1 = best
    grid_index: int  # Position of the config in the submitted list
    config: BacktestConfig
    result: BacktestResult
    score: float

    @property
    def name(self) -> str:
        return self.config.name


@dataclass
class SweepResult:
    """Ranked outcome of a parameter sweep."""
    metric: str
    results: List[RankedResult] = field(default_factory=list)  # Best first
    cancelled: List[str] = field(default_factory=list)  # Config names not run before the timeout
    failed: Dict[str, str] = field(default_factory=dict)  # Config name -> error message
    elapsed_s: float = 0.0

    @property
    def best(self) -> Optional[RankedResult]:
        return self.results[0] if self.results else None

    @property
    def timed_out(self) -> bool:
        return bool(self.cancelled)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per completed run: rank, name, parameters and summary metrics."""
        rows = []
        for entry in self.results:
            row = {
                "rank": entry.rank,
                "name": entry.name,
                "grid_index": entry.grid_index,
                "score": entry.score,
            }
            row.update(config_parameters(entry.config))
            row.update(entry.result.summary.to_dict())
            rows.append(row)
        return pd.DataFrame(rows)


def validate_metric(metric: str) -> None:
    if metric not in METRICS:
        raise InvalidParameterError(f"Unknown metric '{metric}'. Available: {', '.join(METRICS)}")


def rank_results(
    completed: Dict[int, BacktestResult],
    configs: Sequence[BacktestConfig],
    metric: str,
) -> List[RankedResult]:
    """
    Rank completed runs by metric.

    Higher is better except for LOWER_IS_BETTER metrics; ties keep grid order.
    """
    descending = metric not in LOWER_IS_BETTER

    def sort_key(index: int):
        score = float(getattr(completed[index].summary, metric))
        return (-score if descending else score, index)

    ordered = sorted(completed, key=sort_key)
    return [
        RankedResult(
            rank=rank,
            grid_index=index,
            config=configs[index],
            result=completed[index],
            score=float(getattr(completed[index].summary, metric)),
        )
        for rank, index in enumerate(ordered, start=1)
    ]


def _run_in_process(
    candles: List[Candle],
    configs: Sequence[BacktestConfig],
    deadline: Optional[float],
    completed: Dict[int, BacktestResult],
    failed: Dict[str, str],
) -> List[str]:
    cancelled = []
    for index, config in enumerate(configs):
        if deadline is not None and time.monotonic() >= deadline:
            cancelled.extend(c.name for c in configs[index:])
            break
        try:
            completed[index] = BacktestEngine(config).run(candles)
        except Exception as e:
            failed[config.name] = f"{type(e).__name__}: {e}"
            logger.warning(f"Sweep run {config.name} failed: {type(e).__name__}: {e}")
    return cancelled


def _run_in_pool(
    candles: List[Candle],
    configs: Sequence[BacktestConfig],
    max_workers: Optional[int],
    deadline: Optional[float],
    completed: Dict[int, BacktestResult],
    failed: Dict[str, str],
) -> List[str]:
    executor = ProcessPoolExecutor(
        max_workers=max_workers,
        initializer=_init_worker,
        initargs=(candles,),
    )
    timed_out = False
    try:
        future_to_index: Dict[Future, int] = {
            executor.submit(_run_config_worker, index, config): index
            for index, config in enumerate(configs)
        }
        pending = set(future_to_index)
        while pending:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            done, pending = wait(pending, timeout=remaining, return_when=FIRST_COMPLETED)
            if not done:
                timed_out = True
                break
            for future in done:
                index = future_to_index[future]
                name = configs[index].name
                try:
                    _, result = future.result()
                except Exception as e:
                    failed[name] = f"{type(e).__name__}: {e}"
                    logger.warning(f"Sweep run {name} failed: {type(e).__name__}: {e}")
                    continue
                completed[index] = result

        cancelled = []
        for future in pending:
            future.cancel()
            cancelled.append(future_to_index[future])
        return [configs[i].name for i in sorted(cancelled)]
    finally:
        executor.shutdown(wait=not timed_out, cancel_futures=True)


def run_parameter_sweep(
    candles: Sequence[Candle],
    configs: Sequence[BacktestConfig],
    metric: str = SWEEP_METRIC,
    max_workers: Optional[int] = None,
    timeout: Optional[float] = None,
) -> SweepResult:
    """
    Run one backtest per config and rank them by a PerformanceSummary metric.

    Args:
        candles: Candle sequence shared by every run
        configs: Configs to evaluate (e.g. from generate_grid_configs)
        metric: PerformanceSummary field to rank by
        max_workers: Worker processes (None = CPU count, 1 = run in this process)
        timeout: Seconds for the whole sweep; units not finished by then are
            cancelled and listed in SweepResult.cancelled

    Returns:
        SweepResult with completed runs ranked best first
    """
    validate_metric(metric)
    if max_workers is not None and max_workers < 1:
        raise InvalidParameterError(f"max_workers must be >= 1, got {max_workers}")
    if timeout is not None and timeout <= 0:
        raise InvalidParameterError(f"timeout must be > 0, got {timeout}")

    candles = list(candles)
    configs = list(configs)
    start = time.monotonic()
    deadline = None if timeout is None else start + timeout
    completed: Dict[int, BacktestResult] = {}
    failed: Dict[str, str] = {}

    logger.info(f"Sweeping {len(configs)} configs over {len(candles)} candles (metric: {metric})")
    if not configs:
        cancelled = []
    elif max_workers == 1:
        cancelled = _run_in_process(candles, configs, deadline, completed, failed)
    else:
        cancelled = _run_in_pool(candles, configs, max_workers, deadline, completed, failed)

    if cancelled:
        logger.warning(f"Sweep timed out after {timeout}s; {len(cancelled)} runs cancelled")

    elapsed = time.monotonic() - start
    logger.info(
        f"Sweep finished in {elapsed:.1f}s: {len(completed)} completed, "
        f"{len(failed)} failed, {len(cancelled)} cancelled"
    )
    return SweepResult(
        metric=metric,
        results=rank_results(completed, configs, metric),
        cancelled=cancelled,
        failed=failed,
        elapsed_s=elapsed,
    )
