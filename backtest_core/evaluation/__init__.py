"""
Backtest evaluation module.

Replays signals over a candle sequence with a single position and reduces the
outcome to performance statistics. Every run only sees candles before its
fill, so no evaluation has access to future data.
"""
from .config import BacktestConfig
from .types import (
    PositionSide,
    ExitReason,
    Position,
    Trade,
    EquityPoint,
    PerformanceSummary,
    BacktestResult,
)
from .performance import (
    analyze_performance,
    calculate_max_drawdown,
    calculate_sharpe_ratio,
    periods_per_year,
)
from .engine import BacktestEngine, run_backtest, validate_candles
from .trade_analysis import aggregate_trades_by_side, aggregate_trades_by_exit_reason
from .robustness import RobustnessResult, trade_order_robustness
from .walk_forward_types import WalkForwardWindow, WalkForwardResult
from .walk_forward import run_walk_forward

__all__ = [
    'BacktestConfig',
    'PositionSide',
    'ExitReason',
    'Position',
    'Trade',
    'EquityPoint',
    'PerformanceSummary',
    'BacktestResult',
    'analyze_performance',
    'calculate_max_drawdown',
    'calculate_sharpe_ratio',
    'periods_per_year',
    'BacktestEngine',
    'run_backtest',
    'validate_candles',
    'aggregate_trades_by_side',
    'aggregate_trades_by_exit_reason',
    'RobustnessResult',
    'trade_order_robustness',
    'WalkForwardWindow',
    'WalkForwardResult',
    'run_walk_forward',
]
