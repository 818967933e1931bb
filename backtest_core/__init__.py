"""
Indicator and strategy-backtesting engine.

Provides unified interfaces for:
- Indicator calculations (SMA, EMA, RSI, ATR, standard deviation, Bollinger Bands, MACD)
- Signal generation (moving-average crossover / trend classification)
- Backtesting with a single position, fees and slippage
- Performance statistics (win rate, profit factor, drawdown, Sharpe ratio)
- Parameter sweeps, walk-forward evaluation and trade-order robustness checks

Boundary functions for collaborators:
    run_backtest(candles, config) -> BacktestResult
    compute_indicator(kind, params, prices) -> numpy array
    process_signal(window, config) -> Signal
"""
from .shared.types import Candle, Signal, SignalType
from .shared.errors import (
    BacktestCoreError,
    InvalidParameterError,
    InsufficientDataError,
    MalformedInputError,
    MalformedCandleError,
    MismatchedLengthError,
)
from .indicators import compute_indicator
from .signals import SignalConfig, SignalMode, SignalProcessor, process_signal
from .evaluation import BacktestConfig, BacktestEngine, BacktestResult, run_backtest

__all__ = [
    'Candle',
    'Signal',
    'SignalType',
    'BacktestCoreError',
    'InvalidParameterError',
    'InsufficientDataError',
    'MalformedInputError',
    'MalformedCandleError',
    'MismatchedLengthError',
    'compute_indicator',
    'SignalConfig',
    'SignalMode',
    'SignalProcessor',
    'process_signal',
    'BacktestConfig',
    'BacktestEngine',
    'BacktestResult',
    'run_backtest',
]
