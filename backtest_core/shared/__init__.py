"""
Shared types, defaults and errors for the backtesting engine.

This module provides:
- Candle and Signal dataclasses, SignalType enum
- Centralized default values for all parameters
- The error taxonomy raised at call boundaries
"""
from .types import Candle, Signal, SignalType, PRICE_FIELDS
from .errors import (
    BacktestCoreError,
    InvalidParameterError,
    InsufficientDataError,
    MalformedInputError,
    MalformedCandleError,
    MismatchedLengthError,
)

__all__ = [
    'Candle',
    'Signal',
    'SignalType',
    'PRICE_FIELDS',
    'BacktestCoreError',
    'InvalidParameterError',
    'InsufficientDataError',
    'MalformedInputError',
    'MalformedCandleError',
    'MismatchedLengthError',
]
