"""
Error taxonomy for the backtesting engine.

Parameter and shape errors are raised at the call boundary and never
recovered silently. The ValueError bases keep the configuration convention
of failing fast with a ValueError and a clear message.
"""
from typing import Optional


class BacktestCoreError(Exception):
    """Base class for all engine errors."""
    pass


class InvalidParameterError(BacktestCoreError, ValueError):
    """Raised for a bad period, smoothing constant, window size, capital or rate."""
    pass


class InsufficientDataError(BacktestCoreError):
    """Raised when an input is shorter than the required lookback."""
    pass


class MalformedInputError(BacktestCoreError, ValueError):
    """Raised when an input series contains a non-finite or missing value."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class MalformedCandleError(MalformedInputError):
    """Raised when a candle has a non-finite price or is out of order. Carries the offending index."""

    def __init__(self, index: int, message: str):
        super().__init__(f"Malformed candle at index {index}: {message}", index=index)


class MismatchedLengthError(BacktestCoreError, ValueError):
    """Raised when high/low/close inputs differ in length."""
    pass
