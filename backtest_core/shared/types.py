"""
Shared types for the indicator, signal and backtest modules.

This module consolidates the Candle and Signal dataclasses and the SignalType
enum that are used across multiple modules to avoid code duplication and
inconsistent type checking.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import pandas as pd

# Candle timestamps are only compared, never interpreted
Timestamp = Union[pd.Timestamp, int, float]

PRICE_FIELDS = ("open", "high", "low", "close")


class SignalType(Enum):
    """Type of trading signal."""
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


@dataclass(frozen=True)
class Candle:
    """One OHLCV price bar. Owned by the caller; never mutated."""
    timestamp: Timestamp
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def price(self, source: str) -> float:
        """Return the price for a source name ('open', 'high', 'low' or 'close')."""
        return getattr(self, source)


@dataclass(frozen=True)
class Signal:
    """
    Classification of the latest point of a candle window.

    direction is 1 (buy), -1 (sell) or 0 (hold / no signal). A demoted
    signal has direction 0 but keeps its computed confidence, and its
    reason explains the demotion.
    """
    direction: int
    confidence: float
    reason: str
    fast_value: Optional[float] = None
    slow_value: Optional[float] = None
    timestamp: Optional[Timestamp] = None
    price: Optional[float] = None

    @property
    def signal_type(self) -> SignalType:
        if self.direction > 0:
            return SignalType.BUY
        if self.direction < 0:
            return SignalType.SELL
        return SignalType.HOLD

    @property
    def is_actionable(self) -> bool:
        return self.direction != 0
