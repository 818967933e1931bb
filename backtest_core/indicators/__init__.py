"""
Indicator calculation module.

Provides all price indicators:
- Moving averages (SMA, EMA)
- Oscillators and ranges (RSI, ATR)
- Volatility (standard deviation, Bollinger Bands) and MACD

All indicators follow a unified interface for calculation and derivation.
"""
from .base import Indicator, validate_period
from .implementations import (
    wilder_smooth,
    SMAIndicator,
    EMAIndicator,
    RSIIndicator,
    ATRIndicator,
    StandardDeviationIndicator,
    BollingerBands,
    BollingerBandsIndicator,
    MACDIndicator,
)
from .registry import INDICATOR_REGISTRY, create_indicator, compute_indicator

__all__ = [
    'Indicator',
    'validate_period',
    'wilder_smooth',
    'SMAIndicator',
    'EMAIndicator',
    'RSIIndicator',
    'ATRIndicator',
    'StandardDeviationIndicator',
    'BollingerBands',
    'BollingerBandsIndicator',
    'MACDIndicator',
    'INDICATOR_REGISTRY',
    'create_indicator',
    'compute_indicator',
]
