"""
Individual indicator implementations following the Indicator interface.

These classes provide a uniform interface for all technical indicators,
making it easier to add new indicators without modifying existing code.
Each one is an immutable parameter set with a pure calculate().
"""
from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from .base import Indicator, PriceInput, as_price_array, freeze, validate_period
from ..shared.errors import InvalidParameterError, MismatchedLengthError
from ..shared.defaults import (
    SMA_PERIOD, EMA_PERIOD, EMA_SMOOTHING, RSI_PERIOD, ATR_PERIOD,
    STDDEV_PERIOD, BOLLINGER_PERIOD, BOLLINGER_MULTIPLIER,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
)


def wilder_smooth(values: np.ndarray, period: int) -> np.ndarray:
    """
    Wilder smoothing: seed with the mean of the first `period` values, then
    avg = (prev_avg * (period - 1) + current) / period.

    Returns len(values) - period + 1 points.
    """
    seed = values[:period].mean()
    seeded = np.concatenate(([seed], values[period:]))
    return pd.Series(seeded).ewm(alpha=1.0 / period, adjust=False).mean().to_numpy()


@dataclass(frozen=True)
class SMAIndicator(Indicator):
    """Simple Moving Average indicator."""
    period: int = SMA_PERIOD

    def __post_init__(self):
        validate_period("SMA period", self.period)

    @property
    def min_data_points(self) -> int:
        return self.period

    def calculate(self, prices: PriceInput) -> np.ndarray:
        """Mean of each trailing window; len(prices) - period + 1 values."""
        values = as_price_array(prices)
        self._require(values, "SMA")
        return freeze(sliding_window_view(values, self.period).mean(axis=1))


@dataclass(frozen=True)
class EMAIndicator(Indicator):
    """
    Exponential Moving Average indicator.

    Seeded with the first price; multiplier = smoothing / (period + 1),
    so the default smoothing of 2 gives the usual 2 / (period + 1).
    """
    period: int = EMA_PERIOD
    smoothing: float = EMA_SMOOTHING

    def __post_init__(self):
        validate_period("EMA period", self.period)
        if not np.isfinite(self.smoothing) or self.smoothing <= 0:
            raise InvalidParameterError(f"EMA smoothing must be > 0, got {self.smoothing}")
        if self.multiplier > 1:
            raise InvalidParameterError(
                f"EMA multiplier smoothing/(period+1) must be <= 1, got {self.multiplier:.4f}"
            )

    @property
    def multiplier(self) -> float:
        return self.smoothing / (self.period + 1)

    @property
    def min_data_points(self) -> int:
        return self.period

    def calculate(self, prices: PriceInput) -> np.ndarray:
        """EMA for every input point; same length as prices."""
        values = as_price_array(prices)
        self._require(values, "EMA")
        ema = pd.Series(values).ewm(alpha=self.multiplier, adjust=False).mean()
        return freeze(ema.to_numpy())


@dataclass(frozen=True)
class RSIIndicator(Indicator):
    """
    Relative Strength Index indicator.

    RSI = 100 - (100 / (1 + RS))
    RS = Average Gain / Average Loss (Wilder smoothing)
    """
    period: int = RSI_PERIOD

    def __post_init__(self):
        validate_period("RSI period", self.period)

    @property
    def min_data_points(self) -> int:
        return self.period + 1

    def calculate(self, prices: PriceInput) -> np.ndarray:
        """RSI values in [0, 100]; len(prices) - period values."""
        values = as_price_array(prices)
        self._require(values, "RSI")
        delta = np.diff(values)
        gain = np.where(delta > 0, delta, 0.0)
        loss = np.where(delta < 0, -delta, 0.0)

        avg_gain = wilder_smooth(gain, self.period)
        avg_loss = wilder_smooth(loss, self.period)

        with np.errstate(divide="ignore", invalid="ignore"):
            rs = avg_gain / avg_loss
            rsi = 100 - (100 / (1 + rs))
        # No losses in the window: saturate
        rsi = np.where(avg_loss == 0, 100.0, rsi)
        return freeze(rsi)


@dataclass(frozen=True)
class ATRIndicator(Indicator):
    """
    Average True Range indicator.

    calculate() expects flat [high, low, close, high, low, close, ...] triplets;
    calculate_from_hlc() takes the three series separately.
    """
    period: int = ATR_PERIOD

    def __post_init__(self):
        validate_period("ATR period", self.period)

    @property
    def min_data_points(self) -> int:
        return self.period + 1

    @staticmethod
    def true_range(high: float, low: float, prev_close: float) -> float:
        """True range for a single step."""
        return max(high - low, abs(high - prev_close), abs(low - prev_close))

    def calculate(self, prices: PriceInput) -> np.ndarray:
        """ATR from flat high/low/close triplets; (len(prices) / 3) - period values."""
        flat = as_price_array(prices, name="hlc triplets")
        if len(flat) % 3 != 0:
            raise MismatchedLengthError(
                f"ATR expects flat [high, low, close, ...] triplets; length {len(flat)} is not a multiple of 3"
            )
        triplets = flat.reshape(-1, 3)
        return self.calculate_from_hlc(triplets[:, 0], triplets[:, 1], triplets[:, 2])

    def calculate_from_hlc(self, highs: PriceInput, lows: PriceInput, closes: PriceInput) -> np.ndarray:
        """ATR from separate high, low and close series of equal length."""
        high = as_price_array(highs, name="highs")
        low = as_price_array(lows, name="lows")
        close = as_price_array(closes, name="closes")
        if not (len(high) == len(low) == len(close)):
            raise MismatchedLengthError(
                f"High, low, and close arrays must be of the same length "
                f"(got {len(high)}, {len(low)}, {len(close)})"
            )
        self._require(close, "ATR")

        prev_close = close[:-1]
        tr = np.maximum.reduce([
            high[1:] - low[1:],
            np.abs(high[1:] - prev_close),
            np.abs(low[1:] - prev_close),
        ])
        return freeze(wilder_smooth(tr, self.period))


@dataclass(frozen=True)
class StandardDeviationIndicator(Indicator):
    """Rolling population standard deviation (volatility measure)."""
    period: int = STDDEV_PERIOD

    def __post_init__(self):
        validate_period("Standard deviation period", self.period)

    @property
    def min_data_points(self) -> int:
        return self.period

    def calculate(self, prices: PriceInput) -> np.ndarray:
        values = as_price_array(prices)
        self._require(values, "standard deviation")
        return freeze(sliding_window_view(values, self.period).std(axis=1))


@dataclass(frozen=True)
class BollingerBands:
    """Bollinger Bands output; every array has len(prices) - period + 1 values."""
    middle: np.ndarray
    upper: np.ndarray
    lower: np.ndarray
    bandwidth: np.ndarray
    percent_b: np.ndarray


@dataclass(frozen=True)
class BollingerBandsIndicator(Indicator):
    """Bollinger Bands: SMA middle band with bands `multiplier` standard deviations away."""
    period: int = BOLLINGER_PERIOD
    multiplier: float = BOLLINGER_MULTIPLIER

    def __post_init__(self):
        validate_period("Bollinger period", self.period)
        if not np.isfinite(self.multiplier) or self.multiplier <= 0:
            raise InvalidParameterError(f"Bollinger multiplier must be > 0, got {self.multiplier}")

    @property
    def min_data_points(self) -> int:
        return self.period

    def calculate(self, prices: PriceInput) -> np.ndarray:
        """
        Calculate %B (position of price within the bands).

        Returns %B as it's the most commonly used single Bollinger value.
        """
        return self.calculate_bands(prices).percent_b

    def calculate_bands(self, prices: PriceInput) -> BollingerBands:
        values = as_price_array(prices)
        self._require(values, "Bollinger Bands")
        windows = sliding_window_view(values, self.period)
        middle = windows.mean(axis=1)
        std = windows.std(axis=1)
        upper = middle + self.multiplier * std
        lower = middle - self.multiplier * std
        width = upper - lower

        bandwidth = np.divide(width, middle, out=np.zeros_like(width), where=middle != 0)
        # Zero-width bands: price sits on the middle band
        percent_b = np.divide(
            values[self.period - 1:] - lower, width,
            out=np.full_like(width, 0.5), where=width != 0,
        )
        return BollingerBands(
            middle=freeze(middle),
            upper=freeze(upper),
            lower=freeze(lower),
            bandwidth=freeze(bandwidth),
            percent_b=freeze(percent_b),
        )


@dataclass(frozen=True)
class MACDIndicator(Indicator):
    """MACD (Moving Average Convergence Divergence) indicator."""
    fast: int = MACD_FAST
    slow: int = MACD_SLOW
    signal: int = MACD_SIGNAL

    def __post_init__(self):
        validate_period("MACD fast period", self.fast)
        validate_period("MACD slow period", self.slow)
        validate_period("MACD signal period", self.signal)
        if self.fast >= self.slow:
            raise InvalidParameterError(
                f"MACD fast period ({self.fast}) must be less than slow period ({self.slow})"
            )

    @property
    def min_data_points(self) -> int:
        return max(self.fast, self.slow) + self.signal

    def with_period(self, period: int) -> "MACDIndicator":
        raise InvalidParameterError("MACD has no single period; use with_periods(fast, slow, signal)")

    def with_periods(self, fast: int, slow: int, signal: int) -> "MACDIndicator":
        return replace(self, fast=fast, slow=slow, signal=signal)

    def calculate(self, prices: PriceInput) -> np.ndarray:
        """
        Calculate MACD histogram (MACD line - Signal line).

        Returns histogram as it's the most commonly used MACD value.
        """
        macd_line, signal_line, histogram = self.calculate_components(prices)
        return histogram

    def calculate_components(self, prices: PriceInput) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Calculate all MACD components: line, signal, histogram (each len(prices) long)."""
        values = as_price_array(prices)
        self._require(values, "MACD")
        ema_fast = EMAIndicator(period=self.fast).calculate(values)
        ema_slow = EMAIndicator(period=self.slow).calculate(values)

        macd_line = ema_fast - ema_slow
        signal_line = np.array(EMAIndicator(period=self.signal).calculate(macd_line))
        histogram = macd_line - signal_line

        return freeze(macd_line), freeze(signal_line), freeze(histogram)


# Export all indicator classes
__all__ = [
    'wilder_smooth',
    'SMAIndicator',
    'EMAIndicator',
    'RSIIndicator',
    'ATRIndicator',
    'StandardDeviationIndicator',
    'BollingerBands',
    'BollingerBandsIndicator',
    'MACDIndicator',
]
