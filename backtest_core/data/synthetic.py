"""
Seeded synthetic candle generators for tests and examples.

Prices move multiplicatively, so they stay positive for any length. The
same seed always gives the same candles.
"""
from typing import List, Optional, Union

import numpy as np
import pandas as pd

from ..indicators.base import validate_period
from ..shared.errors import InvalidParameterError
from ..shared.types import Candle

TRENDS = ("bullish", "bearish", "crossover", "mixed", "flat")

TIMEFRAME_MINUTES = {
    "1m": 1,
    "5m": 5,
    "15m": 15,
    "30m": 30,
    "1h": 60,
    "4h": 240,
    "1d": 1440,
    "1w": 10080,
}

DEFAULT_START_TIME = pd.Timestamp("2024-01-01")

# Per-candle move range (fraction of price) before volatility scaling
_MOVE_LOW = 0.005
_MOVE_HIGH = 0.025


def _directions(count: int, trend: str) -> np.ndarray:
    """+1 / -1 / 0 per candle."""
    if trend == "bullish":
        return np.ones(count)
    if trend == "bearish":
        return -np.ones(count)
    if trend == "flat":
        return np.zeros(count)
    if trend == "mixed":
        # Bearish first half, bullish second half
        half = count // 2
        return np.concatenate((-np.ones(half), np.ones(count - half)))
    # crossover: four alternating segments, bullish first
    segment = max(count // 4, 1)
    return np.where((np.arange(count) // segment) % 2 == 0, 1.0, -1.0)


def generate_synthetic_candles(
    count: int,
    trend: str = "mixed",
    start_price: float = 100.0,
    timeframe: str = "1h",
    seed: Optional[int] = None,
    start_time: Optional[Union[str, pd.Timestamp]] = None,
    volatility: float = 1.0,
    volume: float = 1000.0,
) -> List[Candle]:
    """
    Generate candles following a trend pattern.

    Args:
        count: Number of candles (0 gives an empty list)
        trend: "bullish", "bearish", "crossover" (alternating quarters),
            "mixed" (bearish then bullish) or "flat" (constant price)
        start_price: Open of the first candle
        timeframe: Candle interval ("1m" ... "1w"); sets the timestamp spacing
        seed: Seed for numpy's default_rng
        start_time: Timestamp of the first candle (default 2024-01-01)
        volatility: Scales the per-candle move and the wicks
        volume: Base volume per candle
    """
    if count == 0:
        return []
    validate_period("count", count)
    if trend not in TRENDS:
        raise InvalidParameterError(f"Unknown trend '{trend}'. Available: {', '.join(TRENDS)}")
    if timeframe not in TIMEFRAME_MINUTES:
        raise InvalidParameterError(
            f"Unknown timeframe '{timeframe}'. Available: {', '.join(TIMEFRAME_MINUTES)}"
        )
    if not start_price > 0:
        raise InvalidParameterError(f"start_price must be > 0, got {start_price}")
    if volatility < 0:
        raise InvalidParameterError(f"volatility must be >= 0, got {volatility}")

    rng = np.random.default_rng(seed)
    moves = rng.uniform(_MOVE_LOW, _MOVE_HIGH, count) * volatility * _directions(count, trend)
    closes = start_price * np.cumprod(1 + moves)
    opens = np.concatenate(([start_price], closes[:-1]))

    wick = 0.003 * volatility
    highs = np.maximum(opens, closes) * (1 + rng.uniform(0, wick, count))
    lows = np.minimum(opens, closes) * (1 - rng.uniform(0, wick, count))
    if trend == "flat":
        highs, lows = opens.copy(), opens.copy()
    volumes = volume * (1 + rng.uniform(0, 0.5, count))

    start = pd.Timestamp(start_time) if start_time is not None else DEFAULT_START_TIME
    timestamps = start + pd.to_timedelta(np.arange(count) * TIMEFRAME_MINUTES[timeframe], unit="min")

    return [
        Candle(
            timestamp=ts,
            open=float(o),
            high=float(h),
            low=float(l),
            close=float(c),
            volume=float(v),
        )
        for ts, o, h, l, c, v in zip(timestamps, opens, highs, lows, closes, volumes)
    ]
