"""
Signal configuration for the moving-average signal processor.

Config validation runs at construction time (fail fast with clear errors).
"""
from dataclasses import dataclass
from enum import Enum

from ..indicators.base import validate_period
from ..shared.errors import InvalidParameterError
from ..shared.types import PRICE_FIELDS
from ..shared.defaults import (
    FAST_PERIOD, SLOW_PERIOD, PRICE_SOURCE, SIGNAL_MODE, USE_EXPONENTIAL,
    MIN_CHANGE_PERCENT, CONFIDENCE_THRESHOLD,
    CONFIDENCE_BASE, CONFIDENCE_SCALE, TREND_CONFIDENCE_FACTOR,
)


class SignalMode(Enum):
    """How the fast/slow relationship is turned into a direction."""
    CROSSOVER = "crossover"  # Only on the bar where fast crosses slow
    TREND = "trend"  # While fast is above/below slow and moving away
    COMBINED = "combined"  # Crossover first, trend as a weaker fallback


def _in_unit_range(name: str, value: float) -> None:
    if not (0 <= value <= 1):
        raise InvalidParameterError(f"{name} must be in [0, 1], got {value}")


def _validate_config(
    *,
    fast_period: int,
    slow_period: int,
    price_source: str,
    min_change_percent: float,
    confidence_threshold: float,
    confidence_base: float,
    confidence_scale: float,
    trend_confidence_factor: float,
) -> None:
    """Validate signal parameters. Raises InvalidParameterError with clear message on failure."""
    validate_period("fast_period", fast_period)
    validate_period("slow_period", slow_period)
    if fast_period >= slow_period:
        raise InvalidParameterError(
            f"fast_period ({fast_period}) must be less than slow_period ({slow_period})"
        )
    if price_source not in PRICE_FIELDS:
        raise InvalidParameterError(
            f"price_source must be one of {', '.join(PRICE_FIELDS)}, got {price_source!r}"
        )
    if min_change_percent < 0:
        raise InvalidParameterError(f"min_change_percent must be >= 0, got {min_change_percent}")
    _in_unit_range("confidence_threshold", confidence_threshold)
    _in_unit_range("confidence_base", confidence_base)
    if confidence_scale < 0:
        raise InvalidParameterError(f"confidence_scale must be >= 0, got {confidence_scale}")
    _in_unit_range("trend_confidence_factor", trend_confidence_factor)


@dataclass
class SignalConfig:
    """Configuration for signal generation from a fast and a slow moving average."""
    fast_period: int = FAST_PERIOD
    slow_period: int = SLOW_PERIOD
    price_source: str = PRICE_SOURCE  # "open", "high", "low" or "close"
    signal_mode: SignalMode = SignalMode(SIGNAL_MODE)
    use_exponential: bool = USE_EXPONENTIAL  # EMA instead of SMA

    # Signal filtering
    min_change_percent: float = MIN_CHANGE_PERCENT
    confidence_threshold: float = CONFIDENCE_THRESHOLD

    # Confidence scoring
    confidence_base: float = CONFIDENCE_BASE
    confidence_scale: float = CONFIDENCE_SCALE
    trend_confidence_factor: float = TREND_CONFIDENCE_FACTOR

    def __post_init__(self) -> None:
        if not isinstance(self.signal_mode, SignalMode):
            try:
                self.signal_mode = SignalMode(str(self.signal_mode).lower())
            except ValueError:
                raise InvalidParameterError(
                    f"signal_mode must be one of {', '.join(m.value for m in SignalMode)}, "
                    f"got {self.signal_mode!r}"
                ) from None
        _validate_config(
            fast_period=self.fast_period,
            slow_period=self.slow_period,
            price_source=self.price_source,
            min_change_percent=self.min_change_percent,
            confidence_threshold=self.confidence_threshold,
            confidence_base=self.confidence_base,
            confidence_scale=self.confidence_scale,
            trend_confidence_factor=self.trend_confidence_factor,
        )

    @property
    def required_window(self) -> int:
        """Smallest window that yields two slow-average values."""
        return self.slow_period + 1
