"""
Base indicator interface.

All indicators follow this pattern:
1. Hold immutable parameters (frozen dataclass, validated at construction)
2. Calculate values from price data with a pure calculate() call
3. Derive new instances with with_period() / clone() instead of mutating
"""
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..shared.errors import InvalidParameterError, InsufficientDataError, MalformedInputError

PriceInput = Union[Sequence[float], np.ndarray, pd.Series]


def validate_period(name: str, period) -> None:
    """Raise InvalidParameterError unless period is an integer >= 1."""
    if isinstance(period, bool) or not isinstance(period, (int, np.integer)):
        raise InvalidParameterError(f"{name} must be an integer, got {period!r}")
    if period < 1:
        raise InvalidParameterError(f"{name} must be >= 1, got {period}")


def as_price_array(prices: PriceInput, name: str = "prices") -> np.ndarray:
    """
    Convert a price sequence to a 1-D float64 array.

    Raises:
        MalformedInputError: If a value is missing, non-numeric or non-finite
    """
    if isinstance(prices, pd.Series):
        prices = prices.to_numpy()
    try:
        values = np.asarray(prices, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"{name} must contain only numbers: {e}") from e
    if values.ndim != 1:
        raise MalformedInputError(f"{name} must be one-dimensional, got shape {values.shape}")
    bad = np.flatnonzero(~np.isfinite(values))
    if bad.size:
        index = int(bad[0])
        raise MalformedInputError(
            f"{name} contains a non-finite value at index {index}: {values[index]}",
            index=index,
        )
    return values


def freeze(values: np.ndarray) -> np.ndarray:
    """Mark an output series read-only."""
    values.flags.writeable = False
    return values


class Indicator(ABC):
    """
    Base class for all indicators.

    Concrete indicators are frozen dataclasses: parameters are fixed at
    construction and calculate() keeps no state between calls, so one
    instance can be shared freely between runs and worker processes.
    """

    @property
    @abstractmethod
    def min_data_points(self) -> int:
        """Minimum input length accepted by calculate()."""
        pass

    @abstractmethod
    def calculate(self, prices: PriceInput) -> np.ndarray:
        """
        Calculate indicator values from price data.

        Args:
            prices: Ordered price values (list, numpy array or pandas Series)

        Returns:
            Read-only numpy array with indicator values

        Raises:
            InsufficientDataError: If fewer than min_data_points values are given
            MalformedInputError: If a value is not finite
        """
        pass

    def with_period(self, period: int) -> "Indicator":
        """Return a new indicator with a different period; this instance is unchanged."""
        return replace(self, period=period)

    def clone(self) -> "Indicator":
        """Return an independent copy with identical parameters."""
        return replace(self)

    def get_latest(self, prices: PriceInput) -> Optional[float]:
        """
        Get the most recent indicator value.

        Returns:
            Last value, or None if there is not enough data
        """
        try:
            values = self.calculate(prices)
        except InsufficientDataError:
            return None
        return float(values[-1]) if len(values) else None

    def _require(self, values: np.ndarray, label: str) -> None:
        needed = self.min_data_points
        if len(values) < needed:
            raise InsufficientDataError(
                f"Insufficient data for {label} calculation. "
                f"Need at least {needed} data points, got {len(values)}."
            )
