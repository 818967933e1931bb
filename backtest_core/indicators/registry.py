"""
Indicator registry: compute any indicator by name.

Used at the boundary where the indicator kind and its parameters come from
configuration rather than code.
"""
from typing import Any, Dict, Optional, Type

import numpy as np

from .base import Indicator, PriceInput
from .implementations import (
    SMAIndicator,
    EMAIndicator,
    RSIIndicator,
    ATRIndicator,
    StandardDeviationIndicator,
    BollingerBandsIndicator,
    MACDIndicator,
)
from ..shared.errors import InvalidParameterError

INDICATOR_REGISTRY: Dict[str, Type[Indicator]] = {
    'sma': SMAIndicator,
    'ema': EMAIndicator,
    'rsi': RSIIndicator,
    'atr': ATRIndicator,
    'stddev': StandardDeviationIndicator,
    'bollinger': BollingerBandsIndicator,
    'macd': MACDIndicator,
}


def create_indicator(kind: str, params: Optional[Dict[str, Any]] = None) -> Indicator:
    """
    Build an indicator from its registry name and keyword parameters.

    Raises:
        InvalidParameterError: Unknown kind, unknown parameter name or invalid value
    """
    cls = INDICATOR_REGISTRY.get(str(kind).lower())
    if cls is None:
        raise InvalidParameterError(
            f"Unknown indicator '{kind}'. Available: {', '.join(sorted(INDICATOR_REGISTRY))}"
        )
    try:
        return cls(**(params or {}))
    except TypeError as e:
        raise InvalidParameterError(f"Invalid parameters for {kind}: {e}") from e


def compute_indicator(kind: str, params: Optional[Dict[str, Any]], prices: PriceInput) -> np.ndarray:
    """
    Compute an indicator series by name.

    Example:
        compute_indicator("sma", {"period": 3}, [1, 2, 3, 4, 5, 6])  # -> [2, 3, 4, 5]

    For "atr", prices are flat [high, low, close, ...] triplets.
    """
    return create_indicator(kind, params).calculate(prices)
