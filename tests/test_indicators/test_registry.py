"""
Tests for compute_indicator / the indicator registry.
"""
import numpy as np
import pytest

from backtest_core import compute_indicator
from backtest_core.indicators import INDICATOR_REGISTRY, create_indicator, SMAIndicator
from backtest_core.shared.errors import InvalidParameterError


class TestComputeIndicator:
    """Test name-based indicator dispatch."""

    def test_sma(self):
        """compute_indicator dispatches "sma" to SMAIndicator."""
        np.testing.assert_allclose(compute_indicator("sma", {"period": 3}, [1, 2, 3, 4, 5, 6]), [2, 3, 4, 5])

    def test_ema(self):
        """compute_indicator passes smoothing through to EMAIndicator."""
        result = compute_indicator("ema", {"period": 3, "smoothing": 2}, [2, 4, 6, 8, 10])
        np.testing.assert_allclose(result, [2, 3, 4.5, 6.25, 8.125])

    def test_atr_uses_flat_triplets(self):
        """"atr" takes flat high/low/close triplets."""
        triplets = [10, 8, 9, 11, 9, 10, 12, 10, 11, 13, 11, 12, 14, 12, 13]
        assert compute_indicator("atr", {"period": 3}, triplets)[0] == pytest.approx(2.0)

    def test_kind_is_case_insensitive(self):
        """Indicator kinds are matched case-insensitively."""
        np.testing.assert_allclose(compute_indicator("SMA", {"period": 2}, [1, 3]), [2])

    def test_default_params(self):
        """Missing params fall back to the indicator defaults."""
        assert len(compute_indicator("rsi", None, np.arange(1.0, 31.0))) == 30 - 14

    def test_all_kinds_registered(self):
        """Every supported indicator kind is registered."""
        assert set(INDICATOR_REGISTRY) == {"sma", "ema", "rsi", "atr", "stddev", "bollinger", "macd"}

    def test_unknown_kind(self):
        """An unknown kind raises InvalidParameterError."""
        with pytest.raises(InvalidParameterError, match="Unknown indicator"):
            compute_indicator("vwap", {}, [1, 2, 3])

    def test_unknown_parameter(self):
        """An unknown parameter name raises InvalidParameterError."""
        with pytest.raises(InvalidParameterError, match="Invalid parameters"):
            compute_indicator("sma", {"length": 3}, [1, 2, 3])

    def test_invalid_parameter_value(self):
        """An invalid parameter value raises InvalidParameterError."""
        with pytest.raises(InvalidParameterError):
            compute_indicator("sma", {"period": -1}, [1, 2, 3])

    def test_create_indicator(self):
        """create_indicator builds the configured indicator."""
        assert create_indicator("sma", {"period": 4}) == SMAIndicator(period=4)
