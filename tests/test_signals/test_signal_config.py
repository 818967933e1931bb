"""
Tests for SignalConfig validation.
"""
import pytest

from backtest_core.signals.config import SignalConfig, SignalMode
from backtest_core.shared.errors import InvalidParameterError
from backtest_core.shared.defaults import FAST_PERIOD, SLOW_PERIOD, CONFIDENCE_THRESHOLD


class TestSignalConfigDefaults:
    """Test default values come from shared.defaults."""

    def test_defaults(self):
        """Defaults come from shared.defaults."""
        config = SignalConfig()
        assert config.fast_period == FAST_PERIOD
        assert config.slow_period == SLOW_PERIOD
        assert config.confidence_threshold == CONFIDENCE_THRESHOLD
        assert config.signal_mode is SignalMode.CROSSOVER
        assert config.price_source == "close"
        assert config.use_exponential is False

    def test_required_window(self):
        """required_window is slow_period + 1."""
        assert SignalConfig(fast_period=3, slow_period=5).required_window == 6


class TestSignalConfigValidation:
    """Test fail-fast validation at construction."""

    def test_fast_must_be_less_than_slow(self):
        """Equal fast and slow periods are rejected."""
        with pytest.raises(ValueError, match="fast_period .* must be less than slow_period"):
            SignalConfig(fast_period=21, slow_period=21)

    def test_fast_period_positive(self):
        """fast_period below 1 is rejected."""
        with pytest.raises(InvalidParameterError):
            SignalConfig(fast_period=0, slow_period=5)

    def test_invalid_price_source(self):
        """Unknown price sources are rejected."""
        with pytest.raises(InvalidParameterError, match="price_source"):
            SignalConfig(price_source="vwap")

    def test_signal_mode_from_string(self):
        """signal_mode strings convert to SignalMode, case-insensitively."""
        assert SignalConfig(signal_mode="trend").signal_mode is SignalMode.TREND
        assert SignalConfig(signal_mode="COMBINED").signal_mode is SignalMode.COMBINED

    def test_invalid_signal_mode(self):
        """Unknown signal modes are rejected."""
        with pytest.raises(InvalidParameterError, match="signal_mode"):
            SignalConfig(signal_mode="momentum")

    @pytest.mark.parametrize("field", ["confidence_threshold", "confidence_base", "trend_confidence_factor"])
    def test_unit_range_fields(self, field):
        """Fields bounded to [0, 1] reject values outside it."""
        with pytest.raises(InvalidParameterError, match=field):
            SignalConfig(**{field: 1.5})
        with pytest.raises(InvalidParameterError, match=field):
            SignalConfig(**{field: -0.1})

    def test_negative_min_change_percent(self):
        """Negative min_change_percent is rejected."""
        with pytest.raises(InvalidParameterError, match="min_change_percent"):
            SignalConfig(min_change_percent=-1)

    def test_negative_confidence_scale(self):
        """Negative confidence_scale is rejected."""
        with pytest.raises(InvalidParameterError, match="confidence_scale"):
            SignalConfig(confidence_scale=-1)

    def test_threshold_bounds_allowed(self):
        """Thresholds of exactly 0 and 1 are valid."""
        SignalConfig(confidence_threshold=0.0)
        SignalConfig(confidence_threshold=1.0)
