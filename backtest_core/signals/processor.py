"""
Moving-average signal processor.

Classifies the latest point of a candle window into buy, sell or hold from
the relationship between a fast and a slow moving average. A processor is a
per-run value object built from a SignalConfig; it keeps no state between
calls, so the same window always produces the same Signal.
"""
import logging
from typing import Optional, Sequence, Tuple

from .config import SignalConfig, SignalMode
from ..indicators.base import Indicator, as_price_array
from ..indicators.implementations import EMAIndicator, SMAIndicator
from ..shared.types import Candle, Signal

logger = logging.getLogger(__name__)

# (direction, reason); direction 0 means the pattern did not fire
Classification = Tuple[int, str]


def _crossover(f0: float, f1: float, s0: float, s1: float) -> Classification:
    if f1 > s1 and f0 <= s0:
        return 1, f"Bullish crossover: fast {f1:.4f} crossed above slow {s1:.4f}"
    if f1 < s1 and f0 >= s0:
        return -1, f"Bearish crossover: fast {f1:.4f} crossed below slow {s1:.4f}"
    return 0, "No crossover"


def _trend(f0: float, f1: float, s0: float, s1: float) -> Classification:
    if f1 > s1 and f1 > f0:
        return 1, f"Bullish trend: fast {f1:.4f} above slow {s1:.4f} and rising"
    if f1 < s1 and f1 < f0:
        return -1, f"Bearish trend: fast {f1:.4f} below slow {s1:.4f} and falling"
    return 0, "No trend"


class SignalProcessor:
    """
    Turn a candle window into a Signal.

    Usage:
        processor = SignalProcessor(SignalConfig(fast_period=9, slow_period=21))
        signal = processor.process(candles[-30:])
    """

    def __init__(self, config: Optional[SignalConfig] = None):
        self.config = config or SignalConfig()
        indicator_cls = EMAIndicator if self.config.use_exponential else SMAIndicator
        self._fast: Indicator = indicator_cls(period=self.config.fast_period)
        self._slow: Indicator = indicator_cls(period=self.config.slow_period)

    def process(self, window: Sequence[Candle]) -> Signal:
        """
        Classify the last candle of the window.

        Windows shorter than slow_period + 1 give a no-signal result instead of
        raising. A directional signal that fails the confidence threshold or the
        minimum separation is returned as hold with its confidence and a reason
        explaining the demotion.

        Confidence is capped at 1.0, so a confidence_threshold of 1.0 demotes
        every signal.

        Raises:
            MalformedInputError: If a price in the window is not finite
        """
        config = self.config
        last_timestamp = window[-1].timestamp if len(window) else None

        if len(window) < config.required_window:
            reason = (
                f"Insufficient data: need {config.required_window} candles, got {len(window)}"
            )
            logger.debug(reason)
            return Signal(direction=0, confidence=0.0, reason=reason, timestamp=last_timestamp)

        prices = as_price_array([c.price(config.price_source) for c in window], name=config.price_source)
        fast = self._fast.calculate(prices)
        slow = self._slow.calculate(prices)
        f0, f1 = float(fast[-2]), float(fast[-1])
        s0, s1 = float(slow[-2]), float(slow[-1])
        last_price = float(prices[-1])

        separation = abs(f1 - s1) / abs(last_price) if last_price != 0 else 0.0
        confidence = min(1.0, separation * config.confidence_scale + config.confidence_base)

        mode = config.signal_mode
        if mode is SignalMode.CROSSOVER:
            direction, reason = _crossover(f0, f1, s0, s1)
        elif mode is SignalMode.TREND:
            direction, reason = _trend(f0, f1, s0, s1)
        elif mode is SignalMode.COMBINED:
            direction, reason = _crossover(f0, f1, s0, s1)
            if direction == 0:
                direction, reason = _trend(f0, f1, s0, s1)
                confidence *= config.trend_confidence_factor
        else:
            raise ValueError(f"Unhandled signal mode: {mode}")

        if direction == 0:
            return Signal(
                direction=0,
                confidence=0.0,
                reason=reason,
                fast_value=f1,
                slow_value=s1,
                timestamp=last_timestamp,
                price=last_price,
            )

        change_percent = separation * 100
        demotion = None
        if config.confidence_threshold >= 1.0:
            demotion = "confidence_threshold 1.0 disables signals"
        elif confidence < config.confidence_threshold:
            demotion = f"confidence {confidence:.3f} below threshold {config.confidence_threshold:.3f}"
        elif change_percent < config.min_change_percent:
            demotion = f"change {change_percent:.3f}% below minimum {config.min_change_percent:.3f}%"

        if demotion is not None:
            logger.debug(f"Demoting {'buy' if direction > 0 else 'sell'} at {last_timestamp}: {demotion}")
            direction = 0
            reason = f"{reason}; demoted to hold: {demotion}"

        return Signal(
            direction=direction,
            confidence=float(confidence),
            reason=reason,
            fast_value=f1,
            slow_value=s1,
            timestamp=last_timestamp,
            price=last_price,
        )


def process_signal(window: Sequence[Candle], config: Optional[SignalConfig] = None) -> Signal:
    """Classify the latest point of a candle window (boundary function)."""
    return SignalProcessor(config).process(window)
