"""
Backtest configuration.

Validation runs at construction time (fail fast with clear errors), so an
engine built from a BacktestConfig never sees an invalid parameter.
"""
from dataclasses import dataclass, field
from typing import Optional

from ..indicators.base import validate_period
from ..signals.config import SignalConfig
from ..shared.errors import InvalidParameterError
from ..shared.defaults import (
    WINDOW_SIZE, INITIAL_CAPITAL, FEE_RATE, SLIPPAGE_RATE, POSITION_SIZE_PCT,
    ALLOW_SHORT, CLOSE_AT_END, TIMEFRAME, PERIODS_PER_YEAR,
)


def _validate_backtest_config(
    *,
    window_size: int,
    initial_capital: float,
    fee_rate: float,
    slippage_rate: float,
    position_size_pct: float,
    timeframe: Optional[str],
) -> None:
    """Validate backtest parameters. Raises InvalidParameterError with clear message on failure."""
    validate_period("window_size", window_size)
    if not initial_capital > 0:
        raise InvalidParameterError(f"initial_capital must be > 0, got {initial_capital}")
    if fee_rate < 0:
        raise InvalidParameterError(f"fee_rate must be >= 0, got {fee_rate}")
    if not (0 <= slippage_rate < 1):
        raise InvalidParameterError(f"slippage_rate must be in [0, 1), got {slippage_rate}")
    if not (0 < position_size_pct <= 1):
        raise InvalidParameterError(
            f"position_size_pct must be in (0, 1], got {position_size_pct}"
        )
    if timeframe is not None and timeframe not in PERIODS_PER_YEAR:
        raise InvalidParameterError(
            f"Unknown timeframe {timeframe!r}. Available: {', '.join(PERIODS_PER_YEAR)}"
        )


@dataclass
class BacktestConfig:
    """Configuration for one backtest run: signal parameters plus execution costs."""
    signal: SignalConfig = field(default_factory=SignalConfig)
    window_size: int = WINDOW_SIZE  # Candles handed to the signal processor per step

    # Capital and sizing
    initial_capital: float = INITIAL_CAPITAL
    position_size_pct: float = POSITION_SIZE_PCT  # Fraction of realized equity per entry
    allow_short: bool = ALLOW_SHORT
    close_at_end: bool = CLOSE_AT_END  # Force-close an open position on the last candle

    # Trading costs
    fee_rate: float = FEE_RATE
    slippage_rate: float = SLIPPAGE_RATE

    timeframe: Optional[str] = TIMEFRAME  # Candle interval for Sharpe annualization ("1h", "1d", ...)
    name: str = "backtest"

    def __post_init__(self) -> None:
        if not isinstance(self.signal, SignalConfig):
            raise InvalidParameterError(
                f"signal must be a SignalConfig, got {type(self.signal).__name__}"
            )
        _validate_backtest_config(
            window_size=self.window_size,
            initial_capital=self.initial_capital,
            fee_rate=self.fee_rate,
            slippage_rate=self.slippage_rate,
            position_size_pct=self.position_size_pct,
            timeframe=self.timeframe,
        )
