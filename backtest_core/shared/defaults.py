"""
Centralized default values for indicator, signal and backtest parameters.

This is the SINGLE SOURCE OF TRUTH for all parameter defaults.
All modules should import from here to ensure consistency.
"""

# Indicator defaults
SMA_PERIOD = 20
EMA_PERIOD = 20
EMA_SMOOTHING = 2.0  # multiplier = smoothing / (period + 1)
RSI_PERIOD = 14
ATR_PERIOD = 14
STDDEV_PERIOD = 20
BOLLINGER_PERIOD = 20
BOLLINGER_MULTIPLIER = 2.0
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9

# Signal processor defaults
FAST_PERIOD = 9
SLOW_PERIOD = 21
PRICE_SOURCE = "close"
SIGNAL_MODE = "crossover"
USE_EXPONENTIAL = False
MIN_CHANGE_PERCENT = 0.0  # Minimum fast/slow separation, % of last price (0 = no filter)
CONFIDENCE_THRESHOLD = 0.4

# Confidence = min(1, |fast - slow| / price * CONFIDENCE_SCALE + CONFIDENCE_BASE)
# Tuned empirically, not derived; treat as configuration.
CONFIDENCE_BASE = 0.5
CONFIDENCE_SCALE = 20.0
TREND_CONFIDENCE_FACTOR = 0.75  # Combined mode: trend fallback is scaled down by this

# Backtest defaults
WINDOW_SIZE = 30
INITIAL_CAPITAL = 10000.0
FEE_RATE = 0.001  # 0.1% of notional per fill
SLIPPAGE_RATE = 0.001  # 0.1% adverse price per fill
POSITION_SIZE_PCT = 1.0  # Fraction of realized equity committed per entry
ALLOW_SHORT = True
CLOSE_AT_END = True
TIMEFRAME = None  # None = no Sharpe annualization

# Periods per year for Sharpe annualization (crypto calendar, trades 365 days/year)
PERIODS_PER_YEAR = {
    "1m": 365 * 24 * 60,
    "5m": 365 * 24 * 12,
    "15m": 365 * 24 * 4,
    "30m": 365 * 24 * 2,
    "1h": 365 * 24,
    "4h": 365 * 6,
    "1d": 365,
    "1w": 52,
}

# Sweep / walk-forward defaults
SWEEP_METRIC = "total_pnl"
ROBUSTNESS_ITERATIONS = 1000
