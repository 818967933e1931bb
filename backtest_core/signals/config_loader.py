"""
YAML configuration loader for backtests.

Loads backtest configurations from YAML files, allowing easy sharing
and modification of strategies without code changes.

Layout:

    name: sma_9_21
    signals:
      fast_period: 9
      slow_period: 21
      signal_mode: crossover
    backtest:
      window_size: 30
      initial_capital: 10000
    costs:
      fee_rate: 0.001
      slippage_rate: 0.001
    grid:              # optional, for sweeps
      fast_period: [5, 9]
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from .config import SignalConfig
from ..evaluation.config import BacktestConfig
from ..shared.defaults import (
    FAST_PERIOD, SLOW_PERIOD, PRICE_SOURCE, SIGNAL_MODE, USE_EXPONENTIAL,
    MIN_CHANGE_PERCENT, CONFIDENCE_THRESHOLD,
    CONFIDENCE_BASE, CONFIDENCE_SCALE, TREND_CONFIDENCE_FACTOR,
    WINDOW_SIZE, INITIAL_CAPITAL, FEE_RATE, SLIPPAGE_RATE, POSITION_SIZE_PCT,
    ALLOW_SHORT, CLOSE_AT_END, TIMEFRAME,
)

logger = logging.getLogger(__name__)

_SECTION_KEYS = {
    'signals': (
        'fast_period', 'slow_period', 'price_source', 'signal_mode', 'use_exponential',
        'min_change_percent', 'confidence_threshold',
        'confidence_base', 'confidence_scale', 'trend_confidence_factor',
    ),
    'backtest': (
        'window_size', 'initial_capital', 'position_size_pct',
        'allow_short', 'close_at_end', 'timeframe',
    ),
    'costs': ('fee_rate', 'slippage_rate'),
}


def _read_yaml(yaml_path: Path) -> Dict[str, Any]:
    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must contain a mapping: {yaml_path}")
    return config_dict


def _section(config_dict: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config_dict.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Section '{name}' must be a mapping, got {type(section).__name__}")
    unknown = set(section) - set(_SECTION_KEYS[name])
    if unknown:
        logger.warning(f"Ignoring unknown keys in '{name}': {', '.join(sorted(unknown))}")
    return section


def load_config_from_yaml(yaml_path: Union[str, Path]) -> BacktestConfig:
    """
    Load backtest configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        BacktestConfig object

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty or not a mapping
        InvalidParameterError: If a value fails validation
    """
    yaml_path = Path(yaml_path)
    config_dict = _read_yaml(yaml_path)

    name = config_dict.get('name', yaml_path.stem)
    signals = _section(config_dict, 'signals')
    backtest = _section(config_dict, 'backtest')
    costs = _section(config_dict, 'costs')

    signal = SignalConfig(
        fast_period=signals.get('fast_period', FAST_PERIOD),
        slow_period=signals.get('slow_period', SLOW_PERIOD),
        price_source=signals.get('price_source', PRICE_SOURCE),
        signal_mode=signals.get('signal_mode', SIGNAL_MODE),
        use_exponential=bool(signals.get('use_exponential', USE_EXPONENTIAL)),
        min_change_percent=float(signals.get('min_change_percent', MIN_CHANGE_PERCENT)),
        confidence_threshold=float(signals.get('confidence_threshold', CONFIDENCE_THRESHOLD)),
        confidence_base=float(signals.get('confidence_base', CONFIDENCE_BASE)),
        confidence_scale=float(signals.get('confidence_scale', CONFIDENCE_SCALE)),
        trend_confidence_factor=float(signals.get('trend_confidence_factor', TREND_CONFIDENCE_FACTOR)),
    )

    return BacktestConfig(
        signal=signal,
        window_size=backtest.get('window_size', WINDOW_SIZE),
        initial_capital=float(backtest.get('initial_capital', INITIAL_CAPITAL)),
        position_size_pct=float(backtest.get('position_size_pct', POSITION_SIZE_PCT)),
        allow_short=bool(backtest.get('allow_short', ALLOW_SHORT)),
        close_at_end=bool(backtest.get('close_at_end', CLOSE_AT_END)),
        timeframe=backtest.get('timeframe', TIMEFRAME),
        fee_rate=float(costs.get('fee_rate', FEE_RATE)),
        slippage_rate=float(costs.get('slippage_rate', SLIPPAGE_RATE)),
        name=str(name),
    )


def load_grid_from_yaml(yaml_path: Union[str, Path]) -> Dict[str, List[Any]]:
    """
    Load the optional 'grid' section ({parameter: [values]}) for parameter sweeps.

    Scalars are wrapped in a one-element list. Returns {} when there is no grid.
    """
    yaml_path = Path(yaml_path)
    grid = _read_yaml(yaml_path).get('grid') or {}
    if not isinstance(grid, dict):
        raise ValueError(f"Section 'grid' must be a mapping, got {type(grid).__name__}")
    return {key: values if isinstance(values, list) else [values] for key, values in grid.items()}


def config_to_dict(config: BacktestConfig) -> Dict[str, Any]:
    """Nested dict in the YAML layout (inverse of load_config_from_yaml)."""
    signal = config.signal
    return {
        'name': config.name,
        'signals': {
            'fast_period': signal.fast_period,
            'slow_period': signal.slow_period,
            'price_source': signal.price_source,
            'signal_mode': signal.signal_mode.value,
            'use_exponential': signal.use_exponential,
            'min_change_percent': signal.min_change_percent,
            'confidence_threshold': signal.confidence_threshold,
            'confidence_base': signal.confidence_base,
            'confidence_scale': signal.confidence_scale,
            'trend_confidence_factor': signal.trend_confidence_factor,
        },
        'backtest': {
            'window_size': config.window_size,
            'initial_capital': config.initial_capital,
            'position_size_pct': config.position_size_pct,
            'allow_short': config.allow_short,
            'close_at_end': config.close_at_end,
            'timeframe': config.timeframe,
        },
        'costs': {
            'fee_rate': config.fee_rate,
            'slippage_rate': config.slippage_rate,
        },
    }


def save_config_to_yaml(config: BacktestConfig, yaml_path: Union[str, Path]) -> None:
    """
    Save backtest configuration to YAML file.

    Args:
        config: BacktestConfig object to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)
    with open(yaml_path, 'w') as f:
        yaml.safe_dump(config_to_dict(config), f, default_flow_style=False, sort_keys=False)
