"""
Signal generation module.

Turns a candle window into a buy/sell/hold Signal from a fast and a slow
moving average, and loads backtest configurations from YAML.
"""
from .config import SignalConfig, SignalMode
from .processor import SignalProcessor, process_signal
from .config_loader import (
    load_config_from_yaml,
    load_grid_from_yaml,
    config_to_dict,
    save_config_to_yaml,
)

__all__ = [
    'SignalConfig',
    'SignalMode',
    'SignalProcessor',
    'process_signal',
    'load_config_from_yaml',
    'load_grid_from_yaml',
    'config_to_dict',
    'save_config_to_yaml',
]
