"""
Grid search configuration generation.

Expands a base BacktestConfig and a parameter grid into one config per
combination. Grid keys are SignalConfig or BacktestConfig field names.
"""
import itertools
import logging
from dataclasses import fields, replace
from typing import Any, Dict, List, Optional, Sequence

from ..evaluation.config import BacktestConfig
from ..signals.config import SignalConfig
from ..shared.errors import InvalidParameterError

logger = logging.getLogger(__name__)

SIGNAL_FIELDS = tuple(f.name for f in fields(SignalConfig))
BACKTEST_FIELDS = tuple(f.name for f in fields(BacktestConfig) if f.name not in ("signal", "name"))


def config_parameters(config: BacktestConfig) -> Dict[str, Any]:
    """Flat {field: value} view of a config (signal and backtest fields), enums as values."""
    params: Dict[str, Any] = {}
    for name in SIGNAL_FIELDS:
        value = getattr(config.signal, name)
        params[name] = getattr(value, "value", value)
    for name in BACKTEST_FIELDS:
        params[name] = getattr(config, name)
    return params


def _format_value(value: Any) -> str:
    return str(getattr(value, "value", value))


def generate_grid_configs(
    base_config: Optional[BacktestConfig] = None,
    grid: Optional[Dict[str, Sequence[Any]]] = None,
    name_prefix: str = "grid",
) -> List[BacktestConfig]:
    """
    Generate one BacktestConfig per combination of grid values.

    Args:
        base_config: Values for every parameter not in the grid
        grid: {field name: candidate values}; e.g. {"fast_period": [5, 9], "slow_period": [21, 50]}
        name_prefix: Prefix for generated config names

    Returns:
        Valid configs in grid order (last key varies fastest). Combinations
        that fail validation (e.g. fast_period >= slow_period) are skipped.

    Raises:
        InvalidParameterError: Unknown grid key or a key with no values
    """
    base_config = base_config or BacktestConfig()
    grid = grid or {}

    for key, values in grid.items():
        if key not in SIGNAL_FIELDS and key not in BACKTEST_FIELDS:
            raise InvalidParameterError(
                f"Unknown grid parameter '{key}'. "
                f"Available: {', '.join(SIGNAL_FIELDS + BACKTEST_FIELDS)}"
            )
        if len(values) == 0:
            raise InvalidParameterError(f"Grid parameter '{key}' has no values")

    if not grid:
        return [base_config]

    keys = list(grid)
    configs = []
    skipped = 0
    for combo in itertools.product(*(grid[k] for k in keys)):
        assignment = dict(zip(keys, combo))
        label = ",".join(f"{k}={_format_value(v)}" for k, v in assignment.items())
        signal_changes = {k: v for k, v in assignment.items() if k in SIGNAL_FIELDS}
        backtest_changes = {k: v for k, v in assignment.items() if k in BACKTEST_FIELDS}
        try:
            signal = replace(base_config.signal, **signal_changes)
            config = replace(
                base_config,
                signal=signal,
                name=f"{name_prefix}[{label}]",
                **backtest_changes,
            )
        except InvalidParameterError as e:
            skipped += 1
            logger.info(f"Skipping invalid combination {label}: {e}")
            continue
        configs.append(config)

    logger.info(f"Generated {len(configs)} configs ({skipped} invalid combinations skipped)")
    return configs
