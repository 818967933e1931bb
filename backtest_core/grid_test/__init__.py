"""
Parameter grid search.

Generates config grids, runs them as independent backtests on a process
pool and ranks/analyzes the outcome.
"""
from .grid_search import generate_grid_configs, config_parameters
from .sweep import (
    METRICS,
    RankedResult,
    SweepResult,
    rank_results,
    run_parameter_sweep,
)
from .analysis import summarize_by_parameter, top_configs

__all__ = [
    'generate_grid_configs',
    'config_parameters',
    'METRICS',
    'RankedResult',
    'SweepResult',
    'rank_results',
    'run_parameter_sweep',
    'summarize_by_parameter',
    'top_configs',
]
