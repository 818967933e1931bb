"""
Candle data helpers.

Conversion from/to pandas DataFrames and seeded synthetic candle generators.
The engine never fetches data itself; these sit at its boundary.
"""
from .conversion import candles_from_dataframe, candles_to_dataframe
from .synthetic import TRENDS, generate_synthetic_candles

__all__ = [
    'candles_from_dataframe',
    'candles_to_dataframe',
    'TRENDS',
    'generate_synthetic_candles',
]
