"""
Candle conversion between pandas DataFrames and Candle lists.

Collaborators usually hold OHLCV data as a DataFrame (from a CSV, an
exchange client, ...); the engine consumes a list of Candles.
"""
from typing import List, Sequence

import numpy as np
import pandas as pd

from ..shared.errors import MalformedCandleError, MalformedInputError
from ..shared.types import Candle

OHLC_COLUMNS = ("open", "high", "low", "close")


def candles_from_dataframe(df: pd.DataFrame, timestamp_column: str = "timestamp") -> List[Candle]:
    """
    Build Candles from an OHLCV DataFrame.

    Column names are matched case-insensitively ("Close" and "close" both
    work). Volume is optional (0 when missing). The timestamp comes from
    timestamp_column when present, otherwise from the index.

    Raises:
        MalformedInputError: Missing OHLC column or non-numeric values
        MalformedCandleError: A row with a NaN/inf price (carries the row position)
    """
    lookup = {str(c).lower(): c for c in df.columns}
    missing = [c for c in OHLC_COLUMNS if c not in lookup]
    if missing:
        raise MalformedInputError(
            f"DataFrame is missing column(s): {', '.join(missing)} (have: {', '.join(map(str, df.columns))})"
        )

    columns = list(OHLC_COLUMNS) + (["volume"] if "volume" in lookup else [])
    try:
        values = df[[lookup[c] for c in columns]].to_numpy(dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"OHLCV columns must be numeric: {e}") from e
    if "volume" not in lookup:
        values = np.column_stack((values, np.zeros(len(values))))

    bad_rows = np.flatnonzero(~np.isfinite(values).all(axis=1))
    if bad_rows.size:
        row = int(bad_rows[0])
        raise MalformedCandleError(row, f"non-finite OHLCV values {values[row].tolist()}")

    ts_key = lookup.get(timestamp_column.lower())
    timestamps = df[ts_key].tolist() if ts_key is not None else list(df.index)

    return [
        Candle(
            timestamp=ts,
            open=float(o),
            high=float(h),
            low=float(l),
            close=float(c),
            volume=float(v),
        )
        for ts, (o, h, l, c, v) in zip(timestamps, values)
    ]


def candles_to_dataframe(candles: Sequence[Candle]) -> pd.DataFrame:
    """Inverse of candles_from_dataframe: OHLCV columns indexed by timestamp."""
    df = pd.DataFrame(
        {
            "open": [c.open for c in candles],
            "high": [c.high for c in candles],
            "low": [c.low for c in candles],
            "close": [c.close for c in candles],
            "volume": [c.volume for c in candles],
        },
        index=pd.Index([c.timestamp for c in candles], name="timestamp"),
    )
    return df
