"""
Analyze parameter-sweep results.

Works on the DataFrame from SweepResult.to_dataframe(): one row per run with
its parameters and summary metrics.
"""
from typing import Sequence

import pandas as pd

from ..shared.errors import InvalidParameterError


def summarize_by_parameter(
    df: pd.DataFrame,
    param: str,
    metric: str = "total_pnl",
) -> pd.DataFrame:
    """
    Aggregate a metric per value of one parameter.

    Shows how sensitive the metric is to that parameter with every other
    parameter averaged out. Sorted by mean metric, best first.
    """
    for column in (param, metric):
        if column not in df.columns:
            raise InvalidParameterError(f"Column '{column}' not in sweep results")
    if df.empty:
        return pd.DataFrame(columns=[param, f"{metric}_mean", f"{metric}_std",
                                     f"{metric}_min", f"{metric}_max", f"{metric}_count"])

    stats = df.groupby(param).agg({
        metric: ["mean", "std", "min", "max", "count"],
    })
    stats.columns = ["_".join(col).strip() for col in stats.columns.values]
    ascending = metric == "max_drawdown"
    stats = stats.sort_values(f"{metric}_mean", ascending=ascending)
    return stats.reset_index()


def top_configs(df: pd.DataFrame, n: int = 10, columns: Sequence[str] = ()) -> pd.DataFrame:
    """Best n runs by rank, optionally limited to some columns (rank and name always kept)."""
    ranked = df.sort_values("rank").head(n)
    if columns:
        keep = ["rank", "name"] + [c for c in columns if c not in ("rank", "name")]
        ranked = ranked[keep]
    return ranked.reset_index(drop=True)
