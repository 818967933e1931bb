"""
Trade analysis helpers: aggregate by side (long vs short) and by exit reason.
"""
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .types import ExitReason, PositionSide, Trade


def _metrics_for_trades(pnls: List[float], pnl_pcts: List[float]) -> Dict[str, Any]:
    n = len(pnls)
    if n == 0:
        return {
            "count": 0,
            "win_rate_pct": 0.0,
            "total_pnl": 0.0,
            "avg_pnl": 0.0,
            "avg_pnl_pct": 0.0,
            "avg_win_pct": 0.0,
            "avg_loss_pct": 0.0,
        }
    total_pnl = sum(pnls)
    winners = [p for p in pnl_pcts if p > 0]
    losers = [p for p in pnl_pcts if p < 0]
    return {
        "count": n,
        "win_rate_pct": len([p for p in pnls if p > 0]) / n * 100,
        "total_pnl": total_pnl,
        "avg_pnl": total_pnl / n,
        "avg_pnl_pct": sum(pnl_pcts) / n,
        "avg_win_pct": (sum(winners) / len(winners)) if winners else 0.0,
        "avg_loss_pct": (sum(losers) / len(losers)) if losers else 0.0,
    }


def aggregate_trades_by_side(trades: Sequence[Trade]) -> Dict[str, Dict[str, Any]]:
    """
    Aggregate closed trades by side.

    Returns a dict keyed by "long" and "short" with count, win_rate_pct,
    total_pnl, avg_pnl, avg_pnl_pct, avg_win_pct, avg_loss_pct.
    """
    out: Dict[str, Dict[str, Any]] = {}
    for side in (PositionSide.LONG, PositionSide.SHORT):
        subset = [t for t in trades if t.side is side]
        out[side.value] = _metrics_for_trades(
            [t.pnl for t in subset],
            [t.return_pct for t in subset],
        )
    return out


def aggregate_trades_by_exit_reason(trades: Sequence[Trade]) -> Dict[str, Dict[str, Any]]:
    """Same metrics keyed by exit reason ("signal", "end_of_data")."""
    out: Dict[str, Dict[str, Any]] = {}
    for reason in ExitReason:
        subset = [t for t in trades if t.exit_reason is reason]
        out[reason.value] = _metrics_for_trades(
            [t.pnl for t in subset],
            [t.return_pct for t in subset],
        )
    return out
