# tradelists/metrics.py

from __future__ import annotations

import dataclasses
import logging
import math
import re
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .constants import (
    CUM_PROFIT_MARKER,
    DATE_TIME_MARKER,
    DEFAULT_CONTRACT_MULTIPLIER,
    MARGIN_RATES,
    MAX_CONTRACT_MULTIPLIER,
    MIN_CONTRACT_MULTIPLIER,
    MULTIPLIED_FIELDS,
    NOT_AVAILABLE,
)
from .helpers import normalize_date, strip_csv_extension
from .margin import capital_proxy, margin_for
from .models import Cell, RawTable, StrategyMetrics, Trade
from .naming import classify

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = tuple(
    f.name for f in dataclasses.fields(StrategyMetrics) if f.name not in ("trade_data", "processed_data")
)


def find_column(header: Sequence[str], marker: str) -> int:
    """Index of the first header containing ``marker``, or -1."""
    for i, name in enumerate(header):
        if name and marker in name:
            return i
    return -1


def _is_missing(value: Cell) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip() or NOT_AVAILABLE in value.lower()
    return False


_NUMERIC_PREFIX = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _to_float(value: Cell) -> float:
    """Numbers pass through; text keeps its leading numeric part ('12abc' -> 12). Otherwise 0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        out = float(value)
    else:
        match = _NUMERIC_PREFIX.match(str(value))
        if match is None:
            return 0.0
        out = float(match.group(0))
    return out if math.isfinite(out) else 0.0


def reconstruct_trades(table: RawTable, filename: str) -> list[Trade]:
    """
    Pair consecutive rows (entry at 2i, exit at 2i+1) into trades.

    The entry row's cumulative cell carries the trade's own P&L and the exit
    row's carries account equity after the trade; the exit row's date is the
    trade date. Pairs with short rows, blank/'n/a' cumulative cells or an
    unreadable exit date are skipped.
    """
    header = table.header
    cum_idx = find_column(header, CUM_PROFIT_MARKER)
    date_idx = find_column(header, DATE_TIME_MARKER)
    if cum_idx == -1 or date_idx == -1:
        return []

    need = max(cum_idx, date_idx)
    trade_list_id = strip_csv_extension(filename)
    rows = table.rows
    trades: list[Trade] = []
    skipped = 0
    for i in range(0, len(rows) - 1, 2):
        entry_row, exit_row = rows[i], rows[i + 1]
        if len(entry_row) <= need or len(exit_row) <= need:
            skipped += 1
            continue
        entry_val, exit_val = entry_row[cum_idx], exit_row[cum_idx]
        if _is_missing(entry_val) or _is_missing(exit_val):
            skipped += 1
            continue
        day = normalize_date(exit_row[date_idx])
        if day is None:
            skipped += 1
            continue
        trades.append(
            Trade(
                date=day,
                equity=_to_float(entry_val),
                cum_equity=_to_float(exit_val),
                trade_list_id=trade_list_id,
            )
        )
    if skipped:
        logger.debug("%s: skipped %d incomplete row pairs", filename, skipped)
    return trades


def max_drawdown_from_cum(cum_equity: Iterable[float]) -> float:
    """Largest peak-to-current drop walking the series in order; peak starts at 0."""
    peak = 0.0
    max_dd = 0.0
    for v in cum_equity:
        if v > peak:
            peak = v
        dd = peak - v
        if dd > max_dd:
            max_dd = dd
    return float(max_dd)


def trade_stats(equities: Sequence[float]) -> dict[str, Any]:
    """Win/loss statistics over signed per-trade P&L (shared with the portfolio)."""
    pnl = pd.Series(equities, dtype=float)
    n = len(pnl)
    wins = pnl[pnl > 0]
    losses = pnl[pnl < 0]

    gp = float(wins.sum()) if len(wins) else 0.0
    gl = float(losses.sum()) if len(losses) else 0.0
    win_rate = len(wins) / n if n else 0.0
    avg_win = float(wins.mean()) if len(wins) else 0.0
    avg_loss = float(losses.mean()) if len(losses) else 0.0

    return {
        "gross_profit": gp,
        "gross_loss": gl,
        "profit_factor": abs(gp / gl) if gl != 0 else math.inf,
        "win_rate": win_rate,
        "average_win": avg_win,
        "average_loss": avg_loss,
        "expected_value": win_rate * avg_win - (1 - win_rate) * abs(avg_loss),
        "largest_win": float(wins.max()) if len(wins) else 0.0,
        "largest_loss": float(losses.min()) if len(losses) else 0.0,
        "total_trades": int(n),
        "winning_trades": int(len(wins)),
        "losing_trades": int(len(losses)),
    }


def compute_metrics(
    table: RawTable,
    filename: str,
    margin_table: Optional[Mapping[str, float]] = None,
) -> Optional[StrategyMetrics]:
    """
    Per-strategy metrics for one cleaned trade list.

    Returns None when there are no data rows, no 'Cum Net Profit' or
    'Date/Time' column, or no row pair could be turned into a trade.
    """
    if not table.rows:
        return None
    rates = MARGIN_RATES if margin_table is None else margin_table

    trades = reconstruct_trades(table, filename)
    if not trades:
        return None

    stats = trade_stats([t.equity for t in trades])
    # Net profit is the reported final account equity, not the sum of trade P&L.
    net_profit = trades[-1].cum_equity
    total = stats["total_trades"]

    info = classify(filename, rates)
    if info.is_benchmark and not info.is_futures:
        margin = capital_proxy(trades)
    else:
        leading_token = strip_csv_extension(filename).split("_")[0]
        margin = margin_for(leading_token, filename, trades, rates)

    processed = tuple(dataclasses.replace(t, trade_list_id=None) for t in trades)

    return StrategyMetrics(
        filename=strip_csv_extension(filename),
        original_filename=filename,
        strategy_name=info.strategy_name,
        symbol=info.symbol,
        direction=info.direction,
        intraday_status=info.intraday_status,
        is_benchmark=info.is_benchmark,
        is_futures=info.is_futures,
        net_profit=net_profit,
        gross_profit=stats["gross_profit"],
        gross_loss=stats["gross_loss"],
        profit_factor=stats["profit_factor"],
        win_rate=stats["win_rate"] * 100.0,
        average_win=stats["average_win"],
        average_loss=stats["average_loss"],
        average_trade=net_profit / total if total else 0.0,
        expected_value=stats["expected_value"],
        largest_win=stats["largest_win"],
        largest_loss=stats["largest_loss"],
        max_drawdown=max_drawdown_from_cum(t.cum_equity for t in trades),
        total_trades=total,
        winning_trades=stats["winning_trades"],
        # anything not a win counts as a loss in the table, scratches included
        losing_trades=total - stats["winning_trades"],
        margin=float(margin),
        start_date=trades[0].date,
        end_date=trades[-1].date,
        trade_data=tuple(trades),
        processed_data=processed,
    )


# --- Contract multipliers ------------------------------------------------------


def clamp_multiplier(value: Any) -> float:
    """Input-layer bound for multipliers: [0.1, 100000]; junk becomes 1.0."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONTRACT_MULTIPLIER
    if not math.isfinite(v):
        return DEFAULT_CONTRACT_MULTIPLIER
    return float(np.clip(v, MIN_CONTRACT_MULTIPLIER, MAX_CONTRACT_MULTIPLIER))


def apply_contract_multiplier(metrics: Optional[StrategyMetrics], multiplier: float = 1.0) -> Optional[StrategyMetrics]:
    """
    Scale dollar fields and every trade by ``multiplier``.

    Returns the *same* object when the multiplier is exactly 1.0. Counts,
    rates and dates are left alone, so win rate is multiplier-invariant
    while P&L fields are not.
    """
    if metrics is None or multiplier == 1.0:
        return metrics
    changes: dict[str, Any] = {f: getattr(metrics, f) * multiplier for f in MULTIPLIED_FIELDS}
    changes["trade_data"] = tuple(t.scaled(multiplier) for t in metrics.trade_data)
    changes["processed_data"] = tuple(t.scaled(multiplier) for t in metrics.processed_data)
    return dataclasses.replace(metrics, **changes)


# --- Sorting -------------------------------------------------------------------


def _sort_value(metrics: StrategyMetrics, column: str) -> tuple:
    v = getattr(metrics, column)
    if v is None:
        v = 0
    if isinstance(v, str):
        return (2, v.lower())
    if isinstance(v, date):
        return (1, v.toordinal())
    return (0, float(v))


def sort_metrics(
    metrics: Iterable[StrategyMetrics],
    sort_key: Optional[str] = None,
    direction: str = "asc",
    priorities: Sequence[tuple[str, str]] = (),
) -> list[StrategyMetrics]:
    """
    Order metric rows for the table.

    ``priorities`` (column, direction) pairs win over ``sort_key``; the first
    column that differs decides. Missing values count as 0, strings are
    compared case-insensitively. Stable.
    """
    out = list(metrics)
    keys = list(priorities) if priorities else ([(sort_key, direction)] if sort_key else [])
    for column, _ in keys:
        if column not in SORTABLE_COLUMNS:
            raise ValueError(f"Unknown sort column: {column}")
    # Stable sorts applied from the least to the most significant key.
    for column, col_dir in reversed(keys):
        out.sort(key=lambda m, c=column: _sort_value(m, c), reverse=(str(col_dir).lower() == "desc"))
    return out
