# tradelists/corr.py

from __future__ import annotations

import logging
import math
from typing import Iterable, Mapping, Optional, Sequence

import pandas as pd

from .helpers import strip_csv_extension, within_dates
from .models import CorrelationMatrix, DateRange, StrategyMetrics
from .portfolio import daily_pnl

logger = logging.getLogger(__name__)

MIN_CORRELATION_POINTS = 3


def daily_returns(
    all_metrics: Mapping[str, StrategyMetrics],
    selected: Iterable[str],
    date_range: Optional[DateRange] = None,
) -> dict[str, list[float]]:
    """
    Daily % returns per strategy on one shared date axis.

    The axis is the sorted union of every selected strategy's (filtered)
    trade dates; a strategy with no trade on a day contributes a 0 delta.
    Return on a day is (cum - prev_cum) / |prev_cum| * 100, and 0 while the
    previous cumulative equity is 0 (always the case on the first day).
    """
    per_strategy: dict[str, pd.Series] = {}
    for name in selected:
        m = all_metrics.get(name)
        if m is None:
            continue
        per_strategy[name] = daily_pnl(within_dates(m.trade_data, date_range))

    common_dates = sorted(set().union(*(s.index for s in per_strategy.values())))
    if not common_dates:
        return {}

    returns: dict[str, list[float]] = {}
    for name, pnl in per_strategy.items():
        cum = pnl.reindex(common_dates, fill_value=0.0).cumsum()
        prev = cum.shift(1, fill_value=0.0)
        pct = ((cum - prev) / prev.abs() * 100.0).where(prev != 0, 0.0)
        returns[name] = [float(v) for v in pct]
    logger.debug("Aligned %d strategies on %d common dates", len(returns), len(common_dates))
    return returns


def calculate_ranks(values: Sequence[float]) -> list[float]:
    """1-based ranks; ties share the mean of the positions they occupy."""
    return [float(r) for r in pd.Series(values, dtype=float).rank(method="average")]


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson r; 0 for mismatched/empty input or zero variance."""
    if len(x) != len(y) or len(x) == 0:
        return 0.0
    r = pd.Series(x, dtype=float).corr(pd.Series(y, dtype=float))
    return float(r) if math.isfinite(r) else 0.0


def spearman(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson on average ranks; 0 when lengths differ or fewer than 3 points."""
    if len(x) != len(y) or len(x) < MIN_CORRELATION_POINTS:
        logger.debug("Correlation skipped: lengths %d/%d", len(x), len(y))
        return 0.0
    rx = calculate_ranks(x)
    ry = calculate_ranks(y)
    logger.debug("Ranks head: %s | %s", rx[:5], ry[:5])
    return pearson(rx, ry)


def build_correlation_matrix(
    returns: Mapping[str, Sequence[float]],
    strategies: Iterable[str],
) -> Optional[CorrelationMatrix]:
    """
    Symmetric Spearman matrix over ``strategies`` in iteration order for both
    axes. Diagonal is 1.0; a pair missing a return series scores 0.
    Returns None for fewer than two strategies.
    """
    names = list(dict.fromkeys(strategies))
    if len(names) < 2:
        return None

    size = len(names)
    matrix = [[0.0] * size for _ in range(size)]
    for i in range(size):
        matrix[i][i] = 1.0
        for j in range(i + 1, size):
            r1 = returns.get(names[i]) or []
            r2 = returns.get(names[j]) or []
            corr = spearman(r1, r2) if (r1 and r2) else 0.0
            logger.debug("corr(%s, %s) = %.4f over %d points", names[i], names[j], corr, len(r1))
            matrix[i][j] = corr
            matrix[j][i] = corr
    return CorrelationMatrix(
        matrix=tuple(tuple(row) for row in matrix),
        strategies=tuple(names),
        size=size,
    )


def correlation_pairs(
    result: CorrelationMatrix,
    returns: Mapping[str, Sequence[float]],
    date_range: Optional[DateRange] = None,
) -> list[dict[str, object]]:
    """Upper-triangle rows for export: names, r (4dp), sample size, period label."""
    start = date_range.start.isoformat() if date_range and date_range.start else "All"
    end = date_range.end.isoformat() if date_range and date_range.end else "All"
    rows: list[dict[str, object]] = []
    for i, s1 in enumerate(result.strategies):
        for j in range(i + 1, result.size):
            rows.append({
                "Strategy 1": strip_csv_extension(s1),
                "Strategy 2": strip_csv_extension(result.strategies[j]),
                "Correlation": f"{result.matrix[i][j]:.4f}",
                "Sample Size": len(returns.get(s1) or []),
                "Period": f"{start} to {end}",
            })
    return rows
