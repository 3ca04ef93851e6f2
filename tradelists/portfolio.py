# tradelists/portfolio.py

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Optional

import pandas as pd

from .constants import DEFAULT_STARTING_CAPITAL
from .helpers import safe_unique_name, within_dates
from .metrics import trade_stats
from .models import (
    DateRange,
    PortfolioMetrics,
    PortfolioPoint,
    PortfolioResult,
    SeriesPoint,
    StrategyMetrics,
    StrategySeries,
    Trade,
)

logger = logging.getLogger(__name__)


def daily_pnl(trades: Iterable[Trade]) -> pd.Series:
    """Sum of trade equity per calendar day, sorted by date."""
    trades = list(trades)
    if not trades:
        return pd.Series(dtype=float)
    frame = pd.DataFrame({"date": [t.date for t in trades], "equity": [t.equity for t in trades]})
    return frame.groupby("date", sort=True)["equity"].sum()


def _selected_metrics(
    all_metrics: Mapping[str, StrategyMetrics], selected: Iterable[str]
) -> list[tuple[str, StrategyMetrics]]:
    return [(name, all_metrics[name]) for name in selected if all_metrics.get(name) is not None]


def aggregate_portfolio(
    all_metrics: Mapping[str, StrategyMetrics],
    selected: Iterable[str],
    date_range: Optional[DateRange] = None,
    starting_capital: float = DEFAULT_STARTING_CAPITAL,
) -> Optional[PortfolioResult]:
    """
    Merge the selected strategies' trades into one daily equity curve.

    Same-day P&L is summed across strategies, then the days are walked in
    date order from ``starting_capital`` while tracking the running peak.
    Drawdown points are stored negative. Returns None for an empty selection.
    """
    selected = list(selected)
    if not selected:
        return None

    picked = _selected_metrics(all_metrics, selected)
    pool: list[Trade] = []
    total_margin = 0.0
    for _, m in picked:
        pool.extend(m.trade_data)
        total_margin += m.margin
    pool.sort(key=lambda t: t.date)
    filtered = within_dates(pool, date_range)

    daily = daily_pnl(filtered)
    time_series: list[PortfolioPoint] = []
    cum_equity = starting_capital
    peak = starting_capital
    max_dd = 0.0
    total_pnl = 0.0
    for day, pnl in daily.items():
        pnl = float(pnl)
        cum_equity += pnl
        total_pnl += pnl
        if cum_equity > peak:
            peak = cum_equity
        dd = peak - cum_equity
        if dd > max_dd:
            max_dd = dd
        neg_dd = -dd if dd else 0.0
        time_series.append(
            PortfolioPoint(
                date_str=day.isoformat(),
                cum_equity=cum_equity,
                drawdown=neg_dd,
                drawdown_percent=(neg_dd / starting_capital * 100.0) if starting_capital > 0 else 0.0,
            )
        )

    if picked:
        start = min(m.start_date for _, m in picked)
        end = max(m.end_date for _, m in picked)
        period_days = (end - start).days or 1
    else:
        period_days = 1

    stats = trade_stats([t.equity for t in filtered])
    metrics = PortfolioMetrics(
        total_pnl=total_pnl,
        annual_growth_rate=(total_pnl / starting_capital / period_days * 365 * 100.0) if starting_capital > 0 else 0.0,
        pnl_drawdown_ratio=(total_pnl / max_dd) if max_dd != 0 else math.inf,
        max_drawdown=max_dd,
        dd_percent_starting_capital=(max_dd / starting_capital * 100.0) if starting_capital > 0 else 0.0,
        trade_win_rate=stats["win_rate"] * 100.0,
        total_trades=stats["total_trades"],
        winning_trades_count=stats["winning_trades"],
        losing_trades_count=stats["losing_trades"],
        average_win=stats["average_win"],
        average_loss=stats["average_loss"],
        expected_value=stats["expected_value"],
        total_margin=total_margin,
        trading_period_days=period_days,
        selected_count=len(selected),
    )
    logger.debug(
        "Portfolio of %d strategies: %d trades over %d days, pnl=%.2f maxdd=%.2f",
        len(selected), len(filtered), len(time_series), total_pnl, max_dd,
    )
    return PortfolioResult(time_series=tuple(time_series), metrics=metrics)


def strategy_series(
    all_metrics: Mapping[str, StrategyMetrics],
    selected: Iterable[str],
    date_range: Optional[DateRange] = None,
    normalize: bool = False,
) -> list[StrategySeries]:
    """
    One cumulative-equity line per selected strategy over its own filtered
    trades, restarted from 0. With ``normalize`` each point is expressed as a
    percentage of the strategy's margin (raw dollars when margin is 0).
    """
    out: list[StrategySeries] = []
    for name, m in _selected_metrics(all_metrics, selected):
        cum = 0.0
        points: list[SeriesPoint] = []
        for t in within_dates(m.processed_data, date_range):
            cum += t.equity
            value = (cum / m.margin * 100.0) if (normalize and m.margin) else cum
            points.append(SeriesPoint(date_str=t.date.isoformat(), value=value))
        out.append(StrategySeries(filename=name, name=m.display_name, points=tuple(points)))
    return out


def overlay_table(series: Iterable[StrategySeries]) -> list[dict[str, Any]]:
    """
    Rows over the sorted union of dates, one column per strategy name, holding
    the strategy's first value on that date or None.
    """
    columns: dict[str, pd.Series] = {}
    for s in series:
        label = safe_unique_name(s.name, set(columns) | {"date"})
        values = pd.Series({p.date_str: p.value for p in reversed(s.points)}, dtype=float)
        columns[label] = values
    if not columns:
        return []
    frame = pd.DataFrame(columns).sort_index()
    frame = frame.astype(object).where(frame.notna(), None)
    return [{"date": day, **row.to_dict()} for day, row in frame.iterrows()]
