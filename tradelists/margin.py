# tradelists/margin.py

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .constants import INTRADAY_MARGIN_DIVISOR, INTRADAY_TAG, MARGIN_RATES
from .models import Trade
from .naming import benchmark_symbol, is_benchmark_file

logger = logging.getLogger(__name__)


def load_margin_table(path: Optional[str | Path] = None) -> dict[str, float]:
    """
    Built-in margin table, optionally overlaid with a JSON object
    ``{"SYMBOL": margin}`` read from ``path``. Symbols are upper-cased.
    """
    table = dict(MARGIN_RATES)
    if not path:
        return table
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"margin table {path} must be a JSON object")
    for sym, rate in payload.items():
        table[str(sym).upper()] = float(rate)
    logger.info("Loaded %d margin overrides from %s", len(payload), path)
    return table


def _intraday_adjusted(rate: float, name: Optional[str]) -> float:
    if name and INTRADAY_TAG in name.upper():
        return rate / INTRADAY_MARGIN_DIVISOR
    return rate


def capital_proxy(processed_data: Optional[Sequence[Trade]]) -> float:
    """|final cumulative equity| stands in for margin when none is tabled."""
    if not processed_data:
        return 0.0
    return abs(processed_data[-1].cum_equity)


def margin_for(
    symbol_string: Optional[str],
    filename: Optional[str] = None,
    processed_data: Optional[Sequence[Trade]] = None,
    table: Optional[Mapping[str, float]] = None,
) -> float:
    """
    Margin requirement for a strategy.

    - Benchmark with a tabled symbol: table rate (a tenth of it for DTH files).
    - Benchmark without one (stock/ETF): |last cumulative equity|, or 0.
    - Otherwise ``symbol_string`` may list several comma-separated trade-list
      names; each whose leading token is tabled contributes its rate, DTH
      discounted independently. Unknown tokens contribute 0.
    """
    rates = MARGIN_RATES if table is None else table
    if not symbol_string:
        return 0.0

    if filename and is_benchmark_file(filename):
        sym = benchmark_symbol(filename)
        if sym in rates:
            return _intraday_adjusted(float(rates[sym]), filename)
        return capital_proxy(processed_data)

    total = 0.0
    for token in (t.strip() for t in symbol_string.split(",")):
        if not token:
            continue
        sym = token.split("_")[0].upper()
        if sym in rates:
            total += _intraday_adjusted(float(rates[sym]), filename or token)
    return total
