# tradelists/naming.py

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import BENCHMARK_TAG, INTRADAY_TAG, MARGIN_RATES
from .helpers import strip_csv_extension

_LONG_RE = re.compile("LONG", re.IGNORECASE)
_SHORT_RE = re.compile("SHORT", re.IGNORECASE)
_DTH_RE = re.compile(INTRADAY_TAG, re.IGNORECASE)
_UNDERSCORES_RE = re.compile("_+")


@dataclass(frozen=True)
class FilenameInfo:
    symbol: str
    direction: str
    intraday_status: Optional[str]
    strategy_name: str
    is_benchmark: bool
    is_futures: bool


def is_benchmark_file(filename: Optional[str]) -> bool:
    return bool(filename) and BENCHMARK_TAG in filename.lower()


def benchmark_symbol(filename: str) -> str:
    """Benchmarks are named '<SYMBOL>_..._benchmark.csv'."""
    return strip_csv_extension(filename).split("_")[0].upper()


def _drop_token(text: str, pattern: re.Pattern) -> str:
    return pattern.sub("", text).strip("_")


def classify(filename: Optional[str], table: Optional[Mapping[str, float]] = None) -> FilenameInfo:
    """
    Derive symbol, direction, intraday flag and strategy name from a filename
    following ``[SYMBOL_]{strategy tokens}[_LONG|_SHORT][_DTH][_benchmark].csv``.

    Non-benchmarks only take the first token as symbol when it is a known
    futures root; otherwise it stays part of the strategy name.
    """
    rates = MARGIN_RATES if table is None else table
    if not filename:
        return FilenameInfo("", "Unknown", None, filename or "", False, False)

    base = strip_csv_extension(filename)
    benchmark = is_benchmark_file(base)
    parts = base.split("_")

    symbol = ""
    remaining = base
    if benchmark:
        symbol = parts[0].upper()
        remaining = "_".join(parts[1:])
    elif parts[0].upper() in rates:
        symbol = parts[0].upper()
        remaining = "_".join(parts[1:])

    direction = "Unknown"
    if "LONG" in remaining.upper():
        direction = "Long"
        remaining = _drop_token(remaining, _LONG_RE)
    elif "SHORT" in remaining.upper():
        direction = "Short"
        remaining = _drop_token(remaining, _SHORT_RE)

    intraday_status = None
    if INTRADAY_TAG in remaining.upper():
        intraday_status = INTRADAY_TAG
        remaining = _drop_token(remaining, _DTH_RE)

    if benchmark:
        strategy_name = symbol or "Unknown"
    else:
        strategy_name = _UNDERSCORES_RE.sub("_", remaining.strip("_")) or "Unknown Strategy"

    return FilenameInfo(
        symbol=symbol or "Unknown",
        direction=direction,
        intraday_status=intraday_status,
        strategy_name=strategy_name,
        is_benchmark=benchmark,
        # Non-benchmark strategies are never flagged as futures here; the
        # margin resolver validates their symbols on its own.
        is_futures=benchmark and symbol in rates,
    )
