# tradelists/helpers.py

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

import pandas as pd

from .models import DateRange, Trade

# NOTE:
# - All helpers here are PURE (no session or app state).
# - Dates are calendar days; time of day is discarded after moving to UTC.


def normalize_date(value) -> Optional[date]:
    """
    Normalize a date-ish value (string/date/datetime/Timestamp/None) to a
    calendar ``date``. Timezone-aware values are converted to UTC first.
    Returns None when the value cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        # numeric cells are never dates in a trade list
        return None
    if isinstance(value, str):
        value = value.strip()
        if value in ("", "null"):
            return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value

    ts = pd.to_datetime(value, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC")
    return ts.date()


def date_range_from(start=None, end=None) -> DateRange:
    """Build an inclusive DateRange from loose user input (strings, dates, None)."""
    return DateRange(start=normalize_date(start), end=normalize_date(end))


def within_dates(trades: Iterable[Trade], date_range: Optional[DateRange]) -> list[Trade]:
    """
    Return trades whose calendar date falls in ``date_range`` (inclusive).
    If the range is None or open on both ends, every trade is kept.
    """
    if date_range is None or date_range.is_open:
        return list(trades)
    return [t for t in trades if date_range.contains(t.date)]


def strip_csv_extension(filename: str) -> str:
    """'ES_trend_LONG.csv' -> 'ES_trend_LONG' (case-insensitive, only a trailing .csv)."""
    if filename.lower().endswith(".csv"):
        return filename[:-4]
    return filename


def safe_unique_name(name: str, existing: set[str]) -> str:
    """
    If `name` already exists, append ' (n)' with the smallest n >= 2 to make it unique.
    """
    base = name
    n = 2
    out = name
    while out in existing:
        out = f"{base} ({n})"
        n += 1
    return out
