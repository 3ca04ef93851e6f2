# tradelists/exports.py
"""CSV text for the download buttons: cleaned trade lists and correlation pairs."""

from __future__ import annotations

import io
from typing import Mapping, Sequence

import pandas as pd

from .models import Cell

CORRELATION_EXPORT_COLUMNS = ["Strategy 1", "Strategy 2", "Correlation", "Sample Size", "Period"]
CORRELATION_EXPORT_FILENAME = "correlation_data.csv"


def cleaned_export_filename(filename: str) -> str:
    return f"cleaned_{filename}"


def _to_csv(frame: pd.DataFrame) -> str:
    buf = io.StringIO()
    frame.to_csv(buf, index=False, lineterminator="\n", na_rep="")
    return buf.getvalue().rstrip("\n")


def _cell_text(value: Cell) -> Cell:
    # whole-number floats print without a trailing '.0'
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def cleaned_table_csv(header: Sequence[str], rows: Sequence[Sequence[Cell]]) -> str:
    """Header + rows; fields with commas/quotes/newlines are quoted, None is empty."""
    width = max([len(header)] + [len(r) for r in rows])
    columns = list(header) + [""] * (width - len(header))
    padded = [[_cell_text(v) for v in r] + [None] * (width - len(r)) for r in rows]
    frame = pd.DataFrame(padded, columns=columns, dtype=object)
    return _to_csv(frame)


def correlation_csv(pairs: Sequence[Mapping[str, object]]) -> str:
    frame = pd.DataFrame(list(pairs), columns=CORRELATION_EXPORT_COLUMNS)
    return _to_csv(frame)
