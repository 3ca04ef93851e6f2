# tradelists/etl.py

from __future__ import annotations

import logging
import re
from typing import Iterable, Sequence

from .constants import (
    CURRENCY_COLUMNS,
    RAW_DATA_START_LINE,
    RAW_EXPORT_MARKER,
    RAW_HEADER_LINE,
    TRADES_LIST_MARKER,
)
from .models import Cell, RawTable

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"^-?\d*\.?\d+$")
_PAREN_RE = re.compile(r"^\((.*)\)$")


class ParseError(ValueError):
    """Raised when a file has no usable header line."""


def is_raw_export(lines: Iterable[str]) -> bool:
    """True when any line carries the raw broker-export banner."""
    return any(RAW_EXPORT_MARKER in line for line in lines)


def has_three_consecutive_commas(line: str) -> bool:
    """Separator/noise rows in raw exports are runs of empty fields."""
    return ",,," in line


def parse_csv_line(line: str) -> list[str]:
    """
    Split one CSV line on commas, honouring double quotes.

    A quote toggles the in-quotes state and is dropped; a comma inside quotes
    is literal. Each field is stripped of surrounding whitespace.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def _collect_rows(lines: Sequence[str], skip_noise: bool) -> list[list[Cell]]:
    rows: list[list[Cell]] = []
    for raw in lines:
        line = raw.strip() if raw else ""
        if not line:
            continue
        if TRADES_LIST_MARKER in line:
            break
        if skip_noise and has_three_consecutive_commas(line):
            continue
        rows.append(parse_csv_line(line))
    return rows


def parse_csv(content: str) -> RawTable:
    """
    Parse trade-list text into a RawTable.

    Two layouts are recognised:
      - raw export: header on line 4, data from line 6, stop at the
        'Trades List' trailer, skip rows with three consecutive commas;
      - plain CSV: blank lines dropped, first line is the header, data runs
        until a 'Trades List' line.

    Raises ParseError when no header line exists.
    """
    all_lines = (content or "").split("\n")

    if is_raw_export(all_lines):
        if len(all_lines) <= RAW_HEADER_LINE:
            raise ParseError(
                f"raw export has {len(all_lines)} lines; header expected on line {RAW_HEADER_LINE + 1}"
            )
        header = parse_csv_line(all_lines[RAW_HEADER_LINE])
        rows = _collect_rows(all_lines[RAW_DATA_START_LINE:], skip_noise=True)
        logger.debug("Parsed raw export: %d columns, %d rows", len(header), len(rows))
        return RawTable(header=header, rows=rows)

    lines = [line for line in all_lines if line.strip()]
    if not lines:
        raise ParseError("file is empty")
    header = parse_csv_line(lines[0])
    rows = _collect_rows(lines[1:], skip_noise=False)
    logger.debug("Parsed plain CSV: %d columns, %d rows", len(header), len(rows))
    return RawTable(header=header, rows=rows)


# --- Currency normalisation --------------------------------------------------


def clean_currency_value(value: Cell) -> Cell:
    """
    Convert '$1,234.56' -> 1234.56 and '($500.00)' -> -500.0.

    Anything that is not a string, is empty, or does not reduce to a plain
    decimal number is returned unchanged (never raises).
    """
    if not value or not isinstance(value, str):
        return value
    cleaned = value.replace("$", "").replace(",", "")
    m = _PAREN_RE.match(cleaned)
    if m:
        cleaned = "-" + m.group(1)
    if _NUMBER_RE.match(cleaned):
        return float(cleaned)
    return value


def is_currency_column(column_name: str) -> bool:
    return bool(column_name) and any(col in column_name for col in CURRENCY_COLUMNS)


def process_currency_columns(rows: Sequence[Sequence[Cell]], header: Sequence[str]) -> list[list[Cell]]:
    """Apply clean_currency_value to whitelisted columns only; returns new rows."""
    currency_idx = [i for i, name in enumerate(header) if is_currency_column(name)]
    out: list[list[Cell]] = []
    for row in rows:
        new_row = list(row)
        for i in currency_idx:
            if i < len(new_row):
                new_row[i] = clean_currency_value(new_row[i])
        out.append(new_row)
    return out


def clean_table(table: RawTable) -> RawTable:
    """Parsed table -> table with currency columns converted to floats."""
    return RawTable(header=list(table.header), rows=process_currency_columns(table.rows, table.header))
