from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Iterable, Optional, Sequence

import pytest

from tradelists.etl import clean_table, parse_csv
from tradelists.metrics import compute_metrics
from tradelists.models import StrategyMetrics
from tradelists.remote import RemoteFetchError, RemoteFile

HEADER = [
    "#",
    "Type",
    "Date/Time",
    "Signal",
    "Price",
    "Shares/Ctrts - Profit/Loss",
    "Net Profit - Cum Net Profit",
]

START = date(2024, 1, 1)


def money(value: float) -> str:
    text = f"${abs(value):,.2f}"
    return f"({text})" if value < 0 else text


def _field(value: str) -> str:
    return f'"{value}"' if "," in value else value


def trade_rows(trades: Iterable[tuple[date, float]]) -> list[list[str]]:
    """Entry/exit row pairs the way TradeStation writes them."""
    rows: list[list[str]] = []
    cum = 0.0
    for i, (day, pnl) in enumerate(trades, start=1):
        cum += pnl
        rows.append([str(i), "Buy", f"{day.isoformat()} 09:30", "Entry", "100.00", "1", money(pnl)])
        rows.append(["", "Sell", f"{day.isoformat()} 15:45", "Exit", "101.00", money(pnl), money(cum)])
    return rows


def csv_text(header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    lines = [",".join(_field(h) for h in header)]
    lines.extend(",".join(_field(v) for v in row) for row in rows)
    return "\n".join(lines) + "\n"


def build_trade_list(trades: Iterable[tuple[date, float]]) -> str:
    return csv_text(HEADER, trade_rows(trades))


def build_raw_export(trades: Iterable[tuple[date, float]]) -> str:
    """Broker layout: banner, header on line 4, data from line 6, trailer."""
    lines = [
        "TradeStation Trades List",
        "Strategy Performance Report",
        "",
        "Date Range: all",
        ",".join(_field(h) for h in HEADER),
        "",
    ]
    lines.extend(",".join(_field(v) for v in row) for row in trade_rows(trades))
    lines.append(",,,,,,")
    lines.append("TradeStation Trades List")
    return "\n".join(lines)


def spaced(pnls: Sequence[float], every: int = 3, start: date = START) -> list[tuple[date, float]]:
    return [(start + timedelta(days=i * every), pnl) for i, pnl in enumerate(pnls)]


# Net 1000 over 10 trades with 6 winners.
STRATEGY_A = [250.0, -125.0, 250.0, 250.0, -125.0, 250.0, -125.0, 250.0, 250.0, -125.0]
# Net -200 over 10 trades with 4 winners.
STRATEGY_B = [100.0, -100.0, -100.0, 100.0, -100.0, 100.0, -100.0, -100.0, 100.0, -100.0]


def metrics_for(filename: str, trades: Iterable[tuple[date, float]]) -> Optional[StrategyMetrics]:
    return compute_metrics(clean_table(parse_csv(build_trade_list(trades))), filename)


@pytest.fixture
def make_trade_list() -> Callable[[Iterable[tuple[date, float]]], str]:
    return build_trade_list


@pytest.fixture
def make_raw_export() -> Callable[[Iterable[tuple[date, float]]], str]:
    return build_raw_export


@pytest.fixture
def make_metrics() -> Callable[[str, Iterable[tuple[date, float]]], Optional[StrategyMetrics]]:
    return metrics_for


@pytest.fixture
def scenario_files() -> list[tuple[str, str]]:
    """Two strategies spanning the same 28 days: A nets 1000, B nets -200."""
    return [
        ("ES_Trend_LONG.csv", build_trade_list(spaced(STRATEGY_A))),
        ("NQ_Revert_SHORT.csv", build_trade_list(spaced(STRATEGY_B))),
    ]


class FakeRemoteSource:
    def __init__(self, files: Sequence[RemoteFile] = (), error: Optional[str] = None) -> None:
        self.files = list(files)
        self.error = error
        self.calls = 0

    def fetch(self) -> list[RemoteFile]:
        self.calls += 1
        if self.error:
            raise RemoteFetchError(self.error)
        return list(self.files)


@pytest.fixture
def fake_remote() -> type[FakeRemoteSource]:
    return FakeRemoteSource
