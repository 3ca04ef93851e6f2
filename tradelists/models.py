# tradelists/models.py
"""
Record types shared by the parser, the metrics engine and the portfolio /
correlation builders.

Everything derived from an upload is a frozen dataclass; a contract
multiplier produces a new copy instead of mutating the original metrics.
Field order is the serialisation order (``to_dict`` keeps it).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Optional, Union

Cell = Union[str, float]


@dataclass
class RawTable:
    """Header + data rows as produced by the CSV parser."""

    header: list[str]
    rows: list[list[Cell]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.header)


@dataclass(frozen=True)
class Trade:
    date: date
    equity: float
    cum_equity: float
    trade_list_id: Optional[str] = None

    def scaled(self, multiplier: float) -> "Trade":
        return Trade(
            date=self.date,
            equity=self.equity * multiplier,
            cum_equity=self.cum_equity * multiplier,
            trade_list_id=self.trade_list_id,
        )


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day window; either bound may be open."""

    start: Optional[date] = None
    end: Optional[date] = None

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None


@dataclass(frozen=True)
class StrategyMetrics:
    # identity
    filename: str
    original_filename: str
    strategy_name: str
    symbol: str
    direction: str
    intraday_status: Optional[str]
    is_benchmark: bool
    is_futures: bool

    # performance
    net_profit: float
    gross_profit: float
    gross_loss: float
    profit_factor: float
    win_rate: float
    average_win: float
    average_loss: float
    average_trade: float
    expected_value: float
    largest_win: float
    largest_loss: float
    max_drawdown: float
    total_trades: int
    winning_trades: int
    losing_trades: int
    margin: float
    start_date: date
    end_date: date

    # series
    trade_data: tuple[Trade, ...] = ()
    processed_data: tuple[Trade, ...] = ()

    @property
    def display_name(self) -> str:
        name = self.strategy_name or self.filename or "Unknown"
        return f"_{name}" if self.is_benchmark else name

    def summary(self) -> dict[str, Any]:
        """Serializable row without the trade series."""
        out = asdict(self)
        out.pop("trade_data")
        out.pop("processed_data")
        out["display_name"] = self.display_name
        return out


@dataclass(frozen=True)
class PortfolioPoint:
    date_str: str
    cum_equity: float
    drawdown: float
    drawdown_percent: float


@dataclass(frozen=True)
class PortfolioMetrics:
    total_pnl: float
    annual_growth_rate: float
    pnl_drawdown_ratio: float
    max_drawdown: float
    dd_percent_starting_capital: float
    trade_win_rate: float
    total_trades: int
    winning_trades_count: int
    losing_trades_count: int
    average_win: float
    average_loss: float
    expected_value: float
    total_margin: float
    trading_period_days: int
    selected_count: int


@dataclass(frozen=True)
class PortfolioResult:
    time_series: tuple[PortfolioPoint, ...]
    metrics: PortfolioMetrics

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SeriesPoint:
    date_str: str
    value: float


@dataclass(frozen=True)
class StrategySeries:
    filename: str
    name: str
    points: tuple[SeriesPoint, ...] = ()


@dataclass(frozen=True)
class CorrelationMatrix:
    matrix: tuple[tuple[float, ...], ...]
    strategies: tuple[str, ...]
    size: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "matrix": [list(row) for row in self.matrix],
            "strategies": list(self.strategies),
            "size": self.size,
        }
