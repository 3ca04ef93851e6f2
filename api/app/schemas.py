from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class FiniteModel(BaseModel):
    """Base model that serialises inf/nan floats as null."""

    @field_validator("*", mode="before")
    @classmethod
    def _drop_non_finite(cls, value: Any) -> Any:
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value


class FileSummary(BaseModel):
    filename: str
    row_count: int
    column_count: int
    selected: bool = False
    contract_multiplier: float = 1.0
    has_metrics: bool = False


class UploadResponse(BaseModel):
    stored: List[str] = Field(default_factory=list)
    files: List[FileSummary] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class StrategyMetricsRow(FiniteModel):
    filename: str
    original_filename: str
    display_name: str
    strategy_name: str
    symbol: str
    direction: str
    intraday_status: Optional[str] = None
    is_benchmark: bool
    is_futures: bool
    net_profit: float
    gross_profit: float
    gross_loss: float
    profit_factor: Optional[float] = None
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


class MetricsResponse(BaseModel):
    rows: List[StrategyMetricsRow] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class ContractUpdate(BaseModel):
    value: float


class ContractsResponse(BaseModel):
    multipliers: Dict[str, float] = Field(default_factory=dict)


class SelectionUpdate(BaseModel):
    files: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    starting_capital: Optional[float] = Field(default=None, gt=0)
    normalize_equity: Optional[bool] = None


class SelectionState(BaseModel):
    files: List[str]
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    starting_capital: float
    normalize_equity: bool


class PortfolioPointModel(FiniteModel):
    date_str: str
    cum_equity: float
    drawdown: float
    drawdown_percent: float


class PortfolioMetricsModel(FiniteModel):
    total_pnl: float
    annual_growth_rate: float
    pnl_drawdown_ratio: Optional[float] = None
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


class PortfolioResponse(BaseModel):
    time_series: List[PortfolioPointModel]
    metrics: PortfolioMetricsModel


class SeriesPointModel(FiniteModel):
    date_str: str
    value: float


class StrategySeriesModel(BaseModel):
    filename: str
    name: str
    points: List[SeriesPointModel] = Field(default_factory=list)


class StrategySeriesResponse(BaseModel):
    series: List[StrategySeriesModel] = Field(default_factory=list)
    overlay: List[Dict[str, Any]] = Field(default_factory=list)


class CorrelationResponse(BaseModel):
    matrix: List[List[float]]
    strategies: List[str]
    size: int


class RemoteFetchResponse(BaseModel):
    stored: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
