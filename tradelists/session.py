# tradelists/session.py

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Sequence

from .config import Settings
from .constants import DEFAULT_CONTRACT_MULTIPLIER, DEFAULT_STARTING_CAPITAL, MARGIN_RATES
from .corr import build_correlation_matrix, correlation_pairs, daily_returns
from .etl import ParseError, clean_table, parse_csv
from .exports import cleaned_export_filename, cleaned_table_csv, correlation_csv
from .helpers import date_range_from
from .margin import load_margin_table
from .metrics import apply_contract_multiplier, clamp_multiplier, compute_metrics, sort_metrics
from .models import CorrelationMatrix, DateRange, PortfolioResult, RawTable, StrategyMetrics, StrategySeries
from .portfolio import aggregate_portfolio, overlay_table, strategy_series
from .remote import RemoteFetchError, RemoteFile, RemoteSource

logger = logging.getLogger(__name__)


class TradeListSession:
    """
    In-memory state of one analysis session: cleaned uploads, contract
    multipliers, the selected set, date range and starting capital.

    Every derived result is recomputed from that state on request.
    """

    def __init__(
        self,
        starting_capital: float = DEFAULT_STARTING_CAPITAL,
        margin_table: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.margin_table = dict(MARGIN_RATES if margin_table is None else margin_table)
        self.starting_capital = float(starting_capital)
        self.tables: dict[str, RawTable] = {}
        self.contract_multipliers: dict[str, float] = {}
        self.date_range = DateRange()
        self.normalize_equity = False
        self.errors: list[str] = []
        # insertion-ordered set of filenames
        self._selected: dict[str, None] = {}
        self._base_metrics: dict[str, Optional[StrategyMetrics]] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "TradeListSession":
        return cls(
            starting_capital=settings.starting_capital,
            margin_table=load_margin_table(settings.margin_table_path),
        )

    # ---------------- uploads ----------------
    def ingest(self, files: Iterable[tuple[str, str]]) -> list[str]:
        """
        Parse + clean each ``(filename, content)``; same-named tables are
        replaced. Failures become messages in ``errors`` and do not stop the
        batch. Returns the filenames whose tables were stored.
        """
        self.errors = []
        stored: list[str] = []
        for filename, content in files:
            try:
                parsed = parse_csv(content)
            except ParseError as exc:
                logger.warning("Parse failed for %s: %s", filename, exc)
                self.errors.append(f"Error processing {filename}: {exc}")
                continue

            table = clean_table(parsed)
            self.tables[filename] = table
            metrics = compute_metrics(table, filename, self.margin_table)
            self._base_metrics[filename] = metrics
            stored.append(filename)
            if metrics is None:
                logger.warning("No trades reconstructed for %s", filename)
                self.errors.append(
                    f"Error processing {filename}: no trades found "
                    "(needs 'Cum Net Profit' and 'Date/Time' columns)"
                )
            else:
                logger.info("Loaded %s: %d trades", filename, metrics.total_trades)
        return stored

    def fetch_remote(self, source: RemoteSource, overwrite: bool = False) -> list[str]:
        """Pull trade lists from a remote store and ingest them."""
        self.errors = []
        try:
            remote_files = source.fetch()
        except RemoteFetchError as exc:
            logger.warning("Remote fetch failed: %s", exc)
            self.errors.append(f"Remote fetch error: {exc}")
            return []
        return self.ingest_remote(remote_files, overwrite)

    def ingest_remote(self, remote_files: Sequence[RemoteFile], overwrite: bool = False) -> list[str]:
        """Ingest already-fetched remote files; existing names are kept unless ``overwrite``."""
        if not overwrite:
            skipped = [f.filename for f in remote_files if f.filename in self.tables]
            if skipped:
                logger.info("Keeping existing tables for %s", ", ".join(skipped))
            remote_files = [f for f in remote_files if f.filename not in self.tables]
        return self.ingest((f.filename, f.content) for f in remote_files)

    def remove(self, filename: str) -> None:
        self._require(filename)
        self.tables.pop(filename)
        self._base_metrics.pop(filename, None)
        self.contract_multipliers.pop(filename, None)
        self._selected.pop(filename, None)

    def _require(self, filename: str) -> None:
        if filename not in self.tables:
            raise KeyError(filename)

    # ---------------- selection & inputs ----------------
    @property
    def selected(self) -> list[str]:
        return list(self._selected)

    def toggle(self, filename: str) -> bool:
        """Flip selection of one file; returns the new state."""
        self._require(filename)
        if filename in self._selected:
            del self._selected[filename]
            return False
        self._selected[filename] = None
        return True

    def select(self, filenames: Sequence[str]) -> None:
        for name in filenames:
            self._require(name)
        self._selected = dict.fromkeys(filenames)

    def clear_selection(self) -> None:
        self._selected = {}

    def set_date_range(self, start=None, end=None) -> DateRange:
        self.date_range = date_range_from(start, end)
        return self.date_range

    def set_contract(self, filename: str, value) -> float:
        self._require(filename)
        mult = clamp_multiplier(value)
        self.contract_multipliers[filename] = mult
        return mult

    def apply_master(self, value) -> float:
        """Set every multiplier already on record to the same value."""
        mult = clamp_multiplier(value)
        for name in self.contract_multipliers:
            self.contract_multipliers[name] = mult
        return mult

    def multiplier_for(self, filename: str) -> float:
        return self.contract_multipliers.get(filename) or DEFAULT_CONTRACT_MULTIPLIER

    # ---------------- derived results ----------------
    def metrics(self) -> dict[str, StrategyMetrics]:
        out: dict[str, StrategyMetrics] = {}
        for name, base in self._base_metrics.items():
            if base is not None:
                out[name] = apply_contract_multiplier(base, self.multiplier_for(name))
        return out

    def sorted_metrics(
        self,
        sort_key: Optional[str] = None,
        direction: str = "asc",
        priorities: Sequence[tuple[str, str]] = (),
    ) -> list[StrategyMetrics]:
        return sort_metrics(self.metrics().values(), sort_key, direction, priorities)

    def portfolio(self) -> Optional[PortfolioResult]:
        return aggregate_portfolio(self.metrics(), self.selected, self.date_range, self.starting_capital)

    def strategy_series(self) -> list[StrategySeries]:
        return strategy_series(self.metrics(), self.selected, self.date_range, self.normalize_equity)

    def overlay(self) -> list[dict]:
        return overlay_table(self.strategy_series())

    def daily_returns(self) -> dict[str, list[float]]:
        return daily_returns(self.metrics(), self.selected, self.date_range)

    def correlation(self) -> Optional[CorrelationMatrix]:
        return build_correlation_matrix(self.daily_returns(), self.selected)

    # ---------------- exports ----------------
    def export_cleaned(self, filename: str) -> tuple[str, str]:
        """(download name, csv text) for one cleaned table."""
        self._require(filename)
        table = self.tables[filename]
        return cleaned_export_filename(filename), cleaned_table_csv(table.header, table.rows)

    def export_correlation(self) -> Optional[str]:
        returns = self.daily_returns()
        result = build_correlation_matrix(returns, self.selected)
        if result is None:
            return None
        return correlation_csv(correlation_pairs(result, returns, self.date_range))
