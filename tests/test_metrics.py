from __future__ import annotations

import math
from datetime import date

import pytest

from tradelists.etl import clean_table, parse_csv
from tradelists.metrics import (
    apply_contract_multiplier,
    clamp_multiplier,
    compute_metrics,
    max_drawdown_from_cum,
    reconstruct_trades,
    sort_metrics,
    trade_stats,
)
from tradelists.models import RawTable

from conftest import HEADER, STRATEGY_A, STRATEGY_B, spaced


def test_na_pair_is_dropped() -> None:
    rows = [
        ["1", "Buy", "2024-01-02 09:30", "", "", "", 100.0],
        ["", "Sell", "2024-01-02 15:00", "", "", "", 100.0],
        ["2", "Buy", "2024-01-03 09:30", "", "", "", "n/a"],
        ["", "Sell", "2024-01-03 15:00", "", "", "", 50.0],
    ]
    trades = reconstruct_trades(RawTable(header=HEADER, rows=rows), "ES_x.csv")
    assert len(trades) == 1
    assert trades[0].date == date(2024, 1, 2)
    assert trades[0].equity == 100.0
    assert trades[0].trade_list_id == "ES_x"


def test_odd_trailing_row_and_bad_dates_are_skipped() -> None:
    rows = [
        ["1", "Buy", "2024-01-02", "", "", "", 10.0],
        ["", "Sell", "not a date", "", "", "", 10.0],
        ["2", "Buy", "2024-01-03", "", "", "", 20.0],
        ["", "Sell", "2024-01-04", "", "", "", 30.0],
        ["3", "Buy", "2024-01-05", "", "", "", 5.0],
    ]
    trades = reconstruct_trades(RawTable(header=HEADER, rows=rows), "x.csv")
    assert [(t.date, t.equity, t.cum_equity) for t in trades] == [(date(2024, 1, 4), 20.0, 30.0)]


def test_text_cells_read_their_leading_number() -> None:
    rows = [
        ["1", "Buy", "2024-01-02", "", "", "", "12abc"],
        ["", "Sell", "2024-01-02", "", "", "", " -3.5e1 USD"],
        ["2", "Buy", "2024-01-03", "", "", "", "abc"],
        ["", "Sell", "2024-01-03", "", "", "", ".25"],
    ]
    trades = reconstruct_trades(RawTable(header=HEADER, rows=rows), "x.csv")
    assert [(t.equity, t.cum_equity) for t in trades] == [(12.0, -35.0), (0.0, 0.25)]


def test_profit_factor() -> None:
    stats = trade_stats([300.0, -100.0])
    assert stats["gross_profit"] == 300.0
    assert stats["gross_loss"] == -100.0
    assert stats["profit_factor"] == pytest.approx(3.0)
    assert trade_stats([100.0])["profit_factor"] == math.inf


def test_trade_stats_on_empty_input() -> None:
    stats = trade_stats([])
    assert stats["total_trades"] == 0
    assert stats["win_rate"] == 0.0
    assert stats["expected_value"] == 0.0


def test_max_drawdown_walk() -> None:
    assert max_drawdown_from_cum([100, 80, 120, 60, 110]) == pytest.approx(60.0)
    assert max_drawdown_from_cum([]) == 0.0
    # peak starts at zero, so an initial loss is a drawdown
    assert max_drawdown_from_cum([-40, -10]) == pytest.approx(40.0)


def test_compute_metrics_for_strategy(make_metrics) -> None:
    m = make_metrics("ES_Trend_LONG.csv", spaced(STRATEGY_A))
    assert m is not None
    assert m.filename == "ES_Trend_LONG"
    assert m.original_filename == "ES_Trend_LONG.csv"
    assert m.display_name == "Trend"
    assert m.symbol == "ES"
    assert m.net_profit == pytest.approx(1000.0)
    assert m.total_trades == 10
    assert m.winning_trades == 6
    assert m.losing_trades == 4
    assert m.win_rate == pytest.approx(60.0)
    assert m.gross_profit == pytest.approx(1500.0)
    assert m.gross_loss == pytest.approx(-500.0)
    assert m.profit_factor == pytest.approx(3.0)
    assert m.average_trade == pytest.approx(100.0)
    assert m.largest_win == pytest.approx(250.0)
    assert m.largest_loss == pytest.approx(-125.0)
    assert m.margin == pytest.approx(15000.0)
    assert m.start_date == date(2024, 1, 1)
    assert m.end_date == date(2024, 1, 28)
    assert len(m.trade_data) == 10
    assert all(t.trade_list_id is None for t in m.processed_data)


def test_compute_metrics_raw_export_matches_plain(make_raw_export, make_metrics) -> None:
    trades = spaced(STRATEGY_B)
    from_raw = compute_metrics(clean_table(parse_csv(make_raw_export(trades))), "NQ_Revert.csv")
    assert from_raw == make_metrics("NQ_Revert.csv", trades)
    assert from_raw.net_profit == pytest.approx(-200.0)


def test_compute_metrics_is_idempotent(make_trade_list) -> None:
    table = clean_table(parse_csv(make_trade_list(spaced(STRATEGY_A))))
    assert compute_metrics(table, "ES_a.csv") == compute_metrics(table, "ES_a.csv")


def test_compute_metrics_needs_columns_and_rows() -> None:
    assert compute_metrics(RawTable(header=HEADER, rows=[]), "x.csv") is None
    no_cum = RawTable(header=["Date/Time", "Price"], rows=[["2024-01-01", "1"], ["2024-01-02", "2"]])
    assert compute_metrics(no_cum, "x.csv") is None
    no_date = RawTable(header=["Cum Net Profit"], rows=[[1.0], [2.0]])
    assert compute_metrics(no_date, "x.csv") is None


def test_benchmark_without_table_symbol_uses_final_equity(make_metrics) -> None:
    m = make_metrics("SPY_benchmark.csv", spaced([500.0, -800.0]))
    assert m.is_benchmark
    assert m.display_name == "_SPY"
    assert m.margin == pytest.approx(300.0)


def test_contract_multiplier_scales_dollars_only(make_metrics) -> None:
    base = make_metrics("ES_Trend.csv", spaced(STRATEGY_A))
    doubled = apply_contract_multiplier(base, 2.0)

    assert doubled.net_profit == pytest.approx(2 * base.net_profit)
    assert doubled.max_drawdown == pytest.approx(2 * base.max_drawdown)
    assert doubled.margin == pytest.approx(2 * base.margin)
    assert [t.equity for t in doubled.trade_data] == [2 * t.equity for t in base.trade_data]
    assert [t.equity for t in doubled.processed_data] == [2 * t.equity for t in base.processed_data]
    assert doubled.win_rate == base.win_rate
    assert doubled.total_trades == base.total_trades
    assert doubled.profit_factor == base.profit_factor
    # base metrics are untouched and 1.0 is a no-op
    assert base.net_profit == pytest.approx(1000.0)
    assert apply_contract_multiplier(base, 1.0) is base
    assert apply_contract_multiplier(None, 3.0) is None


def test_clamp_multiplier() -> None:
    assert clamp_multiplier(0) == pytest.approx(0.1)
    assert clamp_multiplier(1e9) == 100000.0
    assert clamp_multiplier("2.5") == 2.5
    assert clamp_multiplier("abc") == 1.0
    assert clamp_multiplier(None) == 1.0
    assert clamp_multiplier(float("inf")) == 1.0


def test_sort_metrics(make_metrics) -> None:
    a = make_metrics("ES_Alpha.csv", spaced(STRATEGY_A))
    b = make_metrics("NQ_beta.csv", spaced(STRATEGY_B))
    c = make_metrics("GC_Gamma.csv", spaced([50.0]))

    assert sort_metrics([a, b, c]) == [a, b, c]
    assert [m.filename for m in sort_metrics([a, b, c], "net_profit", "desc")] == [
        "ES_Alpha",
        "GC_Gamma",
        "NQ_beta",
    ]
    assert [m.strategy_name for m in sort_metrics([c, b, a], "strategy_name")] == ["Alpha", "beta", "Gamma"]
    # priorities override the single key; ties fall through to the next column
    ordered = sort_metrics([a, b, c], "net_profit", priorities=[("total_trades", "desc"), ("net_profit", "asc")])
    assert [m.filename for m in ordered] == ["NQ_beta", "ES_Alpha", "GC_Gamma"]

    with pytest.raises(ValueError):
        sort_metrics([a], "nope")
