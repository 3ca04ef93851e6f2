from __future__ import annotations

from datetime import date

import pytest

from tradelists.corr import (
    build_correlation_matrix,
    calculate_ranks,
    correlation_pairs,
    daily_returns,
    pearson,
    spearman,
)
from tradelists.exports import cleaned_table_csv, correlation_csv
from tradelists.helpers import date_range_from

from conftest import STRATEGY_A, STRATEGY_B, spaced


def test_ranks_average_ties() -> None:
    assert calculate_ranks([10, 20, 20, 30]) == [1.0, 2.5, 2.5, 4.0]
    assert calculate_ranks([3, 1, 2]) == [3.0, 1.0, 2.0]
    assert calculate_ranks([]) == []


def test_spearman_known_cases() -> None:
    x = [0.5, -1.2, 3.3, 0.1, 2.0]
    assert spearman(x, x) == pytest.approx(1.0)
    assert spearman(x, [-v for v in x]) == pytest.approx(-1.0)
    # monotonic but non-linear still ranks perfectly
    assert spearman(x, [v ** 3 for v in x]) == pytest.approx(1.0)


def test_short_or_mismatched_series_score_zero() -> None:
    assert spearman([1.0, 2.0], [1.0, 2.0]) == 0.0
    assert spearman([1.0, 2.0, 3.0], [1.0, 2.0]) == 0.0
    assert pearson([], []) == 0.0
    assert pearson([1.0, 1.0, 1.0], [1.0, 2.0, 3.0]) == 0.0


def test_daily_returns_share_one_date_axis(make_metrics) -> None:
    metrics = {
        "a": make_metrics("ES_a.csv", [(date(2024, 1, 1), 100.0), (date(2024, 1, 2), 50.0)]),
        "b": make_metrics("ES_b.csv", [(date(2024, 1, 2), 10.0), (date(2024, 1, 3), 10.0)]),
    }
    returns = daily_returns(metrics, ["a", "b"])
    assert returns["a"] == pytest.approx([0.0, 50.0, 0.0])
    assert returns["b"] == pytest.approx([0.0, 0.0, 100.0])

    window = daily_returns(metrics, ["a", "b"], date_range_from("2024-01-02", "2024-01-02"))
    assert window == {"a": [0.0], "b": [0.0]}
    assert daily_returns(metrics, []) == {}


def test_matrix_properties(make_metrics) -> None:
    metrics = {
        "a": make_metrics("ES_a.csv", spaced(STRATEGY_A, every=1)),
        "b": make_metrics("NQ_b.csv", spaced(STRATEGY_B, every=1)),
        "c": make_metrics("GC_c.csv", spaced([5.0, 7.0, -3.0, 8.0, 1.0, 2.0], every=2)),
    }
    names = ["a", "b", "c"]
    result = build_correlation_matrix(daily_returns(metrics, names), names)

    assert result.size == 3
    assert result.strategies == ("a", "b", "c")
    for i in range(3):
        assert result.matrix[i][i] == 1.0
        assert len(result.matrix[i]) == 3
        for j in range(3):
            assert result.matrix[i][j] == pytest.approx(result.matrix[j][i])
            assert abs(result.matrix[i][j]) <= 1.0 + 1e-9

    assert build_correlation_matrix({}, ["a"]) is None


def test_missing_return_series_scores_zero() -> None:
    result = build_correlation_matrix({"a": [1.0, 2.0, 3.0]}, ["a", "b"])
    assert result.matrix == ((1.0, 0.0), (0.0, 1.0))


def test_correlation_pairs_and_csv() -> None:
    returns = {"A.csv": [1.0, 2.0, 3.0, 4.0], "B.csv": [4.0, 3.0, 2.0, 1.0], "C": [1.0, 3.0, 2.0, 4.0]}
    result = build_correlation_matrix(returns, ["A.csv", "B.csv", "C"])

    pairs = correlation_pairs(result, returns)
    assert [(p["Strategy 1"], p["Strategy 2"]) for p in pairs] == [("A", "B"), ("A", "C"), ("B", "C")]
    assert pairs[0]["Correlation"] == "-1.0000"
    assert pairs[0]["Sample Size"] == 4
    assert pairs[0]["Period"] == "All to All"

    windowed = correlation_pairs(result, returns, date_range_from("2024-01-01", None))
    assert windowed[0]["Period"] == "2024-01-01 to All"

    lines = correlation_csv(pairs).split("\n")
    assert lines[0] == "Strategy 1,Strategy 2,Correlation,Sample Size,Period"
    assert lines[1] == "A,B,-1.0000,4,All to All"
    assert len(lines) == 4


def test_cleaned_table_csv_quotes_fields() -> None:
    body = cleaned_table_csv(["a", "b"], [["x,y", "plain"], ['q"t', None], ["only"]])
    assert body.split("\n") == ["a,b", '"x,y",plain', '"q""t",', "only,"]


def test_tied_and_flat_series() -> None:
    # ties on both sides still rank consistently
    assert spearman([1.0, 1.0, 2.0, 3.0], [5.0, 5.0, 6.0, 9.0]) == pytest.approx(1.0)
    # a flat series has no rank variance
    assert spearman([0.0, 0.0, 0.0, 0.0], [1.0, 2.0, 3.0, 4.0]) == 0.0
    assert pearson([1.0, 2.0, 3.0], [2.0, 4.0, 6.0]) == pytest.approx(1.0)


def test_daily_returns_sum_same_day_trades(make_metrics) -> None:
    metrics = {
        "a": make_metrics(
            "ES_a.csv",
            [(date(2024, 1, 1), 100.0), (date(2024, 1, 2), 30.0), (date(2024, 1, 2), 20.0), (date(2024, 1, 3), -75.0)],
        ),
    }
    returns = daily_returns(metrics, ["a"])
    assert returns["a"] == pytest.approx([0.0, 50.0, -50.0])
    assert all(isinstance(v, float) for v in returns["a"])


def test_cleaned_table_csv_drops_trailing_zero_on_whole_numbers() -> None:
    body = cleaned_table_csv(["pnl", "cum"], [[-500.0, 12.5], [250.0, "n/a"]])
    assert body.split("\n") == ["pnl,cum", "-500,12.5", "250,n/a"]
