import pytest

from app.modeling.cascade import ForecastRow
from app.modeling.dashboard import (
    ForecastQuery,
    filter_rows,
    summarize_by_dimension,
    summarize_by_quarter,
)


ROWS = [
    ForecastRow("NORAM", "INBOUND", 2024, 2, 100, 516, 645000, 309600),
    ForecastRow("NORAM", "OUTBOUND", 2024, 2, 40, 200, 100000, 0),
    ForecastRow("EMESA_SOUTH", "INBOUND", 2025, 1, 10, 50, 5000, 1000),
]


def test_summarize_by_quarter():
    out = summarize_by_quarter(ROWS)
    assert [s.key for s in out] == ["2024-Q2", "2025-Q1"]
    assert out[0].predicted_sqls == 140
    assert out[0].predicted_opps == 716
    assert out[0].predicted_revenue == 645000 + 309600 + 100000


def test_summarize_by_dimension_with_filter():
    out = summarize_by_dimension(ROWS, "region", ForecastQuery(sql_type="INBOUND"))
    assert [(s.key, s.predicted_opps) for s in out] == [("EMESA_SOUTH", 50), ("NORAM", 516)]


def test_filter_by_year():
    assert filter_rows(ROWS, ForecastQuery(year=2025)) == [ROWS[2]]


def test_unknown_dimension():
    with pytest.raises(ValueError):
        summarize_by_dimension(ROWS, "quarter")
