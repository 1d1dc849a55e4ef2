import logging

import pytest

from app.modeling.cascade import (
    ForecastInputs,
    ForecastRow,
    calculate_cascade,
    cohort_opportunities,
    total_opportunities,
    total_revenue,
)
from app.modeling.conversion import ConversionModel, ConversionRate, DealEconomics
from app.modeling.distribution import TimeDistribution
from app.modeling.errors import ForecastInputError
from app.modeling.history import HistoricalSqlRecord


def _model(with_economics=True):
    rates = [ConversionRate("NORAM", "INBOUND", 580, 2500, 3000)]
    economics = [DealEconomics("NORAM", 500000, 200000)] if with_economics else []
    return ConversionModel(rates, economics)


def _inputs(*records, **kwargs):
    return ForecastInputs(records=tuple(records), model=kwargs.pop("model", _model()), **kwargs)


def test_cohort_opportunities():
    assert cohort_opportunities(100, 580) == 580
    assert cohort_opportunities(0, 580) == 0
    assert cohort_opportunities(1, 50) == 1  # 0.5 rounds up


def test_single_cohort_spreads_over_three_quarters():
    rows = calculate_cascade(_inputs(HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 100)))
    assert rows == [
        ForecastRow("NORAM", "INBOUND", 2024, 1, 100, 516, 645000, 309600),
        ForecastRow("NORAM", "INBOUND", 2024, 2, 0, 58, 72500, 34800),
        ForecastRow("NORAM", "INBOUND", 2024, 3, 0, 6, 7500, 3600),
    ]
    assert sum(r.predicted_revenue_new for r in rows) == 725000
    assert total_opportunities(rows) == 580
    assert total_revenue(rows) == 725000 + 348000


def test_cohorts_accumulate_into_destination_quarters():
    rows = calculate_cascade(_inputs(
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 100),
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 2, 100),
    ))
    assert [(r.quarter, r.predicted_sqls, r.predicted_opps) for r in rows] == [
        (1, 100, 516),
        (2, 100, 574),
        (3, 0, 64),
        (4, 0, 6),
    ]


def test_cascade_rolls_into_next_year():
    rows = calculate_cascade(_inputs(HistoricalSqlRecord("NORAM", "INBOUND", 2024, 4, 100)))
    assert [(r.year, r.quarter) for r in rows] == [(2024, 4), (2025, 1), (2025, 2)]


def test_sql_type_override_distribution():
    rows = calculate_cascade(_inputs(
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 100),
        overrides={"INBOUND": TimeDistribution(10000, 0, 0)},
    ))
    assert [r.predicted_opps for r in rows] == [580, 0, 0]


def test_missing_conversion_rate_yields_zero_rows(caplog):
    with caplog.at_level(logging.WARNING):
        rows = calculate_cascade(_inputs(
            HistoricalSqlRecord("NORAM", "OUTBOUND", 2024, 1, 40),
        ))
    assert rows == [ForecastRow("NORAM", "OUTBOUND", 2024, 1, 40, 0, 0, 0)]
    assert "No conversion rate" in caplog.text


def test_missing_deal_economics_zeroes_revenue_only():
    rows = calculate_cascade(_inputs(
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 100),
        model=_model(with_economics=False),
    ))
    assert total_opportunities(rows) == 580
    assert total_revenue(rows) == 0


def test_empty_history():
    assert calculate_cascade(_inputs()) == []


def test_negative_volume_is_rejected():
    with pytest.raises(ForecastInputError):
        calculate_cascade(_inputs(HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, -5)))


def test_calculation_is_repeatable():
    inputs = _inputs(
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 100),
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 3, 37),
    )
    assert calculate_cascade(inputs) == calculate_cascade(inputs)


def test_rows_are_sorted_by_dimension_then_quarter():
    model = ConversionModel(
        [
            ConversionRate("NORAM", "INBOUND", 580, 2500, 3000),
            ConversionRate("EMESA_NORTH", "EVENT", 300, 2800, 3200),
        ],
        [DealEconomics("NORAM", 500000, 200000), DealEconomics("EMESA_NORTH", 400000, 100000)],
    )
    rows = calculate_cascade(_inputs(
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 100),
        HistoricalSqlRecord("EMESA_NORTH", "EVENT", 2024, 2, 50),
        model=model,
    ))
    keys = [(r.region, r.sql_type, r.year, r.quarter) for r in rows]
    assert keys == sorted(keys)
