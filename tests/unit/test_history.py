import pytest

from app.modeling.errors import ForecastInputError
from app.modeling.history import (
    HistoricalSqlRecord,
    QuarterVolume,
    group_history,
    quarter_label,
    shift_quarter,
)


def test_shift_quarter_crosses_year_boundary():
    assert shift_quarter(2024, 1, 0) == (2024, 1)
    assert shift_quarter(2024, 4, 1) == (2025, 1)
    assert shift_quarter(2024, 3, 2) == (2025, 1)
    assert shift_quarter(2024, 4, 2) == (2025, 2)
    assert quarter_label(2025, 2) == "2025-Q2"


def test_group_history_sorts_and_keeps_gaps():
    records = [
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 3, 30),
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 10),
        HistoricalSqlRecord("EMESA_NORTH", "EVENT", 2023, 4, 5),
    ]
    grouped = group_history(records)
    assert list(grouped) == [("EMESA_NORTH", "EVENT"), ("NORAM", "INBOUND")]
    assert grouped[("NORAM", "INBOUND")] == [
        QuarterVolume(2024, 1, 10),
        QuarterVolume(2024, 3, 30),
    ]


def test_group_history_rejects_duplicates():
    records = [
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 10),
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 12),
    ]
    with pytest.raises(ForecastInputError):
        group_history(records)


def test_group_history_rejects_bad_quarter_and_negative_volume():
    with pytest.raises(ForecastInputError):
        group_history([HistoricalSqlRecord("NORAM", "INBOUND", 2024, 5, 10)])
    with pytest.raises(ForecastInputError):
        group_history([HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, -1)])
