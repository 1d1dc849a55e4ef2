from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from app.modeling.errors import ForecastInputError


QUARTERS = (1, 2, 3, 4)


@dataclass(frozen=True)
class HistoricalSqlRecord:
    region: str
    sql_type: str
    year: int
    quarter: int
    volume: int


@dataclass(frozen=True)
class QuarterVolume:
    year: int
    quarter: int
    volume: int


DimensionKey = Tuple[str, str]


def quarter_key(year: int, quarter: int) -> Tuple[int, int]:
    return (year, quarter)


def quarter_index(year: int, quarter: int) -> int:
    return year * 4 + (quarter - 1)


def shift_quarter(year: int, quarter: int, periods: int) -> Tuple[int, int]:
    """Return the (year, quarter) `periods` quarters after the given one."""
    idx = quarter_index(year, quarter) + periods
    return (idx // 4, idx % 4 + 1)


def quarter_label(year: int, quarter: int) -> str:
    return f"{year}-Q{quarter}"


def validate_record(record: HistoricalSqlRecord) -> None:
    if record.quarter not in QUARTERS:
        raise ForecastInputError(
            f"Quarter {record.quarter} for {record.region}/{record.sql_type} {record.year} "
            "is outside 1-4"
        )
    if record.volume < 0:
        raise ForecastInputError(
            f"Negative SQL volume {record.volume} for {record.region}/{record.sql_type} "
            f"{quarter_label(record.year, record.quarter)}"
        )


def group_history(records: Iterable[HistoricalSqlRecord]) -> Dict[DimensionKey, List[QuarterVolume]]:
    """Group SQL volumes by (region, sql_type), each series sorted chronologically.

    Missing quarters are not zero-filled.
    """
    grouped: Dict[DimensionKey, Dict[Tuple[int, int], int]] = {}
    for record in records:
        validate_record(record)
        series = grouped.setdefault((record.region, record.sql_type), {})
        key = quarter_key(record.year, record.quarter)
        if key in series:
            raise ForecastInputError(
                f"Duplicate SQL history for {record.region}/{record.sql_type} "
                f"{quarter_label(record.year, record.quarter)}"
            )
        series[key] = record.volume

    return {
        dim: [QuarterVolume(year=y, quarter=q, volume=v) for (y, q), v in sorted(series.items())]
        for dim, series in sorted(grouped.items())
    }
