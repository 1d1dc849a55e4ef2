"""Filtering and rollups of forecast rows for dashboards.

Filters travel as an immutable `ForecastQuery`; every function here is pure.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from app.modeling.cascade import ForecastRow
from app.modeling.history import quarter_label


@dataclass(frozen=True)
class ForecastQuery:
    region: Optional[str] = None
    sql_type: Optional[str] = None
    year: Optional[int] = None

    def matches(self, region: str, sql_type: str, year: int) -> bool:
        if self.region is not None and region != self.region:
            return False
        if self.sql_type is not None and sql_type != self.sql_type:
            return False
        if self.year is not None and year != self.year:
            return False
        return True


ALL = ForecastQuery()


@dataclass(frozen=True)
class ForecastSummary:
    key: str
    predicted_sqls: int
    predicted_opps: int
    predicted_revenue_new: int
    predicted_revenue_upsell: int

    @property
    def predicted_revenue(self) -> int:
        return self.predicted_revenue_new + self.predicted_revenue_upsell


def filter_rows(rows: Iterable[ForecastRow], query: ForecastQuery = ALL) -> List[ForecastRow]:
    return [r for r in rows if query.matches(r.region, r.sql_type, r.year)]


def _rollup(buckets: Dict[str, List[ForecastRow]]) -> List[ForecastSummary]:
    return [
        ForecastSummary(
            key=key,
            predicted_sqls=sum(r.predicted_sqls for r in group),
            predicted_opps=sum(r.predicted_opps for r in group),
            predicted_revenue_new=sum(r.predicted_revenue_new for r in group),
            predicted_revenue_upsell=sum(r.predicted_revenue_upsell for r in group),
        )
        for key, group in buckets.items()
    ]


def summarize_by_quarter(rows: Iterable[ForecastRow], query: ForecastQuery = ALL) -> List[ForecastSummary]:
    buckets: Dict[Tuple[int, int], List[ForecastRow]] = {}
    for r in filter_rows(rows, query):
        buckets.setdefault((r.year, r.quarter), []).append(r)
    return _rollup({quarter_label(y, q): buckets[(y, q)] for y, q in sorted(buckets)})


def summarize_by_dimension(
    rows: Iterable[ForecastRow], dimension: str, query: ForecastQuery = ALL
) -> List[ForecastSummary]:
    if dimension not in ("region", "sql_type"):
        raise ValueError(f"cannot summarize by {dimension!r}")
    buckets: Dict[str, List[ForecastRow]] = {}
    for r in filter_rows(rows, query):
        buckets.setdefault(getattr(r, dimension), []).append(r)
    return _rollup({k: buckets[k] for k in sorted(buckets)})
