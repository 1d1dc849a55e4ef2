"""Actual vs predicted revenue per quarter."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from app.modeling.cascade import ForecastRow
from app.modeling.dashboard import ALL, ForecastQuery
from app.modeling.history import quarter_label
from app.modeling.money import BP_SCALE
from app.modeling.whatif import change_pct_bp


@dataclass(frozen=True)
class ActualRecord:
    region: str
    sql_type: str
    year: int
    quarter: int
    actual_sqls: int
    actual_opps: int
    actual_revenue: int


@dataclass(frozen=True)
class QuarterVariance:
    year: int
    quarter: int
    predicted_revenue: int
    actual_revenue: int
    variance: int
    variance_pct_bp: int

    @property
    def label(self) -> str:
        return quarter_label(self.year, self.quarter)


@dataclass(frozen=True)
class PerformanceReport:
    quarters: Tuple[QuarterVariance, ...]
    total_predicted: int
    total_actual: int
    total_variance: int
    total_variance_pct_bp: int
    accuracy_bp: int


def compare_actuals(
    forecasts: Iterable[ForecastRow],
    actuals: Iterable[ActualRecord],
    query: ForecastQuery = ALL,
) -> PerformanceReport:
    grouped: Dict[Tuple[int, int], List[int]] = {}
    for f in forecasts:
        if query.matches(f.region, f.sql_type, f.year):
            grouped.setdefault((f.year, f.quarter), [0, 0])[0] += f.predicted_revenue
    for a in actuals:
        if query.matches(a.region, a.sql_type, a.year):
            grouped.setdefault((a.year, a.quarter), [0, 0])[1] += a.actual_revenue

    quarters = []
    for (year, quarter), (predicted, actual) in sorted(grouped.items()):
        quarters.append(
            QuarterVariance(
                year=year,
                quarter=quarter,
                predicted_revenue=predicted,
                actual_revenue=actual,
                variance=actual - predicted,
                variance_pct_bp=change_pct_bp(actual - predicted, predicted),
            )
        )

    total_predicted = sum(q.predicted_revenue for q in quarters)
    total_actual = sum(q.actual_revenue for q in quarters)
    total_variance_pct_bp = change_pct_bp(total_actual - total_predicted, total_predicted)
    # accuracy = 100% - |variance %|, nothing predicted means no accuracy
    accuracy_bp = max(0, BP_SCALE - abs(total_variance_pct_bp)) if total_predicted > 0 else 0

    return PerformanceReport(
        quarters=tuple(quarters),
        total_predicted=total_predicted,
        total_actual=total_actual,
        total_variance=total_actual - total_predicted,
        total_variance_pct_bp=total_variance_pct_bp,
        accuracy_bp=accuracy_bp,
    )
