"""SQL -> Opportunity -> Revenue cascade.

For every (region, sql_type) series:

1. opportunities created by a quarter's SQL intake = volume * coverage / 10000,
   kept as integers scaled by 100 (one-hundredth of an opportunity)
2. each cohort is split over the quarter it arrives in and the two after it
3. destination quarters accumulate contributions from all source cohorts
4. new and upsell revenue are both derived from the same opportunity pool,
   each with its own win rate and ACV

The engine is pure: it reads frozen snapshots and returns new rows.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from app.modeling.conversion import ConversionModel, DealEconomics
from app.modeling.distribution import DEFAULT_DISTRIBUTION, TimeDistribution, split_cohort
from app.modeling.history import HistoricalSqlRecord, group_history, shift_quarter
from app.modeling.money import BP_SCALE, OPP_SCALE, div_round_half_up

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastRow:
    region: str
    sql_type: str
    year: int
    quarter: int
    predicted_sqls: int
    predicted_opps: int
    predicted_revenue_new: int
    predicted_revenue_upsell: int

    @property
    def predicted_revenue(self) -> int:
        return self.predicted_revenue_new + self.predicted_revenue_upsell


@dataclass(frozen=True)
class ForecastInputs:
    records: Tuple[HistoricalSqlRecord, ...]
    model: ConversionModel
    distribution: TimeDistribution = DEFAULT_DISTRIBUTION
    # per sql_type overrides of the company distribution
    overrides: Mapping[str, TimeDistribution] = field(default_factory=dict)
    split_method: str = "independent"

    def distribution_for(self, sql_type: str) -> TimeDistribution:
        return self.overrides.get(sql_type, self.distribution)


def _revenue(opps_scaled: int, win_rate_bp: int, acv_cents: int) -> int:
    return div_round_half_up(opps_scaled * win_rate_bp * acv_cents, BP_SCALE * OPP_SCALE)


def cohort_opportunities(volume: int, coverage_bp: int) -> int:
    """Opportunities (x100) created by `volume` SQLs at `coverage_bp`."""
    return div_round_half_up(volume * coverage_bp * OPP_SCALE, BP_SCALE)


def calculate_cascade(inputs: ForecastInputs) -> List[ForecastRow]:
    rows: List[ForecastRow] = []
    for (region, sql_type), series in group_history(inputs.records).items():
        sqls: Dict[Tuple[int, int], int] = {(p.year, p.quarter): p.volume for p in series}
        rate = inputs.model.rate_for(region, sql_type)
        if rate is None:
            log.warning("No conversion rate for %s/%s; skipping its opportunities", region, sql_type)
            rows.extend(
                ForecastRow(region, sql_type, y, q, volume, 0, 0, 0)
                for (y, q), volume in sorted(sqls.items())
            )
            continue

        distribution = inputs.distribution_for(sql_type)
        opps: Dict[Tuple[int, int], int] = {}
        for point in series:
            cohort = cohort_opportunities(point.volume, rate.opp_coverage_ratio)
            parts = split_cohort(cohort, distribution, inputs.split_method)
            for offset, part in enumerate(parts):
                key = shift_quarter(point.year, point.quarter, offset)
                opps[key] = opps.get(key, 0) + part

        economics: Optional[DealEconomics] = inputs.model.economics_for(region)
        if economics is None:
            log.warning("No deal economics for region %s; revenue set to zero", region)

        for key in sorted(set(opps) | set(sqls)):
            year, quarter = key
            pool = opps.get(key, 0)
            revenue_new = revenue_upsell = 0
            if economics is not None:
                revenue_new = _revenue(pool, rate.win_rate_new, economics.acv_new)
                revenue_upsell = _revenue(pool, rate.win_rate_upsell, economics.acv_upsell)
            rows.append(
                ForecastRow(
                    region=region,
                    sql_type=sql_type,
                    year=year,
                    quarter=quarter,
                    predicted_sqls=sqls.get(key, 0),
                    predicted_opps=pool,
                    predicted_revenue_new=revenue_new,
                    predicted_revenue_upsell=revenue_upsell,
                )
            )
    return rows


def total_revenue(rows: Iterable[ForecastRow]) -> int:
    return sum(r.predicted_revenue for r in rows)


def total_opportunities(rows: Iterable[ForecastRow]) -> int:
    return sum(r.predicted_opps for r in rows)
