"""What-If evaluation: rerun the cascade with adjusted assumptions and diff it
against the unmodified baseline.

Adjustments:

- conversion_rate_multiplier scales the opportunity coverage ratio (win rates
  are not touched)
- ACV adjustments add cents to each region's new/upsell ACV
- time distribution adjustments add basis points to each bucket; weights are
  clamped to 0..10000 but never renormalised, so the adjusted curve may not
  sum to 100%. `Impact.distribution_normalized` reports when that happens.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, List, Tuple

from app.modeling.cascade import (
    ForecastInputs,
    ForecastRow,
    calculate_cascade,
    total_opportunities,
    total_revenue,
)
from app.modeling.errors import ForecastInputError
from app.modeling.history import quarter_label
from app.modeling.money import BP_SCALE, bp_to_percent, div_round_half_up


@dataclass(frozen=True)
class WhatIfAdjustment:
    conversion_rate_multiplier: float = 1.0
    acv_new_adjustment: int = 0
    acv_upsell_adjustment: int = 0
    same_quarter_adjustment: int = 0
    next_quarter_adjustment: int = 0
    two_quarter_adjustment: int = 0

    def validate(self) -> None:
        m = self.conversion_rate_multiplier
        if not isinstance(m, (int, float)) or not math.isfinite(m):
            raise ForecastInputError(f"Conversion rate multiplier must be finite, got {m!r}")
        if m < 0:
            raise ForecastInputError(f"Conversion rate multiplier must not be negative, got {m}")


@dataclass(frozen=True)
class QuarterImpact:
    year: int
    quarter: int
    baseline_revenue: int
    adjusted_revenue: int
    revenue_change: int
    revenue_change_pct_bp: int

    @property
    def label(self) -> str:
        return quarter_label(self.year, self.quarter)


@dataclass(frozen=True)
class Impact:
    """Totals are cents / opportunities x100; *_pct_bp fields hold percent x100."""

    total_revenue_change: int
    total_revenue_change_pct_bp: int
    total_opportunities_change: int
    total_opportunities_change_pct_bp: int
    quarterly: Tuple[QuarterImpact, ...] = ()
    distribution_total_bp: int = BP_SCALE
    distribution_normalized: bool = True

    @property
    def total_revenue_change_percent(self) -> float:
        return bp_to_percent(self.total_revenue_change_pct_bp)

    @property
    def total_opportunities_change_percent(self) -> float:
        return bp_to_percent(self.total_opportunities_change_pct_bp)


@dataclass(frozen=True)
class WhatIfResult:
    baseline: Tuple[ForecastRow, ...]
    adjusted: Tuple[ForecastRow, ...]
    impact: Impact


def change_pct_bp(change: int, base: int) -> int:
    """`change / base * 100` expressed in basis points of percent; 0 when base is 0."""
    if base <= 0:
        return 0
    return div_round_half_up(change * BP_SCALE, base)


def apply_adjustment(inputs: ForecastInputs, adjustment: WhatIfAdjustment) -> ForecastInputs:
    adjustment.validate()
    shift = (
        adjustment.same_quarter_adjustment,
        adjustment.next_quarter_adjustment,
        adjustment.two_quarter_adjustment,
    )
    return replace(
        inputs,
        model=inputs.model.adjusted(
            coverage_multiplier=adjustment.conversion_rate_multiplier,
            acv_new_delta=adjustment.acv_new_adjustment,
            acv_upsell_delta=adjustment.acv_upsell_adjustment,
        ),
        distribution=inputs.distribution.shifted(*shift),
        overrides={k: v.shifted(*shift) for k, v in inputs.overrides.items()},
    )


def _revenue_by_quarter(rows: List[ForecastRow]) -> Dict[Tuple[int, int], int]:
    out: Dict[Tuple[int, int], int] = {}
    for r in rows:
        key = (r.year, r.quarter)
        out[key] = out.get(key, 0) + r.predicted_revenue
    return out


def compute_impact(
    baseline: List[ForecastRow],
    adjusted: List[ForecastRow],
    adjusted_inputs: ForecastInputs | None = None,
) -> Impact:
    base_rev = total_revenue(baseline)
    base_opps = total_opportunities(baseline)
    rev_change = total_revenue(adjusted) - base_rev
    opps_change = total_opportunities(adjusted) - base_opps

    base_q = _revenue_by_quarter(baseline)
    adj_q = _revenue_by_quarter(adjusted)
    quarterly = []
    for year, quarter in sorted(set(base_q) | set(adj_q)):
        b = base_q.get((year, quarter), 0)
        a = adj_q.get((year, quarter), 0)
        quarterly.append(
            QuarterImpact(
                year=year,
                quarter=quarter,
                baseline_revenue=b,
                adjusted_revenue=a,
                revenue_change=a - b,
                revenue_change_pct_bp=change_pct_bp(a - b, b),
            )
        )

    dist_total = BP_SCALE
    normalized = True
    if adjusted_inputs is not None:
        dist_total = adjusted_inputs.distribution.total_bp
        normalized = adjusted_inputs.distribution.is_normalized and all(
            d.is_normalized for d in adjusted_inputs.overrides.values()
        )

    return Impact(
        total_revenue_change=rev_change,
        total_revenue_change_pct_bp=change_pct_bp(rev_change, base_rev),
        total_opportunities_change=opps_change,
        total_opportunities_change_pct_bp=change_pct_bp(opps_change, base_opps),
        quarterly=tuple(quarterly),
        distribution_total_bp=dist_total,
        distribution_normalized=normalized,
    )


def evaluate_what_if(inputs: ForecastInputs, adjustment: WhatIfAdjustment) -> WhatIfResult:
    adjusted_inputs = apply_adjustment(inputs, adjustment)
    baseline = calculate_cascade(inputs)
    adjusted = calculate_cascade(adjusted_inputs)
    return WhatIfResult(
        baseline=tuple(baseline),
        adjusted=tuple(adjusted),
        impact=compute_impact(baseline, adjusted, adjusted_inputs),
    )
