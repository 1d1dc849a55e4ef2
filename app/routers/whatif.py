from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.schemas import ImpactOut, QuarterImpactOut, WhatIfAdjustmentIn, WhatIfOut
from app.modeling.errors import ForecastInputError
from app.modeling.money import bp_to_percent
from app.modeling.whatif import Impact, WhatIfAdjustment
from app.routers.companies import require_company
from app.routers.forecasts import row_out
from app.services import forecasting

router = APIRouter(prefix="/companies/{company_id}/whatif", tags=["whatif"])


def adjustment_from_payload(payload: WhatIfAdjustmentIn) -> WhatIfAdjustment:
    return WhatIfAdjustment(**payload.model_dump())


def impact_out(impact: Impact) -> ImpactOut:
    return ImpactOut(
        total_revenue_change=impact.total_revenue_change,
        total_revenue_change_percent=impact.total_revenue_change_percent,
        total_opportunities_change=impact.total_opportunities_change,
        total_opportunities_change_percent=impact.total_opportunities_change_percent,
        quarterly_impact=[
            QuarterImpactOut(
                quarter=q.label,
                baseline_revenue=q.baseline_revenue,
                adjusted_revenue=q.adjusted_revenue,
                revenue_change=q.revenue_change,
                revenue_change_percent=bp_to_percent(q.revenue_change_pct_bp),
            )
            for q in impact.quarterly
        ],
        distribution_total_bp=impact.distribution_total_bp,
        distribution_normalized=impact.distribution_normalized,
    )


@router.post("", response_model=WhatIfOut)
def evaluate(company_id: int, payload: WhatIfAdjustmentIn, db: Session = Depends(get_db)):
    """Baseline vs adjusted cascade; nothing is persisted."""
    require_company(db, company_id)
    try:
        result = forecasting.evaluate_what_if(db, company_id, adjustment_from_payload(payload))
    except ForecastInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return WhatIfOut(
        baseline=[row_out(r) for r in result.baseline],
        adjusted=[row_out(r) for r in result.adjusted],
        impact=impact_out(result.impact),
    )
