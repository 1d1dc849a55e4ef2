from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.models import Scenario
from app.core.schemas import ScenarioIn, ScenarioOut, WhatIfAdjustmentIn
from app.modeling.errors import ForecastInputError
from app.modeling.money import bp_to_multiplier, bp_to_percent, percent_to_bp
from app.modeling.whatif import Impact
from app.routers.companies import require_company
from app.routers.whatif import adjustment_from_payload
from app.services import forecasting

router = APIRouter(tags=["scenarios"])


def _scenario_out(row: Scenario) -> ScenarioOut:
    return ScenarioOut(
        id=row.id,
        company_id=row.company_id,
        name=row.name,
        description=row.description,
        adjustment=WhatIfAdjustmentIn(
            conversion_rate_multiplier=bp_to_multiplier(row.conversion_rate_multiplier_bp),
            acv_new_adjustment=row.acv_new_adjustment,
            acv_upsell_adjustment=row.acv_upsell_adjustment,
            same_quarter_adjustment=row.same_quarter_adjustment,
            next_quarter_adjustment=row.next_quarter_adjustment,
            two_quarter_adjustment=row.two_quarter_adjustment,
        ),
        total_revenue_change=row.total_revenue_change,
        total_revenue_change_percent=bp_to_percent(row.total_revenue_change_pct_bp),
        total_opportunities_change=row.total_opportunities_change,
        total_opportunities_change_percent=bp_to_percent(row.total_opportunities_change_pct_bp),
    )


@router.post("/companies/{company_id}/scenarios", response_model=ScenarioOut, status_code=201)
def create_scenario(company_id: int, payload: ScenarioIn, db: Session = Depends(get_db)):
    require_company(db, company_id)
    try:
        impact = Impact(
            total_revenue_change=payload.impact.total_revenue_change,
            total_revenue_change_pct_bp=percent_to_bp(payload.impact.total_revenue_change_percent),
            total_opportunities_change=payload.impact.total_opportunities_change,
            total_opportunities_change_pct_bp=percent_to_bp(payload.impact.total_opportunities_change_percent),
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=f"Impact percentages must be finite: {exc}")
    try:
        scenario_id = forecasting.save_scenario(
            db,
            company_id,
            payload.name.strip(),
            payload.description,
            adjustment_from_payload(payload.adjustment),
            impact,
        )
    except ForecastInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _scenario_out(db.get(Scenario, scenario_id))


@router.get("/companies/{company_id}/scenarios", response_model=List[ScenarioOut])
def list_scenarios(company_id: int, db: Session = Depends(get_db)):
    require_company(db, company_id)
    rows = db.scalars(
        select(Scenario).where(Scenario.company_id == company_id).order_by(Scenario.id.desc())
    ).all()
    return [_scenario_out(r) for r in rows]


@router.get("/scenarios/{scenario_id}", response_model=ScenarioOut)
def get_scenario(scenario_id: int, db: Session = Depends(get_db)):
    row = db.get(Scenario, scenario_id)
    if not row:
        raise HTTPException(status_code=404, detail="Scenario not found")
    return _scenario_out(row)


@router.delete("/scenarios/{scenario_id}")
def delete_scenario(scenario_id: int, db: Session = Depends(get_db)):
    row = db.get(Scenario, scenario_id)
    if not row:
        raise HTTPException(status_code=404, detail="Scenario not found")
    db.delete(row)
    db.commit()
    return {"status": "deleted"}
