from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.models import Actual
from app.core.schemas import ActualIn, ActualOut, PerformanceOut, QuarterVarianceOut
from app.modeling.dashboard import ForecastQuery
from app.modeling.money import bp_to_percent
from app.modeling.performance import compare_actuals
from app.routers.companies import require_company
from app.routers.forecasts import forecast_query
from app.routers.inputs import check_dimensions
from app.services import forecasting

router = APIRouter(prefix="/companies/{company_id}", tags=["performance"])


@router.put("/actuals", response_model=ActualOut)
def upsert_actual(company_id: int, payload: ActualIn, db: Session = Depends(get_db)):
    require_company(db, company_id)
    check_dimensions(db, company_id, payload.region_id, payload.sql_type_id)
    existing = db.execute(
        select(Actual).where(
            Actual.company_id == company_id,
            Actual.region_id == payload.region_id,
            Actual.sql_type_id == payload.sql_type_id,
            Actual.year == payload.year,
            Actual.quarter == payload.quarter,
        )
    ).scalar_one_or_none()
    data = payload.model_dump()
    if existing:
        for key, value in data.items():
            setattr(existing, key, value)
        row = existing
    else:
        row = Actual(company_id=company_id, **data)
        db.add(row)
    db.commit()
    db.refresh(row)
    return ActualOut.model_validate(row)


@router.get("/actuals", response_model=List[ActualOut])
def list_actuals(company_id: int, db: Session = Depends(get_db)):
    require_company(db, company_id)
    rows = db.scalars(
        select(Actual)
        .where(Actual.company_id == company_id)
        .order_by(Actual.year, Actual.quarter, Actual.region_id, Actual.sql_type_id)
    ).all()
    return [ActualOut.model_validate(r) for r in rows]


@router.get("/performance", response_model=PerformanceOut)
def performance(
    company_id: int,
    query: ForecastQuery = Depends(forecast_query),
    db: Session = Depends(get_db),
):
    """Actual vs predicted revenue per quarter from the stored forecast."""
    require_company(db, company_id)
    report = compare_actuals(
        forecasting.list_forecasts(db, company_id),
        forecasting.list_actuals(db, company_id),
        query,
    )
    return PerformanceOut(
        quarters=[
            QuarterVarianceOut(
                quarter=q.label,
                predicted_revenue=q.predicted_revenue,
                actual_revenue=q.actual_revenue,
                variance=q.variance,
                variance_percent=bp_to_percent(q.variance_pct_bp),
            )
            for q in report.quarters
        ],
        total_predicted=report.total_predicted,
        total_actual=report.total_actual,
        total_variance=report.total_variance,
        total_variance_percent=bp_to_percent(report.total_variance_pct_bp),
        accuracy_percent=bp_to_percent(report.accuracy_bp),
    )
