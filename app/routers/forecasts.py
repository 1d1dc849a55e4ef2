from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.schemas import ForecastRowOut, ForecastRunOut, ForecastSummaryOut
from app.modeling.cascade import ForecastRow
from app.modeling.dashboard import (
    ForecastQuery,
    ForecastSummary,
    filter_rows,
    summarize_by_dimension,
    summarize_by_quarter,
)
from app.modeling.errors import ForecastInputError, ForecastPersistenceError
from app.modeling.money import cents_to_dollars, scaled_to_opps
from app.routers.companies import require_company
from app.services import forecasting

router = APIRouter(prefix="/companies/{company_id}/forecasts", tags=["forecasts"])


def row_out(row: ForecastRow) -> ForecastRowOut:
    return ForecastRowOut.model_validate(row)


def _summary_out(s: ForecastSummary) -> ForecastSummaryOut:
    return ForecastSummaryOut(
        key=s.key,
        predicted_sqls=s.predicted_sqls,
        predicted_opps=s.predicted_opps,
        predicted_revenue_new=s.predicted_revenue_new,
        predicted_revenue_upsell=s.predicted_revenue_upsell,
        predicted_revenue_display=cents_to_dollars(s.predicted_revenue),
        predicted_opps_display=scaled_to_opps(s.predicted_opps),
    )


def forecast_query(
    region: Optional[str] = Query(None, description="Region name"),
    sql_type: Optional[str] = Query(None, description="SQL type name"),
    year: Optional[int] = Query(None),
) -> ForecastQuery:
    return ForecastQuery(region=region, sql_type=sql_type, year=year)


@router.get("", response_model=List[ForecastRowOut])
def list_forecasts(
    company_id: int,
    query: ForecastQuery = Depends(forecast_query),
    db: Session = Depends(get_db),
):
    require_company(db, company_id)
    return [row_out(r) for r in filter_rows(forecasting.list_forecasts(db, company_id), query)]


@router.post("/calculate", response_model=ForecastRunOut)
def calculate(company_id: int, db: Session = Depends(get_db)):
    """Recalculate and fully replace the company's stored forecast."""
    require_company(db, company_id)
    try:
        rows = forecasting.calculate_forecast(db, company_id)
    except ForecastInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except ForecastPersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return ForecastRunOut(company_id=company_id, rows_written=len(rows), rows=[row_out(r) for r in rows])


@router.get("/summary", response_model=List[ForecastSummaryOut])
def summary(
    company_id: int,
    group_by: str = Query("quarter", pattern="^(quarter|region|sql_type)$"),
    query: ForecastQuery = Depends(forecast_query),
    db: Session = Depends(get_db),
):
    require_company(db, company_id)
    rows = forecasting.list_forecasts(db, company_id)
    if group_by == "quarter":
        summaries = summarize_by_quarter(rows, query)
    else:
        summaries = summarize_by_dimension(rows, group_by, query)
    return [_summary_out(s) for s in summaries]
