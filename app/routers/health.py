from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.models import Company, Forecast
from app.jobs.scheduler import get_scheduler

router = APIRouter()


@router.get("")
def healthcheck(db: Session = Depends(get_db)):
    """Service, database and scheduler status.

    `companies` / `forecast_rows` are None when the database is unreachable.
    """
    companies = forecast_rows = None
    try:
        companies = db.scalar(select(func.count()).select_from(Company))
        forecast_rows = db.scalar(select(func.count()).select_from(Forecast))
    except SQLAlchemyError:
        db.rollback()
    sched = get_scheduler()
    return {
        "ok": True,
        "service": "cascata",
        "db": companies is not None,
        "companies": companies,
        "forecast_rows": forecast_rows,
        "scheduler": bool(sched and sched.running),
    }
