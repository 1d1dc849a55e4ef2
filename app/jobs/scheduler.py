"""Background scheduler for recurring jobs (APScheduler)

Purpose
-------
Keep stored forecasts in step with their inputs without a separate worker
stack. Inputs edited during the day (SQL history imports, rate changes) are
folded into a full recalculation every night.

How it works
------------
- `start_scheduler(tz)` creates a BackgroundScheduler in the provided timezone.
- One cron job, `nightly_recalculation_job`, runs at RECALC_HOUR:RECALC_MINUTE
  and recalculates every company's forecast.
- The FastAPI app calls `start_scheduler()` on startup (see `app/api/main.py`).
- On shutdown we stop the scheduler to avoid orphaned threads.

Notes
-----
- A recalculation replaces the company's forecast rows in one transaction,
  so the job is idempotent.
- `cancel_jobs()` sets a stop event that the job checks between companies.
"""
from __future__ import annotations
from typing import Optional
import threading
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from fastapi import APIRouter, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.db import SessionLocal
from app.core.models import Company
from app.modeling.errors import CascadeError
from app.services.forecasting import calculate_forecast

log = logging.getLogger(__name__)

SCHED: Optional[BackgroundScheduler] = None
STOP_EVENT = threading.Event()


def cancel_jobs():
    """Set a kill switch that the recalculation loop checks."""
    STOP_EVENT.set()


def get_scheduler() -> Optional[BackgroundScheduler]:
    return SCHED


def recalculate_all(session_factory=SessionLocal) -> dict:
    """Recalculate every company; one failing company does not stop the rest."""
    STOP_EVENT.clear()
    done, failed = 0, 0
    db = session_factory()
    try:
        company_ids = list(db.scalars(select(Company.id).order_by(Company.id)))
        for company_id in company_ids:
            if STOP_EVENT.is_set():
                log.info("[jobs] recalculation cancelled after %d companies", done)
                break
            try:
                calculate_forecast(db, company_id)
                done += 1
            except CascadeError as exc:
                failed += 1
                log.error("[jobs] company %s recalculation failed: %s", company_id, exc)
            except SQLAlchemyError as exc:
                db.rollback()
                failed += 1
                log.error("[jobs] company %s database error: %s", company_id, exc)
    finally:
        db.close()
    return {"recalculated": done, "failed": failed}


def nightly_recalculation_job() -> None:
    log.info("[jobs] nightly_recalculation_job start")
    summary = recalculate_all()
    log.info("[jobs] nightly_recalculation_job done: %s", summary)


# -----------------------------
# Scheduler lifecycle
# -----------------------------

def start_scheduler(tz: str = "America/New_York") -> BackgroundScheduler:
    """Create and start a background scheduler with the nightly recalculation job.

    Args:
        tz: IANA timezone string (e.g., 'America/New_York').

    Returns:
        Running `BackgroundScheduler` instance (so the caller can shut it down).
    """
    global SCHED
    sched = BackgroundScheduler(timezone=tz)
    sched.add_job(
        nightly_recalculation_job,
        CronTrigger(hour=settings.recalc_hour, minute=settings.recalc_minute),
        id="nightly_recalculation",
        replace_existing=True,
    )
    sched.start()
    SCHED = sched
    log.info("[jobs] scheduler started with timezone=%s", tz)
    return sched


# ------------- DEV ROUTER (lives in this file) -------------
dev_router = APIRouter(prefix="/_jobs", tags=["_dev"])

@dev_router.get("")
def list_jobs():
    sched = get_scheduler()
    if not sched:
        raise HTTPException(status_code=503, detail="scheduler not running")
    out = []
    for j in sched.get_jobs():
        out.append({
            "id": j.id,
            "next_run": j.next_run_time.isoformat() if j.next_run_time else None,
            "trigger": str(j.trigger),
        })
    return out

@dev_router.post("/cancel")
def cancel_inflight():
    cancel_jobs()
    return {"ok": True}

@dev_router.post("/run/recalculate")
def run_recalculate_now():
    return recalculate_all()
