"""Forecast inputs: SQL history, conversion rates, deal economics, time distribution."""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Set

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.models import ConversionRate, DealEconomics, Region, SqlHistory, SqlType, TimeDistribution
from app.core.schemas import (
    ConversionRateIn,
    ConversionRateOut,
    DealEconomicsIn,
    DealEconomicsOut,
    SkippedRecord,
    SqlHistoryImportIn,
    SqlHistoryImportOut,
    SqlHistoryIn,
    SqlHistoryOut,
    TimeDistributionIn,
    TimeDistributionOut,
)
from app.modeling.distribution import DEFAULT_DISTRIBUTION
from app.routers.companies import require_company

router = APIRouter(prefix="/companies/{company_id}", tags=["inputs"])

MAX_IMPORT_VOLUME = 1_000_000
IMPORT_YEAR_WINDOW = 10
MAX_SKIPPED_REPORTED = 50


def check_dimensions(
    db: Session, company_id: int, region_id: Optional[int] = None, sql_type_id: Optional[int] = None
) -> None:
    if region_id is not None:
        region = db.get(Region, region_id)
        if not region or region.company_id != company_id:
            raise HTTPException(status_code=400, detail=f"Unknown region id {region_id}")
    if sql_type_id is not None:
        sql_type = db.get(SqlType, sql_type_id)
        if not sql_type or sql_type.company_id != company_id:
            raise HTTPException(status_code=400, detail=f"Unknown SQL type id {sql_type_id}")


def _upsert_sql_history(db: Session, company_id: int, data: Dict) -> SqlHistory:
    existing = db.execute(
        select(SqlHistory).where(
            SqlHistory.company_id == company_id,
            SqlHistory.region_id == data["region_id"],
            SqlHistory.sql_type_id == data["sql_type_id"],
            SqlHistory.year == data["year"],
            SqlHistory.quarter == data["quarter"],
        )
    ).scalar_one_or_none()
    if existing:
        existing.volume = data["volume"]
        return existing
    row = SqlHistory(company_id=company_id, **data)
    db.add(row)
    return row


# ---------- SQL history ----------

@router.put("/sql-history", response_model=SqlHistoryOut)
def upsert_sql_history(company_id: int, payload: SqlHistoryIn, db: Session = Depends(get_db)):
    require_company(db, company_id)
    check_dimensions(db, company_id, payload.region_id, payload.sql_type_id)
    row = _upsert_sql_history(db, company_id, payload.model_dump())
    db.commit()
    db.refresh(row)
    return SqlHistoryOut.model_validate(row)


@router.get("/sql-history", response_model=List[SqlHistoryOut])
def list_sql_history(company_id: int, db: Session = Depends(get_db)):
    require_company(db, company_id)
    rows = db.scalars(
        select(SqlHistory)
        .where(SqlHistory.company_id == company_id)
        .order_by(SqlHistory.year, SqlHistory.quarter, SqlHistory.region_id, SqlHistory.sql_type_id)
    ).all()
    return [SqlHistoryOut.model_validate(r) for r in rows]


@router.post("/sql-history/import", response_model=SqlHistoryImportOut)
def import_sql_history(company_id: int, payload: SqlHistoryImportIn, db: Session = Depends(get_db)):
    """Bulk upsert by region/SQL type *name*. Bad records are skipped with a reason."""
    require_company(db, company_id)
    regions = {
        r.name.lower(): r.id
        for r in db.scalars(select(Region).where(Region.company_id == company_id))
    }
    sql_types = {
        t.name.lower(): t.id
        for t in db.scalars(select(SqlType).where(SqlType.company_id == company_id))
    }
    this_year = date.today().year
    min_year, max_year = this_year - IMPORT_YEAR_WINDOW, this_year + IMPORT_YEAR_WINDOW

    seen: Set[str] = set()
    duplicates = 0
    skipped: List[SkippedRecord] = []
    imported = 0
    for record in payload.records:
        key = f"{record.region.lower()}-{record.sql_type.lower()}-{record.year}-{record.quarter}"
        if key in seen:
            duplicates += 1
            skipped.append(SkippedRecord(record=record, reason="Duplicate record"))
            continue
        seen.add(key)

        if record.year < min_year or record.year > max_year:
            reason = f"Year {record.year} is outside valid range ({min_year}-{max_year})"
        elif record.region.lower() not in regions:
            reason = f'Region "{record.region}" not found'
        elif record.sql_type.lower() not in sql_types:
            reason = f'SQL Type "{record.sql_type}" not found'
        elif record.volume < 0 or record.volume > MAX_IMPORT_VOLUME:
            reason = f"Volume {record.volume} is outside valid range (0-{MAX_IMPORT_VOLUME:,})"
        else:
            reason = None
        if reason:
            skipped.append(SkippedRecord(record=record, reason=reason))
            continue

        _upsert_sql_history(
            db,
            company_id,
            {
                "region_id": regions[record.region.lower()],
                "sql_type_id": sql_types[record.sql_type.lower()],
                "year": record.year,
                "quarter": record.quarter,
                "volume": record.volume,
            },
        )
        db.flush()
        imported += 1
    db.commit()

    return SqlHistoryImportOut(
        imported=imported,
        skipped=len(skipped),
        skipped_records=skipped[:MAX_SKIPPED_REPORTED],
        duplicates=duplicates,
        warnings=[f"{duplicates} duplicate records found"] if duplicates else [],
    )


# ---------- Conversion rates ----------

@router.put("/conversion-rates", response_model=ConversionRateOut)
def upsert_conversion_rate(company_id: int, payload: ConversionRateIn, db: Session = Depends(get_db)):
    require_company(db, company_id)
    check_dimensions(db, company_id, payload.region_id, payload.sql_type_id)
    existing = db.execute(
        select(ConversionRate).where(
            ConversionRate.company_id == company_id,
            ConversionRate.region_id == payload.region_id,
            ConversionRate.sql_type_id == payload.sql_type_id,
        )
    ).scalar_one_or_none()
    data = payload.model_dump()
    if existing:
        for key, value in data.items():
            setattr(existing, key, value)
        row = existing
    else:
        row = ConversionRate(company_id=company_id, **data)
        db.add(row)
    db.commit()
    db.refresh(row)
    return ConversionRateOut.model_validate(row)


@router.get("/conversion-rates", response_model=List[ConversionRateOut])
def list_conversion_rates(company_id: int, db: Session = Depends(get_db)):
    require_company(db, company_id)
    rows = db.scalars(
        select(ConversionRate).where(ConversionRate.company_id == company_id)
    ).all()
    return [ConversionRateOut.model_validate(r) for r in rows]


# ---------- Deal economics ----------

@router.put("/deal-economics", response_model=DealEconomicsOut)
def upsert_deal_economics(company_id: int, payload: DealEconomicsIn, db: Session = Depends(get_db)):
    require_company(db, company_id)
    check_dimensions(db, company_id, region_id=payload.region_id)
    existing = db.execute(
        select(DealEconomics).where(
            DealEconomics.company_id == company_id,
            DealEconomics.region_id == payload.region_id,
        )
    ).scalar_one_or_none()
    if existing:
        existing.acv_new = payload.acv_new
        existing.acv_upsell = payload.acv_upsell
        row = existing
    else:
        row = DealEconomics(company_id=company_id, **payload.model_dump())
        db.add(row)
    db.commit()
    db.refresh(row)
    return DealEconomicsOut.model_validate(row)


@router.get("/deal-economics", response_model=List[DealEconomicsOut])
def list_deal_economics(company_id: int, db: Session = Depends(get_db)):
    require_company(db, company_id)
    rows = db.scalars(select(DealEconomics).where(DealEconomics.company_id == company_id)).all()
    return [DealEconomicsOut.model_validate(r) for r in rows]


# ---------- Time distribution ----------

def _distribution_out(row: TimeDistribution) -> TimeDistributionOut:
    return TimeDistributionOut(
        sql_type_id=row.sql_type_id,
        same_quarter_bp=row.same_quarter_bp,
        next_quarter_bp=row.next_quarter_bp,
        two_quarter_bp=row.two_quarter_bp,
        total_bp=row.same_quarter_bp + row.next_quarter_bp + row.two_quarter_bp,
    )


@router.put("/time-distribution", response_model=TimeDistributionOut)
def upsert_time_distribution(company_id: int, payload: TimeDistributionIn, db: Session = Depends(get_db)):
    require_company(db, company_id)
    check_dimensions(db, company_id, sql_type_id=payload.sql_type_id)
    q = select(TimeDistribution).where(TimeDistribution.company_id == company_id)
    if payload.sql_type_id is None:
        q = q.where(TimeDistribution.sql_type_id.is_(None))
    else:
        q = q.where(TimeDistribution.sql_type_id == payload.sql_type_id)
    existing = db.execute(q).scalars().first()
    if existing:
        existing.same_quarter_bp = payload.same_quarter_bp
        existing.next_quarter_bp = payload.next_quarter_bp
        existing.two_quarter_bp = payload.two_quarter_bp
        row = existing
    else:
        row = TimeDistribution(company_id=company_id, **payload.model_dump())
        db.add(row)
    db.commit()
    db.refresh(row)
    return _distribution_out(row)


@router.get("/time-distribution", response_model=List[TimeDistributionOut])
def list_time_distributions(company_id: int, db: Session = Depends(get_db)):
    """Company-wide distribution first (the 89/10/1 default if none stored), then overrides."""
    require_company(db, company_id)
    rows = db.scalars(
        select(TimeDistribution)
        .where(TimeDistribution.company_id == company_id)
        .order_by(TimeDistribution.sql_type_id)
    ).all()
    out = [_distribution_out(r) for r in rows]
    if not any(r.sql_type_id is None for r in rows):
        d = DEFAULT_DISTRIBUTION
        out.insert(
            0,
            TimeDistributionOut(
                sql_type_id=None,
                same_quarter_bp=d.same_quarter_bp,
                next_quarter_bp=d.next_quarter_bp,
                two_quarter_bp=d.two_quarter_bp,
                total_bp=d.total_bp,
                is_default=True,
            ),
        )
    else:
        out.sort(key=lambda r: (r.sql_type_id is not None, r.sql_type_id or 0))
    return out
