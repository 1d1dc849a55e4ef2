# app/routers/companies.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.models import Company, Region, SqlType
from app.core.schemas import CompanyIn, CompanyOut, DimensionIn, DimensionOut

router = APIRouter(prefix="/companies", tags=["companies"])


def require_company(db: Session, company_id: int) -> Company:
    co = db.get(Company, company_id)
    if not co:
        raise HTTPException(status_code=404, detail="Company not found")
    return co


@router.post("", response_model=CompanyOut, status_code=201)
def create_company(payload: CompanyIn, db: Session = Depends(get_db)):
    co = Company(name=payload.name.strip(), description=payload.description)
    db.add(co)
    db.commit()
    db.refresh(co)
    return CompanyOut.model_validate(co)


@router.get("", response_model=List[CompanyOut])
def list_companies(db: Session = Depends(get_db)):
    rows = db.scalars(select(Company).order_by(Company.name.asc())).all()
    return [CompanyOut.model_validate(co) for co in rows]


@router.get("/{company_id}", response_model=CompanyOut)
def get_company(
    company_id: int = Path(..., description="Numeric company primary key (companies.id)"),
    db: Session = Depends(get_db),
):
    return CompanyOut.model_validate(require_company(db, company_id))


def _create_dimension(db: Session, model, company_id: int, payload: DimensionIn):
    require_company(db, company_id)
    row = model(
        company_id=company_id,
        name=payload.name.strip(),
        display_name=payload.display_name.strip(),
        enabled=payload.enabled,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"'{payload.name}' already exists")
    db.refresh(row)
    return DimensionOut.model_validate(row)


def _list_dimension(db: Session, model, company_id: int):
    require_company(db, company_id)
    rows = db.scalars(
        select(model).where(model.company_id == company_id).order_by(model.name.asc())
    ).all()
    return [DimensionOut.model_validate(r) for r in rows]


@router.post("/{company_id}/regions", response_model=DimensionOut, status_code=201)
def create_region(company_id: int, payload: DimensionIn, db: Session = Depends(get_db)):
    return _create_dimension(db, Region, company_id, payload)


@router.get("/{company_id}/regions", response_model=List[DimensionOut])
def list_regions(company_id: int, db: Session = Depends(get_db)):
    return _list_dimension(db, Region, company_id)


@router.post("/{company_id}/sql-types", response_model=DimensionOut, status_code=201)
def create_sql_type(company_id: int, payload: DimensionIn, db: Session = Depends(get_db)):
    return _create_dimension(db, SqlType, company_id, payload)


@router.get("/{company_id}/sql-types", response_model=List[DimensionOut])
def list_sql_types(company_id: int, db: Session = Depends(get_db)):
    return _list_dimension(db, SqlType, company_id)
