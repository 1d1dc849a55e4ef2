"""Seed a demo company with a complete set of cascade inputs.

What this does
--------------
- Creates the company (name from --name, default "Demo SaaS")
- Regions NORAM, EMESA_NORTH, EMESA_SOUTH and SQL types INBOUND, OUTBOUND,
  ILO, EVENT, PARTNER
- One quarter of SQL history, conversion rates per region/type, deal economics
  per region and the 89/10/1 company-wide time distribution
- Optionally runs the first forecast (--calculate)

Safe to re-run only against a fresh database: a second run creates a second
company with the same name.

Usage
-----
$ python -m ops.seed_demo
$ python -m ops.seed_demo --name "Acme" --calculate
"""
from __future__ import annotations

import argparse
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from app.core.db import SessionLocal
from app.core.models import (
    Company,
    ConversionRate,
    DealEconomics,
    Region,
    SqlHistory,
    SqlType,
    TimeDistribution,
)
from app.modeling.distribution import DEFAULT_DISTRIBUTION
from app.services.forecasting import calculate_forecast

REGIONS: List[Tuple[str, str]] = [
    ("NORAM", "North America"),
    ("EMESA_NORTH", "EMESA North"),
    ("EMESA_SOUTH", "EMESA South"),
]
SQL_TYPES: List[Tuple[str, str]] = [
    ("INBOUND", "Inbound"),
    ("OUTBOUND", "Outbound"),
    ("ILO", "ILO (Inside Lead Owned)"),
    ("EVENT", "Event"),
    ("PARTNER", "Partner"),
]

# volumes for 2024-Q4, per region in SQL_TYPES order
HISTORY: Dict[str, List[int]] = {
    "NORAM": [24, 10, 20, 26, 0],
    "EMESA_NORTH": [18, 7, 25, 26, 0],
    "EMESA_SOUTH": [15, 5, 12, 18, 0],
}

# (coverage bp, win new bp, win upsell bp) per SQL type
RATES: Dict[str, Tuple[int, int, int]] = {
    "INBOUND": (500, 2500, 3000),
    "OUTBOUND": (800, 2000, 2500),
    "ILO": (400, 3000, 3500),
    "EVENT": (300, 2800, 3200),
    "PARTNER": (600, 2200, 2800),
}

# ACV in cents
ECONOMICS: Dict[str, Tuple[int, int]] = {
    "NORAM": (11_000_000, 4_375_400),
    "EMESA_NORTH": (8_122_400, 3_540_300),
    "EMESA_SOUTH": (5_884_500, 3_540_300),
}


def seed(db: Session, name: str) -> int:
    company = Company(name=name, description="Cascade model demo")
    db.add(company)
    db.flush()

    region_ids: Dict[str, int] = {}
    for key, display in REGIONS:
        r = Region(company_id=company.id, name=key, display_name=display, enabled=True)
        db.add(r)
        db.flush()
        region_ids[key] = r.id

    type_ids: Dict[str, int] = {}
    for key, display in SQL_TYPES:
        t = SqlType(company_id=company.id, name=key, display_name=display, enabled=True)
        db.add(t)
        db.flush()
        type_ids[key] = t.id

    for region, volumes in HISTORY.items():
        for (sql_type, _), volume in zip(SQL_TYPES, volumes):
            db.add(SqlHistory(
                company_id=company.id,
                region_id=region_ids[region],
                sql_type_id=type_ids[sql_type],
                year=2024,
                quarter=4,
                volume=volume,
            ))
            coverage, win_new, win_upsell = RATES[sql_type]
            db.add(ConversionRate(
                company_id=company.id,
                region_id=region_ids[region],
                sql_type_id=type_ids[sql_type],
                opp_coverage_ratio=coverage,
                win_rate_new=win_new,
                win_rate_upsell=win_upsell,
            ))

    for region, (acv_new, acv_upsell) in ECONOMICS.items():
        db.add(DealEconomics(
            company_id=company.id,
            region_id=region_ids[region],
            acv_new=acv_new,
            acv_upsell=acv_upsell,
        ))

    db.add(TimeDistribution(
        company_id=company.id,
        sql_type_id=None,
        same_quarter_bp=DEFAULT_DISTRIBUTION.same_quarter_bp,
        next_quarter_bp=DEFAULT_DISTRIBUTION.next_quarter_bp,
        two_quarter_bp=DEFAULT_DISTRIBUTION.two_quarter_bp,
    ))
    db.commit()
    return company.id


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo company")
    parser.add_argument("--name", type=str, default="Demo SaaS", help="Company name")
    parser.add_argument("--calculate", action="store_true", help="Run the first forecast after seeding")
    args = parser.parse_args()

    db: Session = SessionLocal()
    try:
        company_id = seed(db, args.name)
        print(f"[cascata] Seeded company {args.name!r} with id={company_id}")
        if args.calculate:
            rows = calculate_forecast(db, company_id)
            print(f"[cascata] Forecast rows written: {len(rows)}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
