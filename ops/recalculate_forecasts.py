"""Recalculate stored forecasts from the current inputs.

Runs the same cascade the nightly job runs, but on demand. Each company's
forecast rows are replaced in a single transaction.

Usage
-----
$ python -m ops.recalculate_forecasts
$ python -m ops.recalculate_forecasts --company-id 3
$ python -m ops.recalculate_forecasts --limit 10
"""
from __future__ import annotations

import argparse

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.db import SessionLocal
from app.core.models import Company
from app.modeling.cascade import total_opportunities, total_revenue
from app.modeling.errors import CascadeError
from app.modeling.money import cents_to_dollars, scaled_to_opps
from app.services.forecasting import calculate_forecast


def main() -> None:
    parser = argparse.ArgumentParser(description="Recalculate cascade forecasts")
    parser.add_argument("--limit", type=int, default=10000, help="Max companies to process")
    parser.add_argument("--company-id", type=int, default=None, help="Only this company_id")
    args = parser.parse_args()

    db: Session = SessionLocal()
    try:
        q = select(Company)
        if args.company_id:
            q = q.where(Company.id == args.company_id)
        q = q.order_by(Company.id).limit(args.limit)

        companies = db.scalars(q).all()
        total, failed = 0, 0
        for co in companies:
            try:
                rows = calculate_forecast(db, co.id)
            except CascadeError as exc:
                failed += 1
                print(f"[cascata] {co.name}: FAILED ({exc})")
                continue
            print(
                f"[cascata] {co.name}: rows={len(rows)} "
                f"opps={scaled_to_opps(total_opportunities(rows)):.2f} "
                f"revenue=${cents_to_dollars(total_revenue(rows)):,.2f}"
            )
            total += len(rows)
        print(f"[cascata] Done. Total forecast rows written: {total} (failed companies: {failed})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
