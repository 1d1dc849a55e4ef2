"""Storage side of the cascade engine.

Loads a company's inputs into frozen engine snapshots, runs the engine and
writes forecast rows / scenarios back. Each call builds its own snapshot, so
concurrent What-If evaluations never share mutable state.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core import models
from app.modeling.cascade import ForecastInputs, ForecastRow, calculate_cascade
from app.modeling.conversion import ConversionModel, ConversionRate, DealEconomics
from app.modeling.distribution import DEFAULT_DISTRIBUTION, TimeDistribution
from app.modeling.errors import ForecastPersistenceError
from app.modeling.history import HistoricalSqlRecord
from app.modeling.money import multiplier_to_bp
from app.modeling.performance import ActualRecord
from app.modeling.whatif import Impact, WhatIfAdjustment, WhatIfResult, evaluate_what_if as _evaluate

log = logging.getLogger(__name__)


def _dimensions(
    db: Session, company_id: int, enabled_only: bool = True
) -> Tuple[Dict[int, str], Dict[int, str]]:
    rq = select(models.Region).where(models.Region.company_id == company_id)
    tq = select(models.SqlType).where(models.SqlType.company_id == company_id)
    if enabled_only:
        rq = rq.where(models.Region.enabled.is_(True))
        tq = tq.where(models.SqlType.enabled.is_(True))
    regions = {r.id: r.name for r in db.scalars(rq)}
    sql_types = {t.id: t.name for t in db.scalars(tq)}
    return regions, sql_types


def list_historical_sqls(db: Session, company_id: int) -> List[HistoricalSqlRecord]:
    regions, sql_types = _dimensions(db, company_id)
    rows = db.scalars(
        select(models.SqlHistory)
        .where(models.SqlHistory.company_id == company_id)
        .order_by(models.SqlHistory.year, models.SqlHistory.quarter, models.SqlHistory.id)
    )
    return [
        HistoricalSqlRecord(
            region=regions[h.region_id],
            sql_type=sql_types[h.sql_type_id],
            year=h.year,
            quarter=h.quarter,
            volume=h.volume,
        )
        for h in rows
        if h.region_id in regions and h.sql_type_id in sql_types
    ]


def list_conversion_rates(db: Session, company_id: int) -> List[ConversionRate]:
    regions, sql_types = _dimensions(db, company_id)
    rows = db.scalars(
        select(models.ConversionRate).where(models.ConversionRate.company_id == company_id)
    )
    return [
        ConversionRate(
            region=regions[c.region_id],
            sql_type=sql_types[c.sql_type_id],
            opp_coverage_ratio=c.opp_coverage_ratio,
            win_rate_new=c.win_rate_new,
            win_rate_upsell=c.win_rate_upsell,
        )
        for c in rows
        if c.region_id in regions and c.sql_type_id in sql_types
    ]


def list_deal_economics(db: Session, company_id: int) -> List[DealEconomics]:
    regions, _ = _dimensions(db, company_id)
    rows = db.scalars(
        select(models.DealEconomics).where(models.DealEconomics.company_id == company_id)
    )
    return [
        DealEconomics(region=regions[d.region_id], acv_new=d.acv_new, acv_upsell=d.acv_upsell)
        for d in rows
        if d.region_id in regions
    ]


def _to_distribution(row: models.TimeDistribution) -> TimeDistribution:
    return TimeDistribution(
        same_quarter_bp=row.same_quarter_bp,
        next_quarter_bp=row.next_quarter_bp,
        two_quarter_bp=row.two_quarter_bp,
    )


def get_time_distribution(db: Session, company_id: int) -> TimeDistribution:
    """Company-wide distribution, falling back to 89/10/1."""
    row = db.scalars(
        select(models.TimeDistribution).where(
            models.TimeDistribution.company_id == company_id,
            models.TimeDistribution.sql_type_id.is_(None),
        )
    ).first()
    return _to_distribution(row) if row else DEFAULT_DISTRIBUTION


def list_time_distribution_overrides(db: Session, company_id: int) -> Dict[str, TimeDistribution]:
    _, sql_types = _dimensions(db, company_id)
    rows = db.scalars(
        select(models.TimeDistribution).where(
            models.TimeDistribution.company_id == company_id,
            models.TimeDistribution.sql_type_id.is_not(None),
        )
    )
    return {sql_types[r.sql_type_id]: _to_distribution(r) for r in rows if r.sql_type_id in sql_types}


def load_inputs(db: Session, company_id: int) -> ForecastInputs:
    return ForecastInputs(
        records=tuple(list_historical_sqls(db, company_id)),
        model=ConversionModel(
            list_conversion_rates(db, company_id),
            list_deal_economics(db, company_id),
        ),
        distribution=get_time_distribution(db, company_id),
        overrides=list_time_distribution_overrides(db, company_id),
    )


def replace_forecasts(db: Session, company_id: int, rows: List[ForecastRow]) -> int:
    """Delete and re-insert the company's forecast rows in one transaction."""
    regions, sql_types = _dimensions(db, company_id, enabled_only=False)
    region_ids = {name: rid for rid, name in regions.items()}
    sql_type_ids = {name: tid for tid, name in sql_types.items()}
    try:
        db.execute(delete(models.Forecast).where(models.Forecast.company_id == company_id))
        db.add_all(
            models.Forecast(
                company_id=company_id,
                region_id=region_ids[r.region],
                sql_type_id=sql_type_ids[r.sql_type],
                year=r.year,
                quarter=r.quarter,
                predicted_sqls=r.predicted_sqls,
                predicted_opps=r.predicted_opps,
                predicted_revenue_new=r.predicted_revenue_new,
                predicted_revenue_upsell=r.predicted_revenue_upsell,
            )
            for r in rows
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("Replacing forecasts for company %s failed: %s", company_id, exc)
        raise ForecastPersistenceError(f"Could not store forecasts for company {company_id}") from exc
    return len(rows)


def calculate_forecast(db: Session, company_id: int) -> List[ForecastRow]:
    inputs = load_inputs(db, company_id)
    rows = calculate_cascade(inputs)
    written = replace_forecasts(db, company_id, rows)
    log.info("Company %s: %d forecast rows written", company_id, written)
    return rows


def list_forecasts(db: Session, company_id: int) -> List[ForecastRow]:
    regions, sql_types = _dimensions(db, company_id, enabled_only=False)
    rows = db.scalars(
        select(models.Forecast).where(models.Forecast.company_id == company_id)
    )
    out = [
        ForecastRow(
            region=regions[f.region_id],
            sql_type=sql_types[f.sql_type_id],
            year=f.year,
            quarter=f.quarter,
            predicted_sqls=f.predicted_sqls,
            predicted_opps=f.predicted_opps,
            predicted_revenue_new=f.predicted_revenue_new,
            predicted_revenue_upsell=f.predicted_revenue_upsell,
        )
        for f in rows
    ]
    return sorted(out, key=lambda r: (r.region, r.sql_type, r.year, r.quarter))


def list_actuals(db: Session, company_id: int) -> List[ActualRecord]:
    regions, sql_types = _dimensions(db, company_id, enabled_only=False)
    rows = db.scalars(select(models.Actual).where(models.Actual.company_id == company_id))
    return [
        ActualRecord(
            region=regions[a.region_id],
            sql_type=sql_types[a.sql_type_id],
            year=a.year,
            quarter=a.quarter,
            actual_sqls=a.actual_sqls,
            actual_opps=a.actual_opps,
            actual_revenue=a.actual_revenue,
        )
        for a in rows
    ]


def evaluate_what_if(db: Session, company_id: int, adjustment: WhatIfAdjustment) -> WhatIfResult:
    return _evaluate(load_inputs(db, company_id), adjustment)


def save_scenario(
    db: Session,
    company_id: int,
    name: str,
    description: str | None,
    adjustment: WhatIfAdjustment,
    impact: Impact,
) -> int:
    adjustment.validate()
    row = models.Scenario(
        company_id=company_id,
        name=name,
        description=description,
        conversion_rate_multiplier_bp=multiplier_to_bp(adjustment.conversion_rate_multiplier),
        acv_new_adjustment=adjustment.acv_new_adjustment,
        acv_upsell_adjustment=adjustment.acv_upsell_adjustment,
        same_quarter_adjustment=adjustment.same_quarter_adjustment,
        next_quarter_adjustment=adjustment.next_quarter_adjustment,
        two_quarter_adjustment=adjustment.two_quarter_adjustment,
        total_revenue_change=impact.total_revenue_change,
        total_revenue_change_pct_bp=impact.total_revenue_change_pct_bp,
        total_opportunities_change=impact.total_opportunities_change,
        total_opportunities_change_pct_bp=impact.total_opportunities_change_pct_bp,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row.id
