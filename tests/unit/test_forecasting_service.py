import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import models
from app.core.db import Base
from app.jobs import scheduler
from app.modeling.errors import ForecastPersistenceError
from app.services import forecasting


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.drop_all(bind=engine)


def _seed_company(db, name="Acme", volume=100):
    co = models.Company(name=name)
    db.add(co)
    db.flush()
    region = models.Region(company_id=co.id, name="NORAM", display_name="North America", enabled=True)
    sql_type = models.SqlType(company_id=co.id, name="INBOUND", display_name="Inbound", enabled=True)
    db.add_all([region, sql_type])
    db.flush()
    db.add_all([
        models.SqlHistory(
            company_id=co.id, region_id=region.id, sql_type_id=sql_type.id,
            year=2024, quarter=1, volume=volume,
        ),
        models.ConversionRate(
            company_id=co.id, region_id=region.id, sql_type_id=sql_type.id,
            opp_coverage_ratio=580, win_rate_new=2500, win_rate_upsell=3000,
        ),
        models.DealEconomics(company_id=co.id, region_id=region.id, acv_new=500000, acv_upsell=200000),
    ])
    db.commit()
    return co.id


def test_calculate_forecast_persists_rows(session_factory):
    db = session_factory()
    company_id = _seed_company(db)
    rows = forecasting.calculate_forecast(db, company_id)
    assert forecasting.list_forecasts(db, company_id) == rows
    assert [r.predicted_opps for r in rows] == [516, 58, 6]
    db.close()


def test_failed_replace_keeps_previous_forecast(session_factory, monkeypatch):
    db = session_factory()
    company_id = _seed_company(db)
    first = forecasting.calculate_forecast(db, company_id)

    history = db.scalars(select(models.SqlHistory)).one()
    history.volume = 200
    db.commit()

    def broken_commit():
        raise OperationalError("INSERT INTO forecasts", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", broken_commit)
    with pytest.raises(ForecastPersistenceError):
        forecasting.calculate_forecast(db, company_id)
    monkeypatch.undo()

    # the delete was rolled back with the inserts
    assert forecasting.list_forecasts(db, company_id) == first

    # the session is still usable and the next run goes through
    second = forecasting.calculate_forecast(db, company_id)
    assert [r.predicted_opps for r in second] == [1032, 116, 12]
    db.close()


def test_recalculate_all_skips_failing_company(session_factory, monkeypatch):
    db = session_factory()
    broken_id = _seed_company(db, name="Broken")
    healthy_id = _seed_company(db, name="Healthy")
    db.close()

    real_calculate = forecasting.calculate_forecast

    def calculate(db, company_id):
        if company_id == broken_id:
            raise SQLAlchemyError("lost connection while loading inputs")
        return real_calculate(db, company_id)

    monkeypatch.setattr(scheduler, "calculate_forecast", calculate)
    summary = scheduler.recalculate_all(session_factory)
    assert summary == {"recalculated": 1, "failed": 1}

    db = session_factory()
    assert len(forecasting.list_forecasts(db, healthy_id)) == 3
    assert forecasting.list_forecasts(db, broken_id) == []
    db.close()
