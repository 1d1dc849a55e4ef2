"""SQLAlchemy ORM models for Cascata.

Tables:
- companies
- regions
- sql_types
- sql_history
- conversion_rates
- deal_economics
- time_distributions
- forecasts
- actuals
- scenarios

Money columns are integer cents, rates and percentages integer basis points,
opportunity counts integers scaled by 100.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy.sql import func
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base


class Company(Base):
    __tablename__ = "companies"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    regions = relationship("Region", back_populates="company", cascade="all, delete-orphan")
    sql_types = relationship("SqlType", back_populates="company", cascade="all, delete-orphan")


class Region(Base):
    __tablename__ = "regions"
    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)  # NORAM, EMESA_NORTH, ...
    display_name = Column(String(100), nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    company = relationship("Company", back_populates="regions")

    __table_args__ = (
        UniqueConstraint("company_id", "name", name="uq_regions_company_name"),
    )


class SqlType(Base):
    __tablename__ = "sql_types"
    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)  # INBOUND, OUTBOUND, EVENT, ...
    display_name = Column(String(100), nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    company = relationship("Company", back_populates="sql_types")

    __table_args__ = (
        UniqueConstraint("company_id", "name", name="uq_sql_types_company_name"),
    )


class SqlHistory(Base):
    __tablename__ = "sql_history"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    region_id = Column(Integer, ForeignKey("regions.id", ondelete="CASCADE"), nullable=False)
    sql_type_id = Column(Integer, ForeignKey("sql_types.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    quarter = Column(Integer, nullable=False)  # 1..4
    volume = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint(
            "company_id", "region_id", "sql_type_id", "year", "quarter",
            name="uq_sql_history_dimension_quarter",
        ),
    )


class ConversionRate(Base):
    __tablename__ = "conversion_rates"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    region_id = Column(Integer, ForeignKey("regions.id", ondelete="CASCADE"), nullable=False)
    sql_type_id = Column(Integer, ForeignKey("sql_types.id", ondelete="CASCADE"), nullable=False)
    opp_coverage_ratio = Column(Integer, nullable=False, default=500)  # 5.00%
    win_rate_new = Column(Integer, nullable=False, default=2500)
    win_rate_upsell = Column(Integer, nullable=False, default=3000)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("company_id", "region_id", "sql_type_id", name="uq_conversion_rates_dimension"),
    )


class DealEconomics(Base):
    __tablename__ = "deal_economics"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    region_id = Column(Integer, ForeignKey("regions.id", ondelete="CASCADE"), nullable=False)
    acv_new = Column(BigInteger, nullable=False, default=100000)
    acv_upsell = Column(BigInteger, nullable=False, default=50000)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("company_id", "region_id", name="uq_deal_economics_region"),
    )


class TimeDistribution(Base):
    """Company-wide distribution when sql_type_id is NULL, otherwise a per-type override."""

    __tablename__ = "time_distributions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), index=True)
    sql_type_id: Mapped[int | None] = mapped_column(ForeignKey("sql_types.id", ondelete="CASCADE"), nullable=True)
    same_quarter_bp: Mapped[int] = mapped_column(Integer, default=8900)
    next_quarter_bp: Mapped[int] = mapped_column(Integer, default=1000)
    two_quarter_bp: Mapped[int] = mapped_column(Integer, default=100)

    __table_args__ = (
        UniqueConstraint("company_id", "sql_type_id", name="uq_time_distributions_company_type"),
    )


class Forecast(Base):
    __tablename__ = "forecasts"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    region_id = Column(Integer, ForeignKey("regions.id", ondelete="CASCADE"), nullable=False)
    sql_type_id = Column(Integer, ForeignKey("sql_types.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    quarter = Column(Integer, nullable=False)
    predicted_sqls = Column(Integer, nullable=False, default=0)
    predicted_opps = Column(Integer, nullable=False, default=0)  # x100
    predicted_revenue_new = Column(BigInteger, nullable=False, default=0)
    predicted_revenue_upsell = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_forecasts_company_year_quarter", "company_id", "year", "quarter"),
        UniqueConstraint(
            "company_id", "region_id", "sql_type_id", "year", "quarter",
            name="uq_forecasts_dimension_quarter",
        ),
    )


class Actual(Base):
    __tablename__ = "actuals"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    region_id = Column(Integer, ForeignKey("regions.id", ondelete="CASCADE"), nullable=False)
    sql_type_id = Column(Integer, ForeignKey("sql_types.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    quarter = Column(Integer, nullable=False)
    actual_sqls = Column(Integer, nullable=False, default=0)
    actual_opps = Column(Integer, nullable=False, default=0)
    actual_revenue = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint(
            "company_id", "region_id", "sql_type_id", "year", "quarter",
            name="uq_actuals_dimension_quarter",
        ),
    )


class Scenario(Base):
    __tablename__ = "scenarios"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # adjustment; multiplier stored as basis points (1.0 = 10000)
    conversion_rate_multiplier_bp: Mapped[int] = mapped_column(Integer, default=10000)
    acv_new_adjustment: Mapped[int] = mapped_column(Integer, default=0)
    acv_upsell_adjustment: Mapped[int] = mapped_column(Integer, default=0)
    same_quarter_adjustment: Mapped[int] = mapped_column(Integer, default=0)
    next_quarter_adjustment: Mapped[int] = mapped_column(Integer, default=0)
    two_quarter_adjustment: Mapped[int] = mapped_column(Integer, default=0)

    # impact captured at save time, never recomputed on read
    total_revenue_change: Mapped[int] = mapped_column(BigInteger, default=0)
    total_revenue_change_pct_bp: Mapped[int] = mapped_column(Integer, default=0)
    total_opportunities_change: Mapped[int] = mapped_column(Integer, default=0)
    total_opportunities_change_pct_bp: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
