"""Pydantic response/request schemas for the Cascata API.

These map ORM rows and engine dataclasses to API-friendly shapes. Stored
units are kept on the wire (cents, basis points, opportunities x100);
`*_display` fields carry dollars / percent for presentation.
"""
from __future__ import annotations

from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field

# ---------- Companies & dimensions ----------
class CompanyIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)


class CompanyOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class DimensionIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    display_name: str = Field(..., min_length=1, max_length=100)
    enabled: bool = True


class DimensionOut(BaseModel):
    id: int
    name: str
    display_name: str
    enabled: bool
    model_config = ConfigDict(from_attributes=True)


# ---------- Inputs ----------
class SqlHistoryIn(BaseModel):
    region_id: int
    sql_type_id: int
    year: int
    quarter: int = Field(..., ge=1, le=4)
    volume: int = Field(..., ge=0)


class SqlHistoryOut(SqlHistoryIn):
    id: int
    model_config = ConfigDict(from_attributes=True)


class SqlHistoryImportRecord(BaseModel):
    region: str = Field(..., max_length=100)
    sql_type: str = Field(..., max_length=100)
    year: int
    quarter: int = Field(..., ge=1, le=4)
    volume: int


class SqlHistoryImportIn(BaseModel):
    records: List[SqlHistoryImportRecord]


class SkippedRecord(BaseModel):
    record: SqlHistoryImportRecord
    reason: str


class SqlHistoryImportOut(BaseModel):
    imported: int
    skipped: int
    skipped_records: List[SkippedRecord] = Field(default_factory=list)
    duplicates: int = 0
    warnings: List[str] = Field(default_factory=list)


class ConversionRateIn(BaseModel):
    region_id: int
    sql_type_id: int
    opp_coverage_ratio: int = Field(..., ge=0)
    win_rate_new: int = Field(..., ge=0, le=10000)
    win_rate_upsell: int = Field(..., ge=0, le=10000)


class ConversionRateOut(ConversionRateIn):
    id: int
    model_config = ConfigDict(from_attributes=True)


class DealEconomicsIn(BaseModel):
    region_id: int
    acv_new: int = Field(..., ge=0)
    acv_upsell: int = Field(..., ge=0)


class DealEconomicsOut(DealEconomicsIn):
    id: int
    model_config = ConfigDict(from_attributes=True)


class TimeDistributionIn(BaseModel):
    sql_type_id: Optional[int] = None  # None = company-wide
    same_quarter_bp: int = Field(..., ge=0, le=10000)
    next_quarter_bp: int = Field(..., ge=0, le=10000)
    two_quarter_bp: int = Field(..., ge=0, le=10000)


class TimeDistributionOut(TimeDistributionIn):
    total_bp: int
    is_default: bool = False


class ActualIn(BaseModel):
    region_id: int
    sql_type_id: int
    year: int
    quarter: int = Field(..., ge=1, le=4)
    actual_sqls: int = Field(..., ge=0)
    actual_opps: int = Field(..., ge=0)
    actual_revenue: int = Field(..., ge=0)


class ActualOut(ActualIn):
    id: int
    model_config = ConfigDict(from_attributes=True)


# ---------- Forecasts ----------
class ForecastRowOut(BaseModel):
    region: str
    sql_type: str
    year: int
    quarter: int
    predicted_sqls: int
    predicted_opps: int
    predicted_revenue_new: int
    predicted_revenue_upsell: int
    model_config = ConfigDict(from_attributes=True)


class ForecastRunOut(BaseModel):
    company_id: int
    rows_written: int
    rows: List[ForecastRowOut] = Field(default_factory=list)


class ForecastSummaryOut(BaseModel):
    key: str
    predicted_sqls: int
    predicted_opps: int
    predicted_revenue_new: int
    predicted_revenue_upsell: int
    predicted_revenue_display: float
    predicted_opps_display: float


# ---------- What-If & scenarios ----------
class WhatIfAdjustmentIn(BaseModel):
    conversion_rate_multiplier: float = 1.0
    acv_new_adjustment: int = 0
    acv_upsell_adjustment: int = 0
    same_quarter_adjustment: int = 0
    next_quarter_adjustment: int = 0
    two_quarter_adjustment: int = 0


class QuarterImpactOut(BaseModel):
    quarter: str
    baseline_revenue: int
    adjusted_revenue: int
    revenue_change: int
    revenue_change_percent: float


class ImpactOut(BaseModel):
    total_revenue_change: int
    total_revenue_change_percent: float
    total_opportunities_change: int
    total_opportunities_change_percent: float
    quarterly_impact: List[QuarterImpactOut] = Field(default_factory=list)
    distribution_total_bp: int = 10000
    distribution_normalized: bool = True


class WhatIfOut(BaseModel):
    baseline: List[ForecastRowOut]
    adjusted: List[ForecastRowOut]
    impact: ImpactOut


class ScenarioIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    adjustment: WhatIfAdjustmentIn
    impact: ImpactOut


class ScenarioOut(BaseModel):
    id: int
    company_id: int
    name: str
    description: Optional[str] = None
    adjustment: WhatIfAdjustmentIn
    total_revenue_change: int
    total_revenue_change_percent: float
    total_opportunities_change: int
    total_opportunities_change_percent: float


# ---------- Performance ----------
class QuarterVarianceOut(BaseModel):
    quarter: str
    predicted_revenue: int
    actual_revenue: int
    variance: int
    variance_percent: float


class PerformanceOut(BaseModel):
    quarters: List[QuarterVarianceOut]
    total_predicted: int
    total_actual: int
    total_variance: int
    total_variance_percent: float
    accuracy_percent: float
