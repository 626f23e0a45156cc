"""
Metrics Result Models

The computed result handed to dashboards and API clients. Field names are
snake_case in Python and serialize with the camelCase keys the dashboard
expects (use model_dump(by_alias=True)).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ResultModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ARRBreakdown(_ResultModel):
    """ARR movement waterfall between two periods"""
    total: float = 0.0
    new_arr: float = Field(default=0.0, alias="newARR")
    upsell_arr: float = Field(default=0.0, alias="upsellARR")
    churn_arr: float = Field(default=0.0, alias="churnARR")
    downsell_arr: float = Field(default=0.0, alias="downsellARR")
    comeback_arr: float = Field(default=0.0, alias="comebackARR")
    # new + upsell + comeback - churn - downsell, rounded like the buckets
    net_new_arr: float = Field(default=0.0, alias="netNewARR")


class CohortData(_ResultModel):
    """One acquisition-year cohort row"""
    cohort: str
    customers: int = 0
    starting_revenue: float = Field(default=0.0, alias="startingRevenue")
    current_revenue: float = Field(default=0.0, alias="currentRevenue")
    retention: float = 0.0  # % of cohort customers still paying
    expansion: float = 0.0  # current / starting revenue, %


class NetNewARRData(_ResultModel):
    """Monthly ARR movement row"""
    month: str
    net_new_arr: float = Field(default=0.0, alias="netNewARR")
    new_arr: float = Field(default=0.0, alias="newARR")
    churn_arr: float = Field(default=0.0, alias="churnARR")
    upsell_arr: float = Field(default=0.0, alias="upsellARR")
    downsell_arr: float = Field(default=0.0, alias="downsellARR")
    comeback_arr: float = Field(default=0.0, alias="comebackARR")


class LogoACVData(_ResultModel):
    """Monthly new-logo count and average contract value"""
    month: str
    new_logos: int = Field(default=0, alias="newLogos")
    average_acv: float = Field(default=0.0, alias="averageACV")
    total_new_arr: float = Field(default=0.0, alias="totalNewARR")


class ProcessedMetrics(_ResultModel):
    """Complete metrics result of one processing run"""
    arr: ARRBreakdown
    nrr: float = 0.0
    grr: float = 0.0
    cohorts: List[CohortData] = Field(default_factory=list)
    net_new_arr_chart: List[NetNewARRData] = Field(default_factory=list, alias="netNewARRChart")
    logos_vs_acv: List[LogoACVData] = Field(default_factory=list, alias="logosVsACV")
    reference_date: Optional[datetime] = Field(default=None, alias="referenceDate")


class SkippedRowInfo(_ResultModel):
    row: int
    reason: str


class ParseIssueInfo(_ResultModel):
    row: int
    message: str


class ProcessingDiagnostics(_ResultModel):
    """Data-quality side report of a processing run"""
    rows_read: int = Field(default=0, alias="rowsRead")
    transactions: int = 0
    customers: int = 0
    skipped_rows: List[SkippedRowInfo] = Field(default_factory=list, alias="skippedRows")
    parse_errors: List[ParseIssueInfo] = Field(default_factory=list, alias="parseErrors")
    invalid_dates: int = Field(default=0, alias="invalidDates")
    unparseable_amounts: int = Field(default=0, alias="unparseableAmounts")
    cents_converted: int = Field(default=0, alias="centsConverted")
    currencies: List[str] = Field(default_factory=list)
    unmapped_headers: List[str] = Field(default_factory=list, alias="unmappedHeaders")
    quality_status: str = Field(default="passed", alias="qualityStatus")
    failed_checks: List[str] = Field(default_factory=list, alias="failedChecks")


class ProcessingReport(_ResultModel):
    """Metrics together with the diagnostics gathered while computing them"""
    metrics: ProcessedMetrics
    diagnostics: ProcessingDiagnostics
