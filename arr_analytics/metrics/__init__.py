"""
Recurring-Revenue Metrics Module
"""
from .cohorts import analyze_cohorts
from .models import (
    ARRBreakdown,
    CohortData,
    LogoACVData,
    NetNewARRData,
    ProcessedMetrics,
    ProcessingDiagnostics,
    ProcessingReport,
)
from .periods import Period, trailing_months
from .processor import MetricsProcessor, ProcessingError, process_export
from .queries import RevenueQueries
from .retention import CohortRevenue, calculate_grr, calculate_nrr, measure_cohort
from .timeseries import logos_vs_acv_series, net_new_arr_series
from .waterfall import ARRMovement, annual_waterfall, calculate_arr_waterfall, classify_movement

__all__ = [
    "analyze_cohorts",
    "ARRBreakdown",
    "CohortData",
    "LogoACVData",
    "NetNewARRData",
    "ProcessedMetrics",
    "ProcessingDiagnostics",
    "ProcessingReport",
    "Period",
    "trailing_months",
    "MetricsProcessor",
    "ProcessingError",
    "process_export",
    "RevenueQueries",
    "CohortRevenue",
    "calculate_grr",
    "calculate_nrr",
    "measure_cohort",
    "logos_vs_acv_series",
    "net_new_arr_series",
    "ARRMovement",
    "annual_waterfall",
    "calculate_arr_waterfall",
    "classify_movement",
]
