"""
Recurring-Revenue Analytics Engine

Normalizes billing exports and computes ARR movement, NRR/GRR, cohort
retention and monthly SaaS metrics.
"""
from arr_analytics.metrics import MetricsProcessor, ProcessedMetrics, ProcessingError, process_export

__version__ = "1.0.0"

__all__ = [
    "MetricsProcessor",
    "ProcessedMetrics",
    "ProcessingError",
    "process_export",
]
