"""
Cohort Analyzer

Retention and expansion per acquisition-year cohort over a trailing window
of years.
"""

from datetime import date, datetime
from typing import List, Optional, Union

import structlog

from arr_analytics.config import get_settings
from .models import CohortData
from .periods import as_reference_datetime
from .queries import RevenueQueries
from .retention import measure_cohort

logger = structlog.get_logger(__name__)


def analyze_cohorts(
    queries: RevenueQueries,
    now: Union[date, datetime],
    years: Optional[int] = None,
) -> List[CohortData]:
    """
    Build the cohort table, most recent cohort first.

    Args:
        queries: Revenue query layer of the run
        now: Reference instant; the current year is the newest cohort
        years: Number of cohorts, including the current year (default 5)

    Returns:
        One CohortData row per acquisition year
    """
    years = years or get_settings().metrics.cohort_years
    reference = as_reference_datetime(now)

    rows = []
    for cohort_year in range(reference.year, reference.year - years, -1):
        cohort = measure_cohort(queries, cohort_year, reference)
        rows.append(CohortData(
            cohort=str(cohort_year),
            customers=cohort.customers,
            starting_revenue=cohort.starting_revenue,
            current_revenue=cohort.current_revenue,
            retention=cohort.logo_retention,
            expansion=cohort.net_retention,
        ))

    logger.debug(
        "Cohorts analyzed",
        cohorts=len(rows),
        customers=sum(row.customers for row in rows),
    )
    return rows
