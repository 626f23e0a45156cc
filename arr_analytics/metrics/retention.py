"""
Retention Calculator

Net and Gross Revenue Retention for an acquisition-year cohort, measured
as the cohort's revenue in the current calendar year against its revenue
in the year it was acquired.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Union

import structlog

from .periods import Period, as_reference_datetime
from .queries import RevenueQueries

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CohortRevenue:
    """Revenue of one acquisition-year cohort, then and now"""
    cohort_year: int
    customers: int
    starting_revenue: float  # revenue in the acquisition year
    current_revenue: float  # revenue in the current year
    retained_revenue: float  # current revenue capped per customer at the starting level
    retained_customers: int  # customers with non-zero current revenue

    @property
    def net_retention(self) -> float:
        if self.starting_revenue == 0:
            return 0.0
        return self.current_revenue / self.starting_revenue * 100

    @property
    def gross_retention(self) -> float:
        if self.starting_revenue == 0:
            return 0.0
        return self.retained_revenue / self.starting_revenue * 100

    @property
    def logo_retention(self) -> float:
        if self.customers == 0:
            return 0.0
        return self.retained_customers / self.customers * 100


def measure_cohort(
    queries: RevenueQueries,
    cohort_year: int,
    now: Union[date, datetime],
) -> CohortRevenue:
    """
    Measure the customers acquired in `cohort_year`.

    Args:
        queries: Revenue query layer of the run
        cohort_year: Acquisition year of the cohort
        now: Reference instant; its calendar year is the "current" year

    Returns:
        CohortRevenue for the cohort
    """
    reference = as_reference_datetime(now)
    acquisition = Period.for_year(cohort_year)
    current = Period.year_of(reference)

    cohort_ids = queries.new_customer_ids(acquisition)
    original_by_customer = queries.revenue_by_customer(acquisition)
    current_by_customer = queries.revenue_by_customer(current)

    starting = current_total = retained = 0.0
    retained_customers = 0

    for customer_id in cohort_ids:
        original = original_by_customer.get(customer_id, 0.0)
        latest = current_by_customer.get(customer_id, 0.0)
        starting += original
        current_total += latest
        retained += min(latest, original)
        if latest > 0:
            retained_customers += 1

    return CohortRevenue(
        cohort_year=cohort_year,
        customers=len(cohort_ids),
        starting_revenue=queries.round_amount(starting),
        current_revenue=queries.round_amount(current_total),
        retained_revenue=queries.round_amount(retained),
        retained_customers=retained_customers,
    )


def calculate_nrr(queries: RevenueQueries, now: Union[date, datetime]) -> float:
    """Net Revenue Retention of last year's cohort, in percent (0 if it had no revenue)"""
    reference = as_reference_datetime(now)
    return measure_cohort(queries, reference.year - 1, reference).net_retention


def calculate_grr(queries: RevenueQueries, now: Union[date, datetime]) -> float:
    """Gross Revenue Retention of last year's cohort, in percent; never above 100"""
    reference = as_reference_datetime(now)
    return measure_cohort(queries, reference.year - 1, reference).gross_retention
