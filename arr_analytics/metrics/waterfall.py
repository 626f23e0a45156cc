"""
ARR Waterfall Calculator

Decomposes the revenue change between two consecutive periods into new,
upsell, churn, downsell and comeback ARR.
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, Optional, Tuple, Union

import structlog

from .models import ARRBreakdown
from .periods import Period, as_reference_datetime
from .queries import RevenueQueries

logger = structlog.get_logger(__name__)


class ARRMovement(str, Enum):
    """Bucket a customer's revenue change falls into"""
    NEW = "new"
    UPSELL = "upsell"
    CHURN = "churn"
    DOWNSELL = "downsell"
    COMEBACK = "comeback"


def classify_movement(current: float, previous: float) -> Optional[Tuple[ARRMovement, float]]:
    """
    Classify an existing customer's period-over-period change.

    Checked in order: churn (lost everything, measured at the lost level),
    comeback (revenue after a period with none), upsell, downsell.
    Unchanged revenue returns None.
    """
    if current == 0 and previous > 0:
        return ARRMovement.CHURN, previous
    if current > 0 and previous == 0:
        return ARRMovement.COMEBACK, current
    if current > previous:
        return ARRMovement.UPSELL, current - previous
    if current < previous:
        return ARRMovement.DOWNSELL, previous - current
    return None


def customer_movements(
    queries: RevenueQueries,
    current: Period,
    previous: Optional[Period] = None,
) -> Dict[str, Tuple[ARRMovement, float]]:
    """
    Per-customer movement between `previous` and `current`.

    Customers acquired in `current` are NEW with their full current revenue;
    customers acquired earlier get at most one other bucket; customers
    without a change are absent.
    """
    previous = previous or current.previous()
    current_revenue = queries.revenue_by_customer(current)
    previous_revenue = queries.revenue_by_customer(previous)

    movements: Dict[str, Tuple[ARRMovement, float]] = {}

    for customer_id in queries.new_customer_ids(current):
        movements[customer_id] = (ARRMovement.NEW, current_revenue.get(customer_id, 0.0))

    for customer_id in queries.existing_customer_ids(current):
        movement = classify_movement(
            current_revenue.get(customer_id, 0.0),
            previous_revenue.get(customer_id, 0.0),
        )
        if movement is not None:
            movements[customer_id] = movement

    return movements


def calculate_arr_waterfall(
    queries: RevenueQueries,
    current: Period,
    previous: Optional[Period] = None,
) -> ARRBreakdown:
    """
    Compute the ARR waterfall for `current` against the preceding period.

    Args:
        queries: Revenue query layer of the run
        current: Period being reported
        previous: Comparison period, defaults to the period just before

    Returns:
        ARRBreakdown with the current total and each movement bucket
    """
    totals = {movement: 0.0 for movement in ARRMovement}
    for movement, amount in customer_movements(queries, current, previous).values():
        totals[movement] += amount
    buckets = {movement: queries.round_amount(total) for movement, total in totals.items()}

    breakdown = ARRBreakdown(
        total=queries.revenue_in_period(current),
        new_arr=buckets[ARRMovement.NEW],
        upsell_arr=buckets[ARRMovement.UPSELL],
        churn_arr=buckets[ARRMovement.CHURN],
        downsell_arr=buckets[ARRMovement.DOWNSELL],
        comeback_arr=buckets[ARRMovement.COMEBACK],
        net_new_arr=queries.round_amount(
            buckets[ARRMovement.NEW] + buckets[ARRMovement.UPSELL] + buckets[ARRMovement.COMEBACK]
            - buckets[ARRMovement.CHURN] - buckets[ARRMovement.DOWNSELL]
        ),
    )

    logger.debug(
        "ARR waterfall computed",
        period=current.label,
        total=breakdown.total,
        net_new_arr=breakdown.net_new_arr,
    )
    return breakdown


def annual_waterfall(queries: RevenueQueries, now: Union[date, datetime]) -> ARRBreakdown:
    """Waterfall of the calendar year containing `now` against the year before"""
    reference = as_reference_datetime(now)
    return calculate_arr_waterfall(queries, Period.year_of(reference))
