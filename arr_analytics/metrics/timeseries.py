"""
Time-Series Generators

Month-by-month views over a trailing window, oldest month first:
- Net-new-ARR breakdown (the waterfall at month granularity)
- New logos vs. average contract value
"""

from datetime import date, datetime
from typing import List, Optional, Union

import structlog

from arr_analytics.config import get_settings
from .models import LogoACVData, NetNewARRData
from .periods import trailing_months
from .queries import RevenueQueries
from .waterfall import calculate_arr_waterfall

logger = structlog.get_logger(__name__)


def net_new_arr_series(
    queries: RevenueQueries,
    now: Union[date, datetime],
    months: Optional[int] = None,
) -> List[NetNewARRData]:
    """
    Monthly ARR waterfall, each month against the month before it.

    Args:
        queries: Revenue query layer of the run
        now: Reference instant; its month is the last row
        months: Window length (default 12)

    Returns:
        One NetNewARRData row per month, oldest first
    """
    months = months or get_settings().metrics.trailing_months
    rows = []

    for period in trailing_months(now, months):
        breakdown = calculate_arr_waterfall(queries, period)
        rows.append(NetNewARRData(
            month=period.label,
            net_new_arr=breakdown.net_new_arr,
            new_arr=breakdown.new_arr,
            churn_arr=breakdown.churn_arr,
            upsell_arr=breakdown.upsell_arr,
            downsell_arr=breakdown.downsell_arr,
            comeback_arr=breakdown.comeback_arr,
        ))

    return rows


def logos_vs_acv_series(
    queries: RevenueQueries,
    now: Union[date, datetime],
    months: Optional[int] = None,
) -> List[LogoACVData]:
    """
    Monthly new-logo count with the average first-month revenue per logo.

    Months without new customers produce a zero row.
    """
    months = months or get_settings().metrics.trailing_months
    rows = []

    for period in trailing_months(now, months):
        new_ids = queries.new_customer_ids(period)
        if not new_ids:
            rows.append(LogoACVData(month=period.label))
            continue

        revenue = queries.revenue_by_customer(period)
        total_new_arr = queries.round_amount(
            sum(revenue.get(customer_id, 0.0) for customer_id in new_ids)
        )
        rows.append(LogoACVData(
            month=period.label,
            new_logos=len(new_ids),
            average_acv=total_new_arr / len(new_ids),
            total_new_arr=total_new_arr,
        ))

    logger.debug(
        "Logo series computed",
        months=len(rows),
        new_logos=sum(row.new_logos for row in rows),
    )
    return rows
