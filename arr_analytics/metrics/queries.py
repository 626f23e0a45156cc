"""
Revenue Query Layer

Read-only questions over the transaction store and customer profiles.
Every calculator is built on these queries and nothing else.

Only subscription transactions with a valid date take part in revenue
queries; one-time charges and refunds only count towards a customer's
lifetime revenue.
"""

from typing import Dict, List, Optional

import polars as pl
import structlog

from arr_analytics.config import get_settings
from arr_analytics.store import Customer, CustomerProfiles, TransactionStore
from .periods import Period

logger = structlog.get_logger(__name__)


class RevenueQueries:
    """
    Period revenue and customer-acquisition queries.

    Monetary sums are rounded to `precision` decimal places, so revenue that
    is equal in currency terms compares equal.

    Example:
        queries = RevenueQueries(store, profiles)
        queries.revenue_in_period(Period.for_year(2024))
        queries.new_customers(Period.for_month(2024, 3))
    """

    def __init__(
        self,
        store: TransactionStore,
        customers: CustomerProfiles,
        precision: Optional[int] = None,
    ):
        self.store = store
        self.customers = customers
        self.precision = precision if precision is not None else get_settings().metrics.amount_precision
        self._subscriptions = store.subscriptions()

    def round_amount(self, value: float) -> float:
        # + 0.0 turns -0.0 into 0.0
        return round(float(value), self.precision) + 0.0

    @staticmethod
    def _in_period(column: str, period: Period) -> pl.Expr:
        return (pl.col(column) >= period.start) & (pl.col(column) < period.end)

    def revenue_in_period(self, period: Period) -> float:
        """Subscription revenue recognized in the period"""
        amounts = self._subscriptions.filter(self._in_period("created", period))["amount"]
        return self.round_amount(amounts.sum())

    def customer_revenue_in_period(self, customer_id: str, period: Period) -> float:
        """Subscription revenue of one customer in the period"""
        amounts = self._subscriptions.filter(
            (pl.col("customer_id") == customer_id) & self._in_period("created", period)
        )["amount"]
        return self.round_amount(amounts.sum())

    def revenue_by_customer(self, period: Period) -> Dict[str, float]:
        """Subscription revenue per customer in the period; absent customers had none"""
        totals = (
            self._subscriptions
            .filter(self._in_period("created", period))
            .group_by("customer_id", maintain_order=True)
            .agg(pl.col("amount").sum().alias("revenue"))
        )
        return {
            customer_id: self.round_amount(revenue)
            for customer_id, revenue in totals.iter_rows()
        }

    def _customers_where(self, condition: pl.Expr) -> List[Customer]:
        ids = (
            self.customers.frame
            .filter(condition)
            .sort("customer_id")["customer_id"]
            .to_list()
        )
        return [self.customers.customers[cid] for cid in ids]

    def new_customers(self, period: Period) -> List[Customer]:
        """Customers acquired inside the period, sorted by id"""
        return self._customers_where(self._in_period("first_transaction_date", period))

    def existing_customers(self, period: Period) -> List[Customer]:
        """Customers acquired strictly before the period starts, sorted by id"""
        return self._customers_where(pl.col("first_transaction_date") < period.start)

    def new_customer_ids(self, period: Period) -> List[str]:
        return [c.id for c in self.new_customers(period)]

    def existing_customer_ids(self, period: Period) -> List[str]:
        return [c.id for c in self.existing_customers(period)]
