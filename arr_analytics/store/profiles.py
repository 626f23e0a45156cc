"""
Customer Profile Builder

Folds the transaction store into one profile per customer: acquisition
date (earliest valid transaction) and lifetime revenue (every transaction,
any type).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional

import polars as pl
import structlog

from .models import Customer
from .transactions import TransactionStore

logger = structlog.get_logger(__name__)

PROFILE_SCHEMA = {
    "customer_id": pl.Utf8,
    "email": pl.Utf8,
    "first_transaction_date": pl.Datetime("us"),
    "total_revenue": pl.Float64,
}


@dataclass(frozen=True)
class CustomerProfiles:
    """Read-only customer map of one processing run"""
    customers: Dict[str, Customer] = field(default_factory=dict)
    frame: pl.DataFrame = field(
        default_factory=lambda: pl.DataFrame(schema=PROFILE_SCHEMA),
        compare=False,
        repr=False,
    )

    def __len__(self) -> int:
        return len(self.customers)

    def __iter__(self) -> Iterator[Customer]:
        return iter(self.customers.values())

    def __contains__(self, customer_id: object) -> bool:
        return customer_id in self.customers

    def get(self, customer_id: str) -> Optional[Customer]:
        return self.customers.get(customer_id)

    def ids(self) -> List[str]:
        return sorted(self.customers)


def build_customer_profiles(store: TransactionStore) -> CustomerProfiles:
    """
    Build exactly one profile per distinct customer id.

    Transactions with an unparseable date still add to total revenue but
    never move the acquisition date. A customer whose dates are all invalid
    keeps an acquisition date of None and is neither new nor existing in
    any period.

    Args:
        store: Normalized transaction store

    Returns:
        CustomerProfiles keyed by customer id
    """
    customers: Dict[str, Customer] = {}
    first_dates: Dict[str, Optional[datetime]] = {}
    revenue: Dict[str, float] = {}
    emails: Dict[str, str] = {}

    for txn in store:
        cid = txn.customer_id
        if cid not in revenue:
            revenue[cid] = 0.0
            emails[cid] = txn.customer_email
            first_dates[cid] = txn.created

        revenue[cid] += txn.amount

        if txn.created is None:
            continue
        current_first = first_dates[cid]
        if current_first is None or txn.created < current_first:
            first_dates[cid] = txn.created

    for cid in revenue:
        customers[cid] = Customer(
            id=cid,
            email=emails[cid],
            first_transaction_date=first_dates[cid],
            total_revenue=revenue[cid],
        )

    frame = pl.DataFrame(
        {
            "customer_id": list(customers),
            "email": [c.email for c in customers.values()],
            "first_transaction_date": [c.first_transaction_date for c in customers.values()],
            "total_revenue": [c.total_revenue for c in customers.values()],
        },
        schema=PROFILE_SCHEMA,
    )

    undated = frame["first_transaction_date"].null_count()
    if undated:
        logger.warning("Customers without a valid acquisition date", customers=undated)

    logger.info("Customer profiles built", customers=len(customers))
    return CustomerProfiles(customers=customers, frame=frame)
