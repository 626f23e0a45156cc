"""
Billing Domain Models

Canonical transaction and customer records shared by every stage of a
processing run. Both are immutable once built.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Kinds of billing events"""
    SUBSCRIPTION = "subscription"
    ONE_TIME = "one_time"
    REFUND = "refund"


@dataclass(frozen=True)
class Transaction:
    """One normalized billing event, amounts in major currency units"""
    id: str
    customer_id: str
    amount: float
    type: TransactionType
    created: Optional[datetime] = None  # None when the export value was unparseable
    customer_email: str = ""
    currency: str = "usd"
    status: str = ""
    subscription_id: Optional[str] = None
    invoice_id: Optional[str] = None
    product_name: Optional[str] = None
    plan_name: Optional[str] = None
    interval: Optional[str] = None

    @property
    def has_valid_date(self) -> bool:
        return self.created is not None


@dataclass(frozen=True)
class Customer:
    """Aggregate customer profile derived from the transaction store"""
    id: str
    email: str
    first_transaction_date: Optional[datetime]  # acquisition date
    total_revenue: float
