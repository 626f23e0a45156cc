"""
Test Suite Configuration
"""
from datetime import datetime
from typing import Callable, List, Optional

import pytest

from arr_analytics.config import Settings
from arr_analytics.data import BillingExportGenerator
from arr_analytics.metrics import RevenueQueries
from arr_analytics.store import Transaction, TransactionStore, TransactionType, build_customer_profiles


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        APP_ENV="testing",
        DEBUG=True,
    )


@pytest.fixture
def now() -> datetime:
    """Reference instant used across metric tests"""
    return datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture
def make_txn() -> Callable[..., Transaction]:
    """Factory for transactions; subscription type unless stated otherwise"""
    counter = {"n": 0}

    def _make(
        customer_id: str,
        amount: float,
        created: Optional[datetime],
        type: TransactionType = TransactionType.SUBSCRIPTION,
        **kwargs,
    ) -> Transaction:
        counter["n"] += 1
        return Transaction(
            id=kwargs.pop("id", f"ch_{counter['n']:04d}"),
            customer_id=customer_id,
            amount=amount,
            created=created,
            type=type,
            **kwargs,
        )

    return _make


@pytest.fixture
def build_queries() -> Callable[[List[Transaction]], RevenueQueries]:
    """Build the query layer over a list of transactions"""
    def _build(transactions: List[Transaction], precision: int = 2) -> RevenueQueries:
        store = TransactionStore.from_transactions(transactions)
        return RevenueQueries(store, build_customer_profiles(store), precision=precision)

    return _build


@pytest.fixture
def stripe_export_text() -> str:
    """Small Stripe-style charges export with a footer row"""
    return (
        "\ufeffid,Customer ID,Customer Email,Amount,Currency,Status,Created (UTC),Subscription,Description,Interval\n"
        "ch_001,cus_A,a@example.com,$100.00,USD,Paid,2023-03-01 10:00:00,sub_A,Growth subscription,month\n"
        "ch_002,cus_A,a@example.com,$150.00,USD,Paid,2024-03-01 10:00:00,sub_A,Growth subscription,month\n"
        "ch_003,cus_B,b@example.com,\"$1,234.56\",usd,Paid,2024-05-20 08:30:00,,Onboarding package,\n"
        "ch_004,cus_B,b@example.com,-50.00,usd,Refunded,2024-05-21 08:30:00,,Onboarding package,\n"
        "ch_005,cus_C,c@example.com,80.00,usd,Paid,2024-06-02 09:00:00,sub_C,Starter subscription,month\n"
        "Total,,,1514.56,,,,,,\n"
    )


@pytest.fixture
def generated_export_text() -> str:
    """Reproducible synthetic export spanning several years"""
    return BillingExportGenerator(seed=7).generate_csv(
        customers=40,
        start=datetime(2021, 1, 1),
        months=42,
    )
