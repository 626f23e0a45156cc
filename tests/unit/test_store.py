"""
Unit Tests - Transaction Store and Customer Profiles
"""
from datetime import datetime

import polars as pl

from arr_analytics.store import TransactionStore, TransactionType, build_customer_profiles


class TestTransactionStore:
    """Tests for TransactionStore"""

    def test_frame_matches_records(self, make_txn):
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 10.0, datetime(2024, 1, 1)),
            make_txn("cus_2", 20.0, None, type=TransactionType.ONE_TIME),
        ])

        assert len(store) == 2
        assert store.frame.height == 2
        assert store.frame["type"].to_list() == ["subscription", "one_time"]
        assert store.invalid_date_count() == 1

    def test_subscriptions_exclude_other_types_and_undated(self, make_txn):
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 10.0, datetime(2024, 1, 1)),
            make_txn("cus_1", 10.0, None),
            make_txn("cus_1", 99.0, datetime(2024, 1, 2), type=TransactionType.ONE_TIME),
            make_txn("cus_1", -10.0, datetime(2024, 1, 3), type=TransactionType.REFUND),
        ])

        subscriptions = store.subscriptions()

        assert subscriptions.height == 1
        assert subscriptions["amount"].to_list() == [10.0]

    def test_empty_store_has_typed_frame(self):
        store = TransactionStore.from_transactions([])

        assert len(store) == 0
        assert store.frame.schema["created"] == pl.Datetime("us")
        assert store.subscriptions().height == 0
        assert store.currencies() == []

    def test_currencies_sorted(self, make_txn):
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 1.0, None, currency="usd"),
            make_txn("cus_2", 1.0, None, currency="eur"),
            make_txn("cus_3", 1.0, None, currency="usd"),
        ])

        assert store.currencies() == ["eur", "usd"]


class TestCustomerProfiles:
    """Tests for build_customer_profiles"""

    def test_one_profile_per_customer(self, make_txn):
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 10.0, datetime(2024, 2, 1)),
            make_txn("cus_2", 20.0, datetime(2024, 1, 1)),
            make_txn("cus_1", 10.0, datetime(2024, 3, 1)),
        ])

        profiles = build_customer_profiles(store)

        assert len(profiles) == 2
        assert profiles.ids() == ["cus_1", "cus_2"]
        assert profiles.frame.height == 2

    def test_first_transaction_date_is_earliest(self, make_txn):
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 10.0, datetime(2024, 3, 1)),
            make_txn("cus_1", 10.0, datetime(2023, 11, 5)),
            make_txn("cus_1", 10.0, datetime(2024, 1, 1)),
        ])

        profile = build_customer_profiles(store).get("cus_1")

        assert profile.first_transaction_date == datetime(2023, 11, 5)

    def test_total_revenue_counts_every_type(self, make_txn):
        """Lifetime revenue includes one-time charges and refunds"""
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 100.0, datetime(2024, 1, 1)),
            make_txn("cus_1", 500.0, datetime(2024, 1, 2), type=TransactionType.ONE_TIME),
            make_txn("cus_1", -100.0, datetime(2024, 1, 3), type=TransactionType.REFUND),
        ])

        assert build_customer_profiles(store).get("cus_1").total_revenue == 500.0

    def test_invalid_date_adds_revenue_but_not_acquisition(self, make_txn):
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 40.0, None),
            make_txn("cus_1", 60.0, datetime(2024, 5, 1)),
        ])

        profile = build_customer_profiles(store).get("cus_1")

        assert profile.first_transaction_date == datetime(2024, 5, 1)
        assert profile.total_revenue == 100.0

    def test_customer_with_only_invalid_dates(self, make_txn):
        store = TransactionStore.from_transactions([make_txn("cus_1", 40.0, None)])

        profiles = build_customer_profiles(store)

        assert "cus_1" in profiles
        assert profiles.get("cus_1").first_transaction_date is None
        assert profiles.frame["first_transaction_date"].null_count() == 1

    def test_email_taken_from_first_transaction(self, make_txn):
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 1.0, datetime(2024, 2, 1), customer_email="first@example.com"),
            make_txn("cus_1", 1.0, datetime(2024, 1, 1), customer_email="second@example.com"),
        ])

        assert build_customer_profiles(store).get("cus_1").email == "first@example.com"

    def test_rebuild_is_identical(self, make_txn):
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 10.0, datetime(2024, 2, 1)),
            make_txn("cus_2", 20.0, None),
        ])

        first = build_customer_profiles(store)
        second = build_customer_profiles(store)

        assert first.customers == second.customers
        assert first.frame.equals(second.frame)
