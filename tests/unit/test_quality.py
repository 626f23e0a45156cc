"""
Unit Tests - Data Quality
"""
from datetime import datetime

import polars as pl

from arr_analytics.quality import (
    TransactionValidator,
    ValidationSeverity,
    ValidationStatus,
    create_transactions_validator,
)
from arr_analytics.store import TransactionStore, TransactionType


class TestTransactionValidator:
    """Tests for TransactionValidator"""

    def test_not_null_check_passes(self):
        """Test not null check with valid data"""
        df = pl.DataFrame({"id": ["a", "b", "c"]})

        result = TransactionValidator().add_not_null_check("id").validate(df)

        assert result.status == ValidationStatus.PASSED
        assert result.passed_checks == 1

    def test_not_null_check_fails(self):
        """Test not null check with null values"""
        df = pl.DataFrame({"id": ["a", None, "c"]})

        result = TransactionValidator().add_not_null_check("id").validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.failed_checks == 1
        assert result.checks[0].failed_rows == 1

    def test_unique_check_fails(self):
        """Test unique check with duplicates"""
        df = pl.DataFrame({"id": ["a", "a", "b"]})

        result = TransactionValidator().add_unique_check("id").validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].details["duplicate_count"] == 1

    def test_enum_check(self):
        df = pl.DataFrame({"type": ["subscription", "refund", "bogus"]})

        result = TransactionValidator().add_enum_check("type", ["subscription", "refund"]).validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_single_value_check(self):
        df = pl.DataFrame({"currency": ["usd", "eur", None]})

        result = TransactionValidator().add_single_value_check("currency").validate(df)

        assert result.status == ValidationStatus.PARTIAL
        assert result.checks[0].details["values"] == ["eur", "usd"]

    def test_missing_column_fails(self):
        df = pl.DataFrame({"id": ["a"]})

        result = TransactionValidator().add_not_null_check("created").validate(df)

        assert not result.checks[0].passed
        assert "not found" in result.checks[0].message

    def test_warning_severity_gives_partial(self):
        """Test warnings do not fail the suite"""
        df = pl.DataFrame({"id": ["a", None]})

        result = (
            TransactionValidator()
            .add_not_null_check("id", severity=ValidationSeverity.WARNING)
            .validate(df)
        )

        assert result.status == ValidationStatus.PARTIAL
        assert result.warning_count == 1
        assert result.failed_check_names == ["not_null_id"]

    def test_custom_check(self):
        df = pl.DataFrame({"amount": [1.0, -2.0]})

        result = (
            TransactionValidator()
            .add_custom_check(
                name="non_negative",
                check_func=lambda d: (d["amount"] >= 0).all(),
                message_on_fail="Negative amounts found",
            )
            .validate(df)
        )

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].message == "Negative amounts found"


class TestTransactionsValidator:
    """Tests for the default transaction checks"""

    def test_clean_store_passes(self, make_txn):
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 10.0, datetime(2024, 1, 1)),
            make_txn("cus_2", 20.0, datetime(2024, 1, 2)),
        ])

        result = create_transactions_validator().validate(store.frame)

        assert result.status == ValidationStatus.PASSED
        assert result.total_checks == 5

    def test_empty_store_passes(self):
        result = create_transactions_validator().validate(TransactionStore.from_transactions([]).frame)

        assert result.status == ValidationStatus.PASSED

    def test_duplicate_ids_and_no_subscriptions(self, make_txn):
        store = TransactionStore.from_transactions([
            make_txn("cus_1", 10.0, datetime(2024, 1, 1), type=TransactionType.ONE_TIME, id="ch_1"),
            make_txn("cus_1", 10.0, datetime(2024, 1, 1), type=TransactionType.ONE_TIME, id="ch_1"),
        ])

        result = create_transactions_validator().validate(store.frame)

        assert result.status == ValidationStatus.PARTIAL
        assert result.failed_check_names == ["unique_id", "has_subscription_revenue"]
