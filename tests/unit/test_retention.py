"""
Unit Tests - Retention and Cohorts
"""
from datetime import datetime

import pytest

from arr_analytics.ingestion import read_export
from arr_analytics.metrics import (
    RevenueQueries,
    analyze_cohorts,
    calculate_grr,
    calculate_nrr,
    measure_cohort,
)
from arr_analytics.store import TransactionStore, TransactionType, build_customer_profiles
from arr_analytics.transformation import TransactionNormalizer


class TestRetention:
    """Tests for NRR and GRR"""

    def test_expansion_caps_gross_retention(self, make_txn, build_queries, now):
        """$100 in the acquisition year, $150 now: NRR 150%, GRR 100%"""
        queries = build_queries([
            make_txn("cus_1", 100.0, datetime(2023, 3, 1)),
            make_txn("cus_1", 150.0, datetime(2024, 3, 1)),
        ])

        assert calculate_nrr(queries, now) == 150.0
        assert calculate_grr(queries, now) == 100.0

    def test_contraction_and_churn(self, make_txn, build_queries, now):
        queries = build_queries([
            make_txn("cus_1", 100.0, datetime(2023, 2, 1)),
            make_txn("cus_1", 50.0, datetime(2024, 2, 1)),
            make_txn("cus_2", 100.0, datetime(2023, 4, 1)),
        ])

        assert calculate_nrr(queries, now) == 25.0
        assert calculate_grr(queries, now) == 25.0

    def test_mixed_cohort(self, make_txn, build_queries, now):
        """Expansion offsets churn in NRR but not in GRR"""
        queries = build_queries([
            make_txn("cus_1", 100.0, datetime(2023, 2, 1)),
            make_txn("cus_1", 300.0, datetime(2024, 2, 1)),
            make_txn("cus_2", 100.0, datetime(2023, 4, 1)),
        ])

        assert calculate_nrr(queries, now) == 150.0
        assert calculate_grr(queries, now) == 50.0

    def test_empty_cohort_is_zero(self, make_txn, build_queries, now):
        queries = build_queries([make_txn("cus_1", 100.0, datetime(2024, 3, 1))])

        assert calculate_nrr(queries, now) == 0.0
        assert calculate_grr(queries, now) == 0.0

    def test_cohort_without_subscription_revenue_is_zero(self, make_txn, build_queries, now):
        queries = build_queries([
            make_txn("cus_1", 900.0, datetime(2023, 3, 1), type=TransactionType.ONE_TIME),
            make_txn("cus_1", 100.0, datetime(2024, 3, 1)),
        ])

        cohort = measure_cohort(queries, 2023, now)

        assert cohort.customers == 1
        assert cohort.starting_revenue == 0.0
        assert cohort.net_retention == 0.0
        assert cohort.gross_retention == 0.0
        assert cohort.logo_retention == 100.0

    def test_later_acquisition_not_in_cohort(self, make_txn, build_queries, now):
        queries = build_queries([
            make_txn("cus_1", 100.0, datetime(2023, 3, 1)),
            make_txn("cus_2", 500.0, datetime(2024, 1, 1)),
        ])

        cohort = measure_cohort(queries, 2023, now)

        assert cohort.customers == 1
        assert cohort.current_revenue == 0.0


class TestRetentionBounds:
    """GRR never exceeds NRR or 100%"""

    @pytest.fixture
    def queries(self, generated_export_text):
        result = TransactionNormalizer().normalize(read_export(generated_export_text))
        store = TransactionStore.from_transactions(result.transactions)
        return RevenueQueries(store, build_customer_profiles(store))

    @pytest.mark.parametrize("cohort_year", [2021, 2022, 2023])
    def test_gross_at_most_net(self, queries, cohort_year, now):
        cohort = measure_cohort(queries, cohort_year, now)

        assert cohort.starting_revenue > 0
        assert cohort.gross_retention <= cohort.net_retention + 1e-9
        assert 0.0 <= cohort.gross_retention <= 100.0 + 1e-9


class TestCohortAnalysis:
    """Tests for analyze_cohorts"""

    def test_five_cohorts_most_recent_first(self, build_queries, now):
        rows = analyze_cohorts(build_queries([]), now)

        assert [row.cohort for row in rows] == ["2024", "2023", "2022", "2021", "2020"]
        assert all(row.customers == 0 and row.retention == 0.0 for row in rows)

    def test_retention_and_expansion(self, make_txn, build_queries, now):
        queries = build_queries([
            make_txn("cus_1", 100.0, datetime(2023, 3, 1)),
            make_txn("cus_1", 150.0, datetime(2024, 3, 1)),
        ])

        row = next(r for r in analyze_cohorts(queries, now) if r.cohort == "2023")

        assert row.customers == 1
        assert row.starting_revenue == 100.0
        assert row.current_revenue == 150.0
        assert row.retention == 100.0
        assert row.expansion == 150.0

    def test_logo_retention(self, make_txn, build_queries, now):
        queries = build_queries([
            make_txn("cus_1", 100.0, datetime(2022, 3, 1)),
            make_txn("cus_1", 100.0, datetime(2024, 3, 1)),
            make_txn("cus_2", 100.0, datetime(2022, 5, 1)),
            make_txn("cus_3", 100.0, datetime(2022, 7, 1)),
            make_txn("cus_4", 100.0, datetime(2022, 9, 1)),
        ])

        row = next(r for r in analyze_cohorts(queries, now) if r.cohort == "2022")

        assert row.customers == 4
        assert row.retention == 25.0
        assert row.expansion == 25.0

    def test_current_year_cohort(self, make_txn, build_queries, now):
        """This year's cohort compares the year with itself"""
        queries = build_queries([make_txn("cus_1", 70.0, datetime(2024, 2, 1))])

        row = analyze_cohorts(queries, now)[0]

        assert row.cohort == "2024"
        assert row.retention == 100.0
        assert row.expansion == 100.0

    def test_custom_window(self, build_queries, now):
        assert len(analyze_cohorts(build_queries([]), now, years=3)) == 3

    def test_serializes_with_camel_case_keys(self, build_queries, now):
        payload = analyze_cohorts(build_queries([]), now)[0].model_dump(by_alias=True)

        assert set(payload) == {
            "cohort", "customers", "startingRevenue", "currentRevenue", "retention", "expansion",
        }
