"""
Metrics Processor

Processing boundary of the engine: export text in, ProcessedMetrics out.

Pipeline:
1. Parse the export
2. Normalize rows into transactions
3. Build the transaction store and customer profiles
4. Run the waterfall, retention, cohort and time-series calculators
5. Attach data-quality diagnostics

The reference instant is always passed in; nothing here reads the clock
to decide which periods to report.
"""

import asyncio
import time
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union

import structlog

from arr_analytics.config import get_settings
from arr_analytics.ingestion import load_export_text, read_export
from arr_analytics.quality import create_transactions_validator
from arr_analytics.store import CustomerProfiles, TransactionStore, build_customer_profiles
from arr_analytics.transformation import NormalizationResult, TransactionNormalizer
from .cohorts import analyze_cohorts
from .models import (
    ParseIssueInfo,
    ProcessedMetrics,
    ProcessingDiagnostics,
    ProcessingReport,
    SkippedRowInfo,
)
from .periods import as_reference_datetime
from .queries import RevenueQueries
from .retention import calculate_grr, calculate_nrr
from .timeseries import logos_vs_acv_series, net_new_arr_series
from .waterfall import annual_waterfall

logger = structlog.get_logger(__name__)


class ProcessingError(Exception):
    """A run failed as a whole; no partial metrics are available"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class MetricsProcessor:
    """
    Runs the full metrics pipeline for one export at a time.

    The processor holds only configuration; every run builds its own
    transaction store and customer profiles.

    Example:
        processor = MetricsProcessor(cents_threshold=1_000)
        report = processor.process_text(csv_text, now=datetime(2024, 6, 30))
        report.metrics.arr.total
    """

    def __init__(
        self,
        cents_threshold: Optional[float] = None,
        cohort_years: Optional[int] = None,
        trailing_months: Optional[int] = None,
        precision: Optional[int] = None,
        delimiter: Optional[str] = None,
    ):
        settings = get_settings().metrics
        self.cohort_years = cohort_years or settings.cohort_years
        self.trailing_months = trailing_months or settings.trailing_months
        self.precision = precision if precision is not None else settings.amount_precision
        self.delimiter = delimiter
        self.normalizer = TransactionNormalizer(cents_threshold=cents_threshold)

    def compute_metrics(
        self,
        store: TransactionStore,
        customers: CustomerProfiles,
        now: Union[date, datetime],
    ) -> ProcessedMetrics:
        """
        Compute every metric from an already built store.

        Args:
            store: Normalized transactions of the run
            customers: Profiles built from the same store
            now: Reference instant for all period calculations

        Returns:
            ProcessedMetrics
        """
        reference = as_reference_datetime(now)
        queries = RevenueQueries(store, customers, precision=self.precision)

        return ProcessedMetrics(
            arr=annual_waterfall(queries, reference),
            nrr=calculate_nrr(queries, reference),
            grr=calculate_grr(queries, reference),
            cohorts=analyze_cohorts(queries, reference, years=self.cohort_years),
            net_new_arr_chart=net_new_arr_series(queries, reference, months=self.trailing_months),
            logos_vs_acv=logos_vs_acv_series(queries, reference, months=self.trailing_months),
            reference_date=reference,
        )

    def _diagnostics(
        self,
        export_issues,
        normalized: NormalizationResult,
        store: TransactionStore,
        customers: CustomerProfiles,
    ) -> ProcessingDiagnostics:
        quality = create_transactions_validator().validate(store.frame)
        return ProcessingDiagnostics(
            rows_read=normalized.rows_read,
            transactions=len(store),
            customers=len(customers),
            skipped_rows=[
                SkippedRowInfo(row=s.row, reason=s.reason.value) for s in normalized.skipped
            ],
            parse_errors=[
                ParseIssueInfo(row=issue.row, message=issue.message) for issue in export_issues
            ],
            invalid_dates=normalized.invalid_dates,
            unparseable_amounts=normalized.unparseable_amounts,
            cents_converted=normalized.cents_converted,
            currencies=store.currencies(),
            unmapped_headers=normalized.unmapped_headers,
            quality_status=quality.status.value,
            failed_checks=quality.failed_check_names,
        )

    def process_text(self, text: str, now: Union[date, datetime]) -> ProcessingReport:
        """
        Process a complete export.

        Args:
            text: Export content with a header row
            now: Reference instant for all period calculations

        Returns:
            ProcessingReport with metrics and diagnostics

        Raises:
            ProcessingError: If the run cannot complete
        """
        started = time.perf_counter()

        try:
            reference = as_reference_datetime(now)
            export = read_export(text, delimiter=self.delimiter)
            normalized = self.normalizer.normalize(export)
            store = TransactionStore.from_transactions(normalized.transactions)
            customers = build_customer_profiles(store)
            metrics = self.compute_metrics(store, customers, reference)
            diagnostics = self._diagnostics(export.issues, normalized, store, customers)
        except Exception as e:
            logger.error("Metrics processing failed", error=str(e), error_type=type(e).__name__)
            raise ProcessingError(f"Could not process export: {e}") from e

        logger.info(
            "Metrics processing complete",
            reference_date=reference.isoformat(),
            transactions=diagnostics.transactions,
            customers=diagnostics.customers,
            skipped_rows=len(diagnostics.skipped_rows),
            arr_total=metrics.arr.total,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return ProcessingReport(metrics=metrics, diagnostics=diagnostics)

    async def process_file(
        self,
        source: Union[str, Path, bytes],
        now: Union[date, datetime],
    ) -> ProcessingReport:
        """
        Read an export file (or uploaded bytes) and process it.

        The pipeline runs in a worker thread so the event loop stays free
        while metrics are computed.

        Raises:
            ProcessingError: If the file cannot be read or processed
        """
        try:
            text = await load_export_text(source)
        except (OSError, UnicodeError) as e:
            logger.error("Export read failed", error=str(e))
            raise ProcessingError(f"Could not read export: {e}") from e

        return await asyncio.to_thread(self.process_text, text, now)


def process_export(
    text: str,
    now: Union[date, datetime],
    **options,
) -> ProcessingReport:
    """Convenience function to process export text; options go to MetricsProcessor"""
    return MetricsProcessor(**options).process_text(text, now)
