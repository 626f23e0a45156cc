"""
Transaction Normalizer

Turns raw export rows into canonical transactions:
- Header synonym mapping
- Currency unit normalization (cents vs. whole units)
- Timestamp parsing across common export formats
- Transaction type inference
- Recorded (not raised) skipping of rows without identifiers
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import structlog

from arr_analytics.config import get_settings
from arr_analytics.ingestion.reader import RawExport, RawRow
from arr_analytics.store.models import Transaction, TransactionType
from .schema import build_header_map, remap_row, unmapped_headers

logger = structlog.get_logger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9.+\-]")

# Explicit minor-unit fields, in order of preference
CENTS_FIELDS = ("net_cents", "amount_cents")
# Amount-like fields subject to the magnitude heuristic, in order of preference
AMOUNT_FIELDS = ("amount", "net", "gross")
# Stripe plan prices, always minor units; used only when no charged amount exists
PLAN_CENTS_FIELDS = ("plan_amount",)

EXPLICIT_TYPES: Dict[str, TransactionType] = {
    "subscription": TransactionType.SUBSCRIPTION,
    "recurring": TransactionType.SUBSCRIPTION,
    "one_time": TransactionType.ONE_TIME,
    "one-time": TransactionType.ONE_TIME,
    "one time": TransactionType.ONE_TIME,
    "onetime": TransactionType.ONE_TIME,
    "refund": TransactionType.REFUND,
}

DATE_FORMATS = [
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%b %d, %Y",
    "%d %b %Y",
]


class SkipReason(str, Enum):
    """Why a row was dropped during normalization"""
    MISSING_ID = "missing_id"
    MISSING_CUSTOMER_ID = "missing_customer_id"
    MISSING_ID_AND_CUSTOMER_ID = "missing_id_and_customer_id"


@dataclass(frozen=True)
class SkippedRow:
    """A dropped row and the reason it was dropped"""
    row: int
    reason: SkipReason


@dataclass
class NormalizationResult:
    """Output of a normalization pass"""
    transactions: List[Transaction] = field(default_factory=list)
    skipped: List[SkippedRow] = field(default_factory=list)
    invalid_dates: int = 0
    unparseable_amounts: int = 0
    cents_converted: int = 0
    unmapped_headers: List[str] = field(default_factory=list)

    @property
    def rows_read(self) -> int:
        return len(self.transactions) + len(self.skipped)


def parse_amount(value: Any) -> Optional[float]:
    """
    Parse a money cell, ignoring symbols and thousands separators.

    "$1,234.56" parses as 1234.56. Returns None for empty or unparseable
    values.
    """
    if value is None:
        return None
    cleaned = _NON_NUMERIC.sub("", str(value).strip())
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an export timestamp into a naive UTC datetime.

    Accepts ISO-8601 (with or without offset), Unix epoch seconds or
    milliseconds, and a handful of common spreadsheet formats.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None

        if text.isdigit() and len(text) == 8:
            try:
                return datetime.strptime(text, "%Y%m%d")
            except ValueError:
                return None
        if text.isdigit():
            seconds = int(text) / 1000 if len(text) >= 12 else int(text)
            try:
                return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
            except (OverflowError, OSError, ValueError):
                return None

        parsed = None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            for fmt in DATE_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
        if parsed is None:
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def infer_transaction_type(
    status: str,
    amount: float,
    subscription_id: Optional[str],
    interval: Optional[str],
    product_name: Optional[str],
) -> TransactionType:
    """Infer the type of a transaction that has no explicit type column"""
    if "refund" in (status or "").lower() or amount < 0:
        return TransactionType.REFUND
    if subscription_id or interval or "subscription" in (product_name or "").lower():
        return TransactionType.SUBSCRIPTION
    return TransactionType.ONE_TIME


class TransactionNormalizer:
    """
    Normalizes raw export rows into canonical transactions.

    Example:
        normalizer = TransactionNormalizer(cents_threshold=100_000)
        result = normalizer.normalize(read_export(text))
    """

    def __init__(
        self,
        cents_threshold: Optional[float] = None,
        default_currency: Optional[str] = None,
    ):
        settings = get_settings()
        self.cents_threshold = (
            cents_threshold if cents_threshold is not None else settings.metrics.cents_threshold
        )
        if self.cents_threshold <= 0:
            raise ValueError("cents_threshold must be positive")
        self.default_currency = (default_currency or settings.metrics.default_currency).lower()

    def resolve_amount(self, row: Mapping[str, str]) -> Tuple[float, bool, bool]:
        """
        Resolve a row's amount in major units.

        Returns:
            (amount, converted_from_cents, parsed)
        """
        for key in CENTS_FIELDS:
            raw = row.get(key, "")
            if raw:
                value = parse_amount(raw)
                if value is None:
                    return 0.0, False, False
                return value / 100, True, True

        for key in AMOUNT_FIELDS:
            raw = row.get(key, "")
            if raw:
                value = parse_amount(raw)
                if value is None:
                    return 0.0, False, False
                # Heuristic: large bare values are assumed to be minor units
                if abs(value) > self.cents_threshold:
                    return value / 100, True, True
                return value, False, True

        for key in PLAN_CENTS_FIELDS:
            raw = row.get(key, "")
            if raw:
                value = parse_amount(raw)
                if value is None:
                    return 0.0, False, False
                return value / 100, True, True

        return 0.0, False, False

    def resolve_type(self, row: Mapping[str, str], amount: float) -> TransactionType:
        explicit = EXPLICIT_TYPES.get(row.get("type", "").strip().lower())
        if explicit is not None:
            return explicit
        return infer_transaction_type(
            status=row.get("status", ""),
            amount=amount,
            subscription_id=row.get("subscription_id"),
            interval=row.get("interval"),
            product_name=row.get("product_name"),
        )

    def _normalize_row(
        self,
        row_number: int,
        row: Dict[str, str],
        result: NormalizationResult,
    ) -> None:
        txn_id = row.get("id") or row.get("invoice_id", "")
        customer_id = row.get("customer_id") or row.get("customer_email", "")

        if not txn_id or not customer_id:
            if not txn_id and not customer_id:
                reason = SkipReason.MISSING_ID_AND_CUSTOMER_ID
            elif not txn_id:
                reason = SkipReason.MISSING_ID
            else:
                reason = SkipReason.MISSING_CUSTOMER_ID
            result.skipped.append(SkippedRow(row=row_number, reason=reason))
            return

        amount, converted, parsed = self.resolve_amount(row)
        if converted:
            result.cents_converted += 1
        if not parsed:
            result.unparseable_amounts += 1

        created = parse_timestamp(row.get("created"))
        if created is None:
            result.invalid_dates += 1

        result.transactions.append(Transaction(
            id=txn_id,
            customer_id=customer_id,
            customer_email=row.get("customer_email", ""),
            amount=amount,
            currency=(row.get("currency") or self.default_currency).lower(),
            status=row.get("status", ""),
            created=created,
            subscription_id=row.get("subscription_id") or None,
            invoice_id=row.get("invoice_id") or None,
            product_name=row.get("product_name") or None,
            plan_name=row.get("plan_name") or None,
            interval=row.get("interval") or None,
            type=self.resolve_type(row, amount),
        ))

    def normalize_rows(
        self,
        rows: Iterable[Union[RawRow, Mapping[str, Any]]],
        headers: List[str],
    ) -> NormalizationResult:
        """
        Normalize raw rows.

        Args:
            rows: RawRow records, or plain header-keyed mappings (numbered
                from 2, the header being row 1)
            headers: Original export headers

        Returns:
            NormalizationResult with transactions and skipped rows
        """
        header_map = build_header_map(headers)
        result = NormalizationResult(unmapped_headers=unmapped_headers(headers))

        for index, raw in enumerate(rows):
            if isinstance(raw, RawRow):
                row_number, values = raw.row, raw.values
            else:
                row_number, values = index + 2, raw
            self._normalize_row(row_number, remap_row(values, header_map), result)

        if result.skipped:
            logger.info(
                "Rows dropped during normalization",
                skipped=len(result.skipped),
                first_rows=[s.row for s in result.skipped[:5]],
            )
        if result.invalid_dates:
            logger.warning("Transactions with unparseable dates", count=result.invalid_dates)
        if result.unmapped_headers:
            logger.debug("Unmapped export headers", headers=result.unmapped_headers)

        logger.info(
            "Normalization complete",
            transactions=len(result.transactions),
            skipped=len(result.skipped),
            cents_converted=result.cents_converted,
        )
        return result

    def normalize(self, export: RawExport) -> NormalizationResult:
        """Normalize a parsed export"""
        return self.normalize_rows(export.rows, export.headers)
