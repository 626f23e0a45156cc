"""
Transaction Store

Immutable set of normalized transactions for one processing run, held both
as records and as a Polars frame for the vectorized revenue queries.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Tuple

import polars as pl
import structlog

from .models import Transaction, TransactionType

logger = structlog.get_logger(__name__)

TRANSACTION_SCHEMA: Dict[str, pl.DataType] = {
    "id": pl.Utf8,
    "customer_id": pl.Utf8,
    "customer_email": pl.Utf8,
    "amount": pl.Float64,
    "currency": pl.Utf8,
    "status": pl.Utf8,
    "created": pl.Datetime("us"),
    "type": pl.Utf8,
    "subscription_id": pl.Utf8,
    "invoice_id": pl.Utf8,
    "product_name": pl.Utf8,
    "plan_name": pl.Utf8,
    "interval": pl.Utf8,
}


@dataclass(frozen=True)
class TransactionStore:
    """
    Normalized transactions of a single run.

    Example:
        store = TransactionStore.from_transactions(result.transactions)
        subscriptions = store.subscriptions()
    """
    transactions: Tuple[Transaction, ...] = ()
    frame: pl.DataFrame = field(
        default_factory=lambda: pl.DataFrame(schema=TRANSACTION_SCHEMA),
        compare=False,
        repr=False,
    )

    @classmethod
    def from_transactions(cls, transactions: Iterable[Transaction]) -> "TransactionStore":
        """Build the store and its frame from normalized transactions"""
        records = tuple(transactions)
        columns: Dict[str, List] = {name: [] for name in TRANSACTION_SCHEMA}

        for txn in records:
            for name in TRANSACTION_SCHEMA:
                value = getattr(txn, name)
                if name == "type":
                    value = TransactionType(value).value
                columns[name].append(value)

        frame = pl.DataFrame(columns, schema=TRANSACTION_SCHEMA)
        logger.debug("Transaction store built", transactions=len(records))
        return cls(transactions=records, frame=frame)

    def __len__(self) -> int:
        return len(self.transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self.transactions)

    def subscriptions(self) -> pl.DataFrame:
        """Subscription transactions with a usable date, the basis of all ARR math"""
        return self.frame.filter(
            (pl.col("type") == TransactionType.SUBSCRIPTION.value)
            & pl.col("created").is_not_null()
        )

    def currencies(self) -> List[str]:
        """Distinct currencies present, sorted"""
        return sorted(self.frame["currency"].drop_nulls().unique().to_list())

    def invalid_date_count(self) -> int:
        return self.frame["created"].null_count()
