"""
Synthetic Billing Export Generator

Generates Stripe-style charge exports for testing and development:
- Monthly subscription charges with plan upgrades, downgrades and churn
- Occasional one-time charges and refunds
- Optional minor-unit (cents) amount encoding
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

import numpy as np
import polars as pl
from faker import Faker

from arr_analytics.metrics.periods import Period


# =============================================================================
# CONFIGURATION
# =============================================================================

PLANS = [
    ("Starter", 29.0),
    ("Growth", 99.0),
    ("Business", 299.0),
    ("Enterprise", 999.0),
]

ADDONS = ["Onboarding package", "Data migration", "Training session"]

EXPORT_HEADERS = [
    "id",
    "Customer ID",
    "Customer Email",
    "Amount",
    "Currency",
    "Status",
    "Created (UTC)",
    "Subscription",
    "Description",
    "Interval",
]


# =============================================================================
# GENERATORS
# =============================================================================

class BillingExportGenerator:
    """
    Generate a reproducible billing export.

    Example:
        generator = BillingExportGenerator(seed=7)
        csv_text = generator.generate_csv(customers=50, start=datetime(2022, 1, 1), months=30)
    """

    def __init__(
        self,
        seed: int = 42,
        churn_rate: float = 0.04,
        upgrade_rate: float = 0.03,
        downgrade_rate: float = 0.02,
        one_time_rate: float = 0.05,
        refund_rate: float = 0.01,
    ):
        self.seed = seed
        self.churn_rate = churn_rate
        self.upgrade_rate = upgrade_rate
        self.downgrade_rate = downgrade_rate
        self.one_time_rate = one_time_rate
        self.refund_rate = refund_rate

    def generate(
        self,
        customers: int = 100,
        start: Optional[datetime] = None,
        months: int = 24,
    ) -> pl.DataFrame:
        """
        Generate charges for `customers` signing up over `months` months.

        Returns:
            DataFrame with one row per charge, amounts in major units
        """
        rng = np.random.default_rng(self.seed)
        fake = Faker()
        fake.seed_instance(self.seed)
        start = start or datetime(2022, 1, 1)
        first_month = Period.month_of(start)

        rows: List[Dict] = []
        charge_number = 0

        for index in range(customers):
            customer_id = f"cus_{index:06d}"
            email = fake.unique.email()
            subscription_id = f"sub_{index:06d}"
            plan = int(rng.integers(0, len(PLANS)))
            signup = int(rng.integers(0, months))

            for offset in range(signup, months):
                period = first_month.shift(offset)
                day = int(rng.integers(1, 28))
                created = period.start + timedelta(days=day - 1, hours=int(rng.integers(0, 24)))
                name, price = PLANS[plan]

                charge_number += 1
                rows.append({
                    "id": f"ch_{charge_number:08d}",
                    "Customer ID": customer_id,
                    "Customer Email": email,
                    "Amount": price,
                    "Currency": "usd",
                    "Status": "Paid",
                    "Created (UTC)": created.strftime("%Y-%m-%d %H:%M:%S"),
                    "Subscription": subscription_id,
                    "Description": f"{name} subscription",
                    "Interval": "month",
                })

                if rng.random() < self.one_time_rate:
                    charge_number += 1
                    rows.append({
                        "id": f"ch_{charge_number:08d}",
                        "Customer ID": customer_id,
                        "Customer Email": email,
                        "Amount": float(rng.choice([250.0, 500.0, 1500.0])),
                        "Currency": "usd",
                        "Status": "Paid",
                        "Created (UTC)": (created + timedelta(hours=1)).strftime("%Y-%m-%d %H:%M:%S"),
                        "Subscription": "",
                        "Description": str(rng.choice(ADDONS)),
                        "Interval": "",
                    })

                if rng.random() < self.refund_rate:
                    charge_number += 1
                    rows.append({
                        "id": f"ch_{charge_number:08d}",
                        "Customer ID": customer_id,
                        "Customer Email": email,
                        "Amount": -price,
                        "Currency": "usd",
                        "Status": "Refunded",
                        "Created (UTC)": (created + timedelta(days=1)).strftime("%Y-%m-%d %H:%M:%S"),
                        "Subscription": subscription_id,
                        "Description": f"{name} subscription",
                        "Interval": "month",
                    })

                roll = rng.random()
                if roll < self.churn_rate:
                    break
                if roll < self.churn_rate + self.upgrade_rate:
                    plan = min(plan + 1, len(PLANS) - 1)
                elif roll < self.churn_rate + self.upgrade_rate + self.downgrade_rate:
                    plan = max(plan - 1, 0)

        return pl.DataFrame(rows, schema={
            "id": pl.Utf8,
            "Customer ID": pl.Utf8,
            "Customer Email": pl.Utf8,
            "Amount": pl.Float64,
            "Currency": pl.Utf8,
            "Status": pl.Utf8,
            "Created (UTC)": pl.Utf8,
            "Subscription": pl.Utf8,
            "Description": pl.Utf8,
            "Interval": pl.Utf8,
        })

    def generate_csv(
        self,
        customers: int = 100,
        start: Optional[datetime] = None,
        months: int = 24,
        amount_in_cents: bool = False,
    ) -> str:
        """
        Generate the export as CSV text.

        With amount_in_cents, the Amount column is replaced by an integer
        amount_cents column.
        """
        df = self.generate(customers=customers, start=start, months=months)
        if amount_in_cents:
            df = df.with_columns(
                (pl.col("Amount") * 100).round(0).cast(pl.Int64).alias("amount_cents")
            ).drop("Amount")
        return df.write_csv()
