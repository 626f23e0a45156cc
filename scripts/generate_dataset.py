"""
Billing Export Dataset Generator

Writes a synthetic Stripe-style charges export for local testing:

    python scripts/generate_dataset.py --customers 500 --months 36 --cents
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from arr_analytics.config.logging import configure_logging
from arr_analytics.data import BillingExportGenerator

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "generated"


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic billing export")
    parser.add_argument("--customers", type=int, default=500, help="Number of customers")
    parser.add_argument("--months", type=int, default=36, help="Months of history")
    parser.add_argument("--start", type=str, default="2022-01-01", help="First month (YYYY-MM-DD)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--cents", action="store_true", help="Encode amounts in cents")
    parser.add_argument("--output", type=Path, default=OUTPUT_DIR / "charges.csv", help="Output CSV path")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Log level for generator events")
    args = parser.parse_args()

    configure_logging(args.log_level, log_format="text", stream=sys.stderr)

    generator = BillingExportGenerator(seed=args.seed)
    csv_text = generator.generate_csv(
        customers=args.customers,
        start=datetime.fromisoformat(args.start),
        months=args.months,
        amount_in_cents=args.cents,
    )

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(csv_text, encoding="utf-8")
    print(f"✅ {args.output}: {csv_text.count(chr(10)) - 1:,} charges")


if __name__ == "__main__":
    main()
