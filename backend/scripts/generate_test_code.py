#!/usr/bin/env python3
"""Generate an unused ad payment code for manual testing."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from cineverse.core.logging import get_logger
from cineverse.db.session import session_scope
from cineverse.services.ad_payments import generate_payment_code

logger = get_logger(__name__)


def main(amount: float, currency: str, duration_days: int, prefix: str) -> None:
    print("Generating code...")
    try:
        with session_scope() as db:
            payment = generate_payment_code(
                db, amount=amount, currency=currency, duration_days=duration_days, prefix=prefix
            )
    except Exception as e:
        logger.error(f"Error generating code: {e}", exc_info=True)
        print(f"\n✗ Error generating code: {e}")
        sys.exit(1)

    print("\n==========================================")
    print(f"CODE GENERATED: {payment.code}")
    print("Use this code in the payment step.")
    print("==========================================\n")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Generate an ad payment code")
    parser.add_argument("--amount", type=float, default=1000.0, help="Amount (default: 1000)")
    parser.add_argument("--currency", type=str, default="LKR", help="Currency (default: LKR)")
    parser.add_argument("--duration-days", type=int, default=30, help="Run length in days (default: 30)")
    parser.add_argument("--prefix", type=str, default="TEST", help="Code prefix (default: TEST)")

    args = parser.parse_args()
    main(args.amount, args.currency, args.duration_days, args.prefix)
