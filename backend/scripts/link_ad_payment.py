#!/usr/bin/env python3
"""Attach a used payment to a sponsored post that has none."""

import sys
from pathlib import Path
from uuid import UUID

sys.path.insert(0, str(Path(__file__).parent.parent))

from cineverse.core.app_exceptions import NotFound
from cineverse.core.logging import get_logger
from cineverse.db.session import SessionLocal
from cineverse.services.ad_payments import link_payment_to_post

logger = get_logger(__name__)


def main(sponsored_post_id: UUID, amount: float, currency: str, duration_days: int) -> None:
    db = SessionLocal()
    try:
        result = link_payment_to_post(
            db, sponsored_post_id, amount=amount, currency=currency, duration_days=duration_days
        )
    except NotFound:
        print(f"✗ Sponsored post {sponsored_post_id} not found")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error linking payment: {e}", exc_info=True)
        print(f"\n✗ Error linking payment: {e}")
        sys.exit(1)
    finally:
        db.close()

    if result.created:
        print(f"✓ Payment {result.payment.code} created and linked ({result.payment.id})")
    else:
        print(f"- Payment already exists: {result.payment.code} ({result.payment.id})")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Link a payment to a sponsored post")
    parser.add_argument("sponsored_post_id", type=UUID, help="Sponsored post id")
    parser.add_argument("--amount", type=float, default=50.00, help="Amount (default: 50.00)")
    parser.add_argument("--currency", type=str, default="USD", help="Currency (default: USD)")
    parser.add_argument("--duration-days", type=int, default=30, help="Run length in days (default: 30)")

    args = parser.parse_args()
    main(args.sponsored_post_id, args.amount, args.currency, args.duration_days)
