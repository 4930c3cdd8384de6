#!/usr/bin/env python3
"""Seed the default subscription plans. Safe to re-run."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from cineverse.core.logging import get_logger
from cineverse.db.session import session_scope
from cineverse.services.subscriptions import DEFAULT_PLANS, seed_payment_plans

logger = get_logger(__name__)


def main() -> None:
    print("Seeding subscription plans...")
    try:
        with session_scope() as db:
            created = seed_payment_plans(db)
    except Exception as e:
        logger.error(f"Error seeding plans: {e}", exc_info=True)
        print(f"\n✗ Error seeding plans: {e}")
        sys.exit(1)

    for plan in DEFAULT_PLANS:
        if plan["name"] in created:
            print(f"  ✓ Created plan: {plan['name']}")
        else:
            print(f"  - Plan already exists: {plan['name']}")
    print("Done!")


if __name__ == "__main__":
    main()
