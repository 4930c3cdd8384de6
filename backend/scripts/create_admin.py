#!/usr/bin/env python3
"""Script to create a super admin user for development/testing."""

import sys
from pathlib import Path

# Add parent directory to path to import cineverse modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from cineverse.core.logging import get_logger
from cineverse.core.security import hash_password
from cineverse.db.session import SessionLocal
from cineverse.models.user import User, UserRole
from cineverse.services.registration import find_user_by_email

logger = get_logger(__name__)


def create_admin_user(
    email: str = "admin@example.com",
    password: str = "Admin123!",
    name: str = "Admin User",
) -> None:
    """Create a super admin, or promote an existing account to one."""
    email = email.lower().strip()
    db = SessionLocal()
    try:
        existing_user = find_user_by_email(db, email)
        if existing_user:
            if existing_user.role == UserRole.SUPER_ADMIN.value:
                print("\n✓ Super admin already exists!")
                print(f"  Email: {email}")
                print("  Password: (use existing password)")
                return

            existing_user.role = UserRole.SUPER_ADMIN.value
            existing_user.password_hash = hash_password(password)
            existing_user.name = name
            existing_user.is_active = True
            db.commit()
            logger.info("Promoted user to super admin", extra={"user_id": str(existing_user.id)})
            print("\n✓ Updated user to super admin!")
            print(f"  Email: {email}")
            print(f"  Password: {password}")
            return

        admin = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=UserRole.SUPER_ADMIN.value,
            is_active=True,
        )
        db.add(admin)
        db.commit()
        logger.info("Created super admin", extra={"user_id": str(admin.id)})
        print("\n✓ Super admin created successfully!")
        print(f"  Email: {email}")
        print(f"  Password: {password}")
        print(f"  Name: {name}")
        print("\nYou can now sign in with these credentials.")

    except Exception as e:
        db.rollback()
        logger.error(f"Error creating super admin: {e}", exc_info=True)
        print(f"\n✗ Error creating super admin: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create a super admin for development/testing")
    parser.add_argument("--email", type=str, default="admin@example.com", help="Admin email (default: admin@example.com)")
    parser.add_argument("--password", type=str, default="Admin123!", help="Admin password (default: Admin123!)")
    parser.add_argument("--name", type=str, default="Admin User", help="Admin name (default: Admin User)")

    args = parser.parse_args()

    print("Creating super admin...")
    create_admin_user(email=args.email, password=args.password, name=args.name)
