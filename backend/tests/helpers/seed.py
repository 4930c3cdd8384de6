"""Test seed helpers for creating test data."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from cineverse.core.security import hash_password
from cineverse.models.ads import AdPayment, SponsoredPost
from cineverse.models.post import Post, PostStatus, PostType
from cineverse.models.subscription import SubscriptionInterval, SubscriptionPlan
from cineverse.models.user import User, UserRole


def create_test_user(
    db: Session,
    email: str | None = None,
    password: str = "TestPass123!",
    role: UserRole = UserRole.USER,
    is_active: bool = True,
    **kwargs: Any,
) -> User:
    """
    Create a test user with deterministic defaults.

    Args:
        db: Database session
        email: User email (defaults to role-based email)
        password: Plain password (will be hashed)
        role: User role
        is_active: Whether user is active
        **kwargs: Additional user attributes

    Returns:
        Created User instance
    """
    if email is None:
        email = f"test_{role.value.lower()}_{uuid.uuid4().hex[:8]}@test.example.com"

    user = User(
        id=kwargs.pop("id", uuid.uuid4()),
        email=email.lower().strip(),
        password_hash=hash_password(password),
        role=role.value,
        is_active=is_active,
        name=kwargs.pop("name", f"Test {role.value}"),
        **kwargs,
    )
    db.add(user)
    db.flush()
    return user


def create_test_super_admin(db: Session, email: str | None = None, **kwargs: Any) -> User:
    """Create a test super admin."""
    return create_test_user(db, email=email, role=UserRole.SUPER_ADMIN, **kwargs)


def create_test_user_admin(db: Session, email: str | None = None, **kwargs: Any) -> User:
    """Create a test user admin (moderator)."""
    return create_test_user(db, email=email, role=UserRole.USER_ADMIN, **kwargs)


def create_test_post(
    db: Session,
    author: User,
    title: str = "Test Movie",
    status: PostStatus = PostStatus.PUBLISHED,
    created_at: datetime | None = None,
    **kwargs: Any,
) -> Post:
    post = Post(
        title=title,
        type=kwargs.pop("type", PostType.MOVIE.value),
        status=status.value,
        author_id=author.id,
        **kwargs,
    )
    if created_at is not None:
        post.created_at = created_at
    db.add(post)
    db.flush()
    return post


def create_sponsored_post(
    db: Session, owner: User, title: str = "Test Ad", payment: AdPayment | None = None
) -> SponsoredPost:
    post = SponsoredPost(
        title=title,
        user_id=owner.id,
        payment_id=payment.id if payment else None,
    )
    db.add(post)
    db.flush()
    return post


def create_ad_payment(db: Session, code: str = "AD-TEST0001", **kwargs: Any) -> AdPayment:
    payment = AdPayment(
        code=code,
        amount=kwargs.pop("amount", 1000.0),
        currency=kwargs.pop("currency", "LKR"),
        duration_days=kwargs.pop("duration_days", 30),
        is_used=kwargs.pop("is_used", False),
        **kwargs,
    )
    db.add(payment)
    db.flush()
    return payment


def create_plan(
    db: Session,
    name: str = "Monthly Pro",
    interval: SubscriptionInterval = SubscriptionInterval.MONTHLY,
    price: float = 1200,
    duration_days: int = 30,
) -> SubscriptionPlan:
    plan = SubscriptionPlan(
        name=name,
        price=price,
        currency="LKR",
        interval=interval.value,
        duration_days=duration_days,
        features=[],
    )
    db.add(plan)
    db.flush()
    return plan
