"""Subscription plans, access keys and premium grants."""

import calendar
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cineverse.common.timeutils import as_utc, utcnow
from cineverse.core.app_exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from cineverse.core.logging import get_logger
from cineverse.models.subscription import (
    AccessKey,
    AccessKeyType,
    PaymentMethod,
    PaymentRecord,
    PaymentStatus,
    PaymentType,
    SubscriptionInterval,
    SubscriptionPlan,
    SubscriptionStatus,
    UserSubscription,
)
from cineverse.models.user import AccountType, User

logger = get_logger(__name__)

DEFAULT_PLANS: list[dict[str, Any]] = [
    {
        "name": "Weekly Pass",
        "description": "Get full access for one week. Perfect for trying out.",
        "price": 400,
        "currency": "LKR",
        "interval": SubscriptionInterval.WEEKLY.value,
        "duration_days": 7,
        "discount_percent": 0,
        "features": ["Ad-free experience", "High Quality Downloads", "Exclusive Content"],
    },
    {
        "name": "Monthly Pro",
        "description": "Most popular choice. Full access for a month.",
        "price": 1200,
        "currency": "LKR",
        "interval": SubscriptionInterval.MONTHLY.value,
        "duration_days": 30,
        "discount_percent": 10,
        "features": [
            "Ad-free experience",
            "High Quality Downloads",
            "Exclusive Content",
            "Priority Support",
        ],
    },
    {
        "name": "Annual Elite",
        "description": "Best value. Stay premium all year round.",
        "price": 10000,
        "currency": "LKR",
        "interval": SubscriptionInterval.YEARLY.value,
        "duration_days": 365,
        "discount_percent": 30,
        "features": [
            "Ad-free experience",
            "High Quality Downloads",
            "Exclusive Content",
            "Priority Support",
            "Early Access",
        ],
    },
]


@dataclass
class GrantResult:
    payment: PaymentRecord
    subscription: UserSubscription


@dataclass
class RedeemResult:
    type: str
    payment: PaymentRecord
    subscription: UserSubscription | None = None


def _add_months(start: datetime, months: int) -> datetime:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def calculate_end_date(start: datetime, interval: str, duration_days: int | None) -> datetime:
    """Compute when a subscription starting at ``start`` ends.

    Month and year steps are calendar based; the day is clamped to the end of
    the target month (Jan 31 + 1 month = Feb 28/29).
    """
    if interval == SubscriptionInterval.WEEKLY.value:
        return start + timedelta(days=duration_days or 7)
    if interval == SubscriptionInterval.MONTHLY.value:
        return _add_months(start, 1)
    if interval == SubscriptionInterval.YEARLY.value:
        return _add_months(start, 12)
    if interval == SubscriptionInterval.LIFETIME.value:
        return _add_months(start, 1200)
    return start + timedelta(days=duration_days or 0)


def get_active_subscription(db: Session, user_id: UUID) -> UserSubscription | None:
    """Latest-ending active subscription that has not yet run out."""
    now = utcnow()
    candidates = (
        db.query(UserSubscription)
        .filter(
            UserSubscription.user_id == user_id,
            UserSubscription.status == SubscriptionStatus.ACTIVE.value,
        )
        .order_by(UserSubscription.end_date.desc())
        .all()
    )
    for subscription in candidates:
        if as_utc(subscription.end_date) > now:
            return subscription
    return None


def _stage_subscription(
    db: Session,
    user: User,
    plan: SubscriptionPlan,
    amount: float,
    method: str,
    currency: str | None = None,
    access_key_id: UUID | None = None,
    reference_id: str | None = None,
    gateway_name: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> GrantResult:
    # Adds rows to the session without committing
    now = utcnow()
    current = get_active_subscription(db, user.id)
    start_date = as_utc(current.end_date) if current is not None else now
    end_date = calculate_end_date(start_date, plan.interval, plan.duration_days)

    payment = PaymentRecord(
        user_id=user.id,
        amount=amount,
        currency=currency or plan.currency or "LKR",
        method=method,
        status=PaymentStatus.COMPLETED.value,
        type=PaymentType.SUBSCRIPTION.value,
        access_key_id=access_key_id,
        gateway_ref_id=reference_id,
        gateway_name=gateway_name,
        details=metadata or {},
    )
    db.add(payment)
    db.flush()

    subscription = UserSubscription(
        user_id=user.id,
        plan_id=plan.id,
        status=SubscriptionStatus.ACTIVE.value,
        start_date=start_date,
        end_date=end_date,
        payment_id=payment.id,
        auto_renew=False,
    )
    db.add(subscription)

    user.account_type = AccountType.PREMIUM.value
    user.subscription_end_date = end_date
    return GrantResult(payment=payment, subscription=subscription)


def grant_subscription(
    db: Session,
    user_id: UUID,
    plan_id: UUID,
    amount: float,
    method: str = PaymentMethod.MANUAL_KEY.value,
    currency: str | None = None,
    reference_id: str | None = None,
    gateway_name: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> GrantResult:
    """Grant a plan to a user, stacking after any subscription still running.

    The payment record, the subscription and the user's premium flag are
    written in one transaction.
    """
    plan = db.get(SubscriptionPlan, plan_id)
    if plan is None:
        raise NotFound("Subscription plan")
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User")

    try:
        result = _stage_subscription(
            db,
            user,
            plan,
            amount=amount,
            method=method,
            currency=currency,
            reference_id=reference_id,
            gateway_name=gateway_name,
            metadata=metadata,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Subscription granted",
        extra={"user_id": str(user.id), "plan": plan.name, "end_date": str(result.subscription.end_date)},
    )
    return result


def redeem_access_key(db: Session, user: User, code: str) -> RedeemResult:
    """Redeem a one-time access key for the calling user."""
    key = db.query(AccessKey).filter(AccessKey.code == code.strip()).first()
    if key is None:
        raise NotFound("Access code")
    if key.is_used:
        raise Conflict("This code has already been used")
    if key.expires_at is not None and as_utc(key.expires_at) <= utcnow():
        raise ValidationFailed("This code has expired")
    if key.assigned_to_user_id is not None and key.assigned_to_user_id != user.id:
        raise Forbidden("This code is reserved for another user")

    try:
        # Claim the key first; a concurrent redemption that got there earlier leaves no row to update
        claimed = db.execute(
            update(AccessKey)
            .where(AccessKey.id == key.id, AccessKey.is_used.is_(False))
            .values(is_used=True, used_at=utcnow(), used_by_user_id=user.id)
            .execution_options(synchronize_session=False)
        ).rowcount
        if claimed == 0:
            raise Conflict("This code has already been used")

        if key.type == AccessKeyType.SUBSCRIPTION.value:
            if key.plan is None:
                raise ValidationFailed("Access key has no plan assigned")
            grant = _stage_subscription(
                db,
                user,
                key.plan,
                amount=key.plan.price or 0,
                method=PaymentMethod.MANUAL_KEY.value,
                access_key_id=key.id,
            )
            result = RedeemResult(
                type=key.type, payment=grant.payment, subscription=grant.subscription
            )
        else:
            credit = key.credit_amount or 0
            payment = PaymentRecord(
                user_id=user.id,
                amount=credit,
                method=PaymentMethod.MANUAL_KEY.value,
                type=PaymentType.AD_CAMPAIGN.value,
                status=PaymentStatus.COMPLETED.value,
                access_key_id=key.id,
            )
            db.add(payment)
            if credit > 0:
                # Incremented in SQL so concurrent credits to the same user add up
                user.ad_balance = User.ad_balance + credit
            result = RedeemResult(type=key.type, payment=payment)

        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("This code has already been used") from e
    except Exception:
        db.rollback()
        raise
    db.refresh(key)
    db.refresh(user)

    logger.info(
        "Access key redeemed",
        extra={"user_id": str(user.id), "access_key_id": str(key.id), "key_type": key.type},
    )
    return result


def generate_access_key(
    db: Session,
    key_type: str = AccessKeyType.SUBSCRIPTION.value,
    plan_id: UUID | None = None,
    credit_amount: float | None = None,
    assigned_to_user_id: UUID | None = None,
    expires_at: datetime | None = None,
    prefix: str = "CV",
) -> AccessKey:
    """Create an unused access key."""
    if key_type == AccessKeyType.SUBSCRIPTION.value:
        if plan_id is None or db.get(SubscriptionPlan, plan_id) is None:
            raise ValidationFailed("Subscription keys need a valid plan")
    elif not credit_amount or credit_amount <= 0:
        raise ValidationFailed("Ad campaign keys need a positive credit amount")

    key = AccessKey(
        code=f"{prefix.upper()}-{secrets.token_hex(4).upper()}-{secrets.token_hex(4).upper()}",
        type=key_type,
        plan_id=plan_id,
        credit_amount=credit_amount,
        assigned_to_user_id=assigned_to_user_id,
        expires_at=expires_at,
    )
    db.add(key)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(key)

    logger.info("Access key generated", extra={"access_key_id": str(key.id), "key_type": key_type})
    return key


def list_active_plans(db: Session) -> list[SubscriptionPlan]:
    return (
        db.query(SubscriptionPlan)
        .filter(SubscriptionPlan.is_active.is_(True))
        .order_by(SubscriptionPlan.price.asc())
        .all()
    )


def seed_payment_plans(db: Session) -> list[str]:
    """Create the default plans that do not exist yet. Returns the names created."""
    created = []
    for plan_data in DEFAULT_PLANS:
        exists = (
            db.query(SubscriptionPlan.id)
            .filter(SubscriptionPlan.name == plan_data["name"])
            .first()
        )
        if exists is not None:
            continue
        db.add(SubscriptionPlan(**plan_data))
        created.append(plan_data["name"])
    db.commit()

    if created:
        logger.info("Payment plans seeded", extra={"plans": created})
    return created
