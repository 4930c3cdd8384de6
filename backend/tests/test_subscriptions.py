"""Tests for subscriptions, access keys and plan seeding."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from cineverse.common.timeutils import utcnow
from cineverse.core.app_exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from cineverse.models.subscription import (
    AccessKey,
    AccessKeyType,
    PaymentRecord,
    PaymentType,
    SubscriptionInterval,
    SubscriptionPlan,
)
from cineverse.models.user import AccountType, User
from cineverse.services.subscriptions import (
    calculate_end_date,
    grant_subscription,
    redeem_access_key,
    seed_payment_plans,
)
from tests.helpers.seed import create_plan, create_test_user

START = datetime(2024, 1, 31, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "interval,duration_days,expected",
    [
        (SubscriptionInterval.WEEKLY, 7, datetime(2024, 2, 7, 12, 0, tzinfo=timezone.utc)),
        (SubscriptionInterval.WEEKLY, 0, datetime(2024, 2, 7, 12, 0, tzinfo=timezone.utc)),
        (SubscriptionInterval.WEEKLY, 10, datetime(2024, 2, 10, 12, 0, tzinfo=timezone.utc)),
        (SubscriptionInterval.MONTHLY, 30, datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)),
        (SubscriptionInterval.YEARLY, 365, datetime(2025, 1, 31, 12, 0, tzinfo=timezone.utc)),
        (SubscriptionInterval.LIFETIME, 0, datetime(2124, 1, 31, 12, 0, tzinfo=timezone.utc)),
    ],
)
def test_calculate_end_date(interval, duration_days, expected) -> None:
    assert calculate_end_date(START, interval.value, duration_days) == expected


def test_yearly_from_leap_day_clamps() -> None:
    leap_day = datetime(2024, 2, 29, tzinfo=timezone.utc)
    assert calculate_end_date(leap_day, "YEARLY", 365) == datetime(2025, 2, 28, tzinfo=timezone.utc)


def test_grant_subscription_makes_user_premium(db: Session, regular_user: User) -> None:
    plan = create_plan(db, interval=SubscriptionInterval.WEEKLY, duration_days=7, price=400)
    db.commit()

    result = grant_subscription(db, regular_user.id, plan.id, amount=400)

    assert result.payment.type == PaymentType.SUBSCRIPTION.value
    assert result.payment.amount == 400
    assert regular_user.account_type == AccountType.PREMIUM.value
    assert regular_user.subscription_end_date == result.subscription.end_date
    assert result.subscription.end_date - result.subscription.start_date == timedelta(days=7)


def test_grant_stacks_after_active_subscription(db: Session, regular_user: User) -> None:
    plan = create_plan(db, interval=SubscriptionInterval.WEEKLY, duration_days=7, price=400)
    db.commit()

    first = grant_subscription(db, regular_user.id, plan.id, amount=400)
    second = grant_subscription(db, regular_user.id, plan.id, amount=400)

    assert second.subscription.start_date == first.subscription.end_date
    assert regular_user.subscription_end_date == second.subscription.end_date


def test_grant_with_unknown_plan(db: Session, regular_user: User) -> None:
    with pytest.raises(NotFound):
        grant_subscription(db, regular_user.id, uuid.uuid4(), amount=0)


def _key(db: Session, code: str, **kwargs) -> AccessKey:
    key = AccessKey(code=code, **kwargs)
    db.add(key)
    db.commit()
    return key


def test_redeem_subscription_key(db: Session, regular_user: User) -> None:
    plan = create_plan(db)
    key = _key(db, "CV-MONTH-0001", type=AccessKeyType.SUBSCRIPTION.value, plan_id=plan.id)

    result = redeem_access_key(db, regular_user, "CV-MONTH-0001")

    assert result.type == AccessKeyType.SUBSCRIPTION.value
    assert result.subscription is not None
    assert result.payment.access_key_id == key.id
    assert result.payment.amount == plan.price
    assert key.is_used is True
    assert key.used_by_user_id == regular_user.id
    assert regular_user.account_type == AccountType.PREMIUM.value


def test_redeem_ad_campaign_key_credits_balance(db: Session, regular_user: User) -> None:
    _key(db, "CV-ADS-0001", type=AccessKeyType.AD_CAMPAIGN.value, credit_amount=750.0)

    result = redeem_access_key(db, regular_user, "CV-ADS-0001")

    assert result.type == AccessKeyType.AD_CAMPAIGN.value
    assert result.subscription is None
    assert regular_user.ad_balance == 750.0
    assert regular_user.account_type == AccountType.FREE.value
    assert db.query(PaymentRecord).filter(PaymentRecord.type == PaymentType.AD_CAMPAIGN.value).count() == 1


def test_redeem_used_key(db: Session, regular_user: User) -> None:
    _key(db, "CV-USED", type=AccessKeyType.AD_CAMPAIGN.value, credit_amount=1.0, is_used=True)

    with pytest.raises(Conflict):
        redeem_access_key(db, regular_user, "CV-USED")


def test_redeem_expired_key(db: Session, regular_user: User) -> None:
    _key(
        db,
        "CV-OLD",
        type=AccessKeyType.AD_CAMPAIGN.value,
        credit_amount=1.0,
        expires_at=utcnow() - timedelta(days=1),
    )

    with pytest.raises(ValidationFailed):
        redeem_access_key(db, regular_user, "CV-OLD")


def test_redeem_key_reserved_for_someone_else(db: Session, regular_user: User) -> None:
    other = create_test_user(db, email="other@example.com")
    _key(
        db,
        "CV-MINE",
        type=AccessKeyType.AD_CAMPAIGN.value,
        credit_amount=1.0,
        assigned_to_user_id=other.id,
    )

    with pytest.raises(Forbidden):
        redeem_access_key(db, regular_user, "CV-MINE")


def test_redeem_unknown_key(db: Session, regular_user: User) -> None:
    with pytest.raises(NotFound):
        redeem_access_key(db, regular_user, "CV-NOPE")


def test_seed_payment_plans_is_idempotent(db: Session) -> None:
    assert seed_payment_plans(db) == ["Weekly Pass", "Monthly Pro", "Annual Elite"]
    assert seed_payment_plans(db) == []
    assert db.query(SubscriptionPlan).count() == 3

    annual = db.query(SubscriptionPlan).filter(SubscriptionPlan.name == "Annual Elite").one()
    assert annual.price == 10000
    assert annual.discount_percent == 30
    assert "Early Access" in annual.features


def test_plans_endpoint_sorted_by_price(client: TestClient, db: Session) -> None:
    seed_payment_plans(db)

    response = client.get("/api/subscriptions/plans")

    assert response.status_code == 200
    assert [plan["name"] for plan in response.json()] == ["Weekly Pass", "Monthly Pro", "Annual Elite"]


def test_redeem_endpoint_and_status(
    client: TestClient, db: Session, auth_headers_user: dict[str, str], auth_headers_super_admin: dict[str, str]
) -> None:
    plan = create_plan(db)
    db.commit()

    created = client.post(
        "/api/admin/access-keys",
        json={"type": "SUBSCRIPTION", "plan_id": str(plan.id)},
        headers=auth_headers_super_admin,
    )
    assert created.status_code == 201

    redeemed = client.post(
        "/api/subscriptions/redeem", json={"code": created.json()["code"]}, headers=auth_headers_user
    )
    status = client.get("/api/subscriptions/me", headers=auth_headers_user)

    assert redeemed.status_code == 200
    assert redeemed.json()["subscription"]["plan"]["name"] == "Monthly Pro"
    assert status.json()["account_type"] == AccountType.PREMIUM.value
    assert status.json()["active"]["plan"]["id"] == str(plan.id)


def test_access_key_needs_plan(client: TestClient, auth_headers_super_admin: dict[str, str]) -> None:
    response = client.post(
        "/api/admin/access-keys", json={"type": "SUBSCRIPTION"}, headers=auth_headers_super_admin
    )
    assert response.status_code == 400


def test_redeem_requires_session(client: TestClient, db: Session) -> None:
    response = client.post("/api/subscriptions/redeem", json={"code": "anything"})
    assert response.status_code == 401


def test_concurrent_redemption_of_one_key_credits_once(file_sessions) -> None:
    with file_sessions() as setup:
        user = create_test_user(setup, email="racer@example.com")
        setup.add(AccessKey(code="CV-RACE", type=AccessKeyType.AD_CAMPAIGN.value, credit_amount=500.0))
        setup.commit()
        user_id = user.id

    with file_sessions() as first, file_sessions() as second:
        first_user = first.get(User, user_id)
        second_user = second.get(User, user_id)
        # Both sessions have seen the key unused before either redeems it
        assert first.query(AccessKey).filter_by(code="CV-RACE").one().is_used is False
        assert second.query(AccessKey).filter_by(code="CV-RACE").one().is_used is False
        first.commit()
        second.commit()

        redeem_access_key(first, first_user, "CV-RACE")
        with pytest.raises(Conflict):
            redeem_access_key(second, second_user, "CV-RACE")

    with file_sessions() as check:
        assert check.query(PaymentRecord).count() == 1
        assert check.get(User, user_id).ad_balance == 500.0
        assert check.query(AccessKey).filter_by(code="CV-RACE").one().used_by_user_id == user_id
