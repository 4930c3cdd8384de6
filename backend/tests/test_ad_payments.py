"""Tests for ad payment codes and sponsored post linking."""

import re
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from cineverse.core.app_exceptions import Conflict, Forbidden, NotFound
from cineverse.models.ads import AdPayment, SponsoredPost, SponsoredPostStatus
from cineverse.models.user import User
from cineverse.services.ad_payments import (
    generate_payment_code,
    link_payment_to_post,
    redeem_payment_code,
)
from tests.helpers.seed import create_ad_payment, create_sponsored_post, create_test_user


def test_link_creates_used_payment(db: Session, regular_user: User) -> None:
    post = create_sponsored_post(db, regular_user)
    db.commit()

    result = link_payment_to_post(db, post.id)

    assert result.created is True
    payment = result.payment
    assert payment.code.startswith("SEED_")
    assert payment.amount == 50.00
    assert payment.currency == "USD"
    assert payment.duration_days == 30
    assert payment.is_used is True
    assert payment.used_at is not None
    assert payment.used_by_user_id == regular_user.id
    db.refresh(post)
    assert post.payment_id == payment.id


def test_link_is_noop_when_post_already_has_payment(db: Session, regular_user: User) -> None:
    existing = create_ad_payment(db, code="AD-EXISTING", amount=1000.0, currency="LKR", is_used=True)
    post = create_sponsored_post(db, regular_user, payment=existing)
    db.commit()
    before = (existing.code, existing.amount, existing.currency, existing.is_used, existing.used_at)

    result = link_payment_to_post(db, post.id)

    assert result.created is False
    assert result.payment.id == existing.id
    db.refresh(existing)
    assert (existing.code, existing.amount, existing.currency, existing.is_used, existing.used_at) == before
    assert db.query(AdPayment).count() == 1


def test_link_unknown_post(db: Session) -> None:
    with pytest.raises(NotFound):
        link_payment_to_post(db, uuid.uuid4())


def test_link_rolls_back_both_writes_on_failure(
    db: Session, regular_user: User, monkeypatch: pytest.MonkeyPatch
) -> None:
    post = create_sponsored_post(db, regular_user)
    db.commit()

    def failing_commit() -> None:
        raise RuntimeError("connection lost")

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        link_payment_to_post(db, post.id)
    monkeypatch.undo()

    assert db.query(AdPayment).count() == 0
    assert db.get(SponsoredPost, post.id).payment_id is None


def test_generate_payment_code_format(db: Session) -> None:
    payment = generate_payment_code(db, prefix="test")

    assert re.fullmatch(r"TEST-[0-9A-F]{8}", payment.code)
    assert payment.is_used is False
    assert payment.currency == "LKR"


def test_redeem_activates_post(db: Session, regular_user: User) -> None:
    payment = create_ad_payment(db, code="AD-REDEEM01", duration_days=14)
    post = create_sponsored_post(db, regular_user)
    db.commit()

    redeemed = redeem_payment_code(db, " AD-REDEEM01 ", regular_user, post.id)

    assert redeemed.status == SponsoredPostStatus.ACTIVE.value
    assert redeemed.payment_id == payment.id
    assert (redeemed.end_date - redeemed.start_date).days == 14
    db.refresh(payment)
    assert payment.is_used is True
    assert payment.used_by_user_id == regular_user.id


def test_redeem_used_code_conflicts(db: Session, regular_user: User) -> None:
    create_ad_payment(db, code="AD-USED0001", is_used=True)
    post = create_sponsored_post(db, regular_user)
    db.commit()

    with pytest.raises(Conflict):
        redeem_payment_code(db, "AD-USED0001", regular_user, post.id)


def test_redeem_code_reserved_for_someone_else(db: Session, regular_user: User) -> None:
    other = create_test_user(db, email="other@example.com")
    create_ad_payment(db, code="AD-RESERVED", assigned_to_user_id=other.id)
    post = create_sponsored_post(db, regular_user)
    db.commit()

    with pytest.raises(Forbidden):
        redeem_payment_code(db, "AD-RESERVED", regular_user, post.id)


def test_redeem_on_someone_elses_post(db: Session, regular_user: User) -> None:
    other = create_test_user(db, email="other@example.com")
    create_ad_payment(db, code="AD-FREE0001")
    post = create_sponsored_post(db, other)
    db.commit()

    with pytest.raises(NotFound):
        redeem_payment_code(db, "AD-FREE0001", regular_user, post.id)


def test_redeem_on_paid_post_conflicts(db: Session, regular_user: User) -> None:
    paid = create_ad_payment(db, code="AD-PAID0001", is_used=True)
    create_ad_payment(db, code="AD-FREE0002")
    post = create_sponsored_post(db, regular_user, payment=paid)
    db.commit()

    with pytest.raises(Conflict):
        redeem_payment_code(db, "AD-FREE0002", regular_user, post.id)


def test_redeem_unknown_code(db: Session, regular_user: User) -> None:
    post = create_sponsored_post(db, regular_user)
    db.commit()

    with pytest.raises(NotFound):
        redeem_payment_code(db, "NOPE", regular_user, post.id)


def test_link_endpoint_is_idempotent(
    client: TestClient, db: Session, regular_user: User, auth_headers_super_admin: dict[str, str]
) -> None:
    post = create_sponsored_post(db, regular_user)
    db.commit()
    url = f"/api/admin/ads/{post.id}/payment"

    first = client.post(url, headers=auth_headers_super_admin)
    second = client.post(url, headers=auth_headers_super_admin)

    assert first.status_code == 200
    assert first.json()["created"] is True
    assert second.json()["created"] is False
    assert second.json()["payment"]["id"] == first.json()["payment"]["id"]


def test_link_endpoint_requires_super_admin(
    client: TestClient, db: Session, regular_user: User, auth_headers_user_admin: dict[str, str]
) -> None:
    post = create_sponsored_post(db, regular_user)
    db.commit()

    response = client.post(f"/api/admin/ads/{post.id}/payment", headers=auth_headers_user_admin)

    assert response.status_code == 403


def test_generate_and_redeem_through_api(
    client: TestClient,
    db: Session,
    regular_user: User,
    auth_headers_user: dict[str, str],
    auth_headers_super_admin: dict[str, str],
) -> None:
    post = create_sponsored_post(db, regular_user)
    db.commit()

    created = client.post(
        "/api/admin/ads/codes",
        json={"amount": 2500, "duration_days": 7},
        headers=auth_headers_super_admin,
    )
    assert created.status_code == 201
    code = created.json()["code"]

    redeemed = client.post(f"/api/ads/{post.id}/redeem", json={"code": code}, headers=auth_headers_user)
    again = client.post(f"/api/ads/{post.id}/redeem", json={"code": code}, headers=auth_headers_user)

    assert redeemed.status_code == 200
    assert redeemed.json()["status"] == "ACTIVE"
    assert again.status_code == 409


def test_concurrent_redemption_of_one_code_spends_it_once(file_sessions) -> None:
    with file_sessions() as setup:
        owner = create_test_user(setup, email="racer@example.com")
        first_post = create_sponsored_post(setup, owner, title="First")
        second_post = create_sponsored_post(setup, owner, title="Second")
        create_ad_payment(setup, code="AD-RACE")
        setup.commit()
        owner_id, first_post_id, second_post_id = owner.id, first_post.id, second_post.id

    with file_sessions() as first, file_sessions() as second:
        first_owner = first.get(User, owner_id)
        second_owner = second.get(User, owner_id)
        assert first.query(AdPayment).filter_by(code="AD-RACE").one().is_used is False
        assert second.query(AdPayment).filter_by(code="AD-RACE").one().is_used is False
        first.commit()
        second.commit()

        redeem_payment_code(first, "AD-RACE", first_owner, first_post_id)
        with pytest.raises(Conflict):
            redeem_payment_code(second, "AD-RACE", second_owner, second_post_id)

    with file_sessions() as check:
        assert check.get(SponsoredPost, first_post_id).status == SponsoredPostStatus.ACTIVE.value
        assert check.get(SponsoredPost, second_post_id).payment_id is None
        assert check.get(SponsoredPost, second_post_id).status == SponsoredPostStatus.PENDING.value


def test_concurrent_link_keeps_a_single_payment(file_sessions) -> None:
    with file_sessions() as setup:
        owner = create_test_user(setup, email="racer@example.com")
        post = create_sponsored_post(setup, owner)
        setup.commit()
        post_id = post.id

    with file_sessions() as first, file_sessions() as second:
        assert second.get(SponsoredPost, post_id).payment_id is None
        second.commit()

        created = link_payment_to_post(first, post_id)
        raced = link_payment_to_post(second, post_id)

        assert created.created is True
        assert raced.created is False
        assert raced.payment.id == created.payment.id

    with file_sessions() as check:
        assert check.query(AdPayment).count() == 1
