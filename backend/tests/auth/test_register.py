"""Tests for user registration."""

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from cineverse.core.app_exceptions import Conflict, ValidationFailed
from cineverse.core.config import settings
from cineverse.main import app
from cineverse.models.user import User, UserRole
from cineverse.services.captcha import RecaptchaVerifier, get_captcha_verifier
from cineverse.services.registration import register_user


def _payload(**overrides) -> dict:
    data = {"name": "Nimal Perera", "email": "nimal@example.com", "password": "Subtitles123!"}
    data.update(overrides)
    return data


def test_register_creates_user(client: TestClient, db: Session) -> None:
    response = client.post("/api/register", json=_payload())

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "nimal@example.com"
    assert data["role"] == UserRole.USER.value
    assert "password" not in data
    assert "password_hash" not in data

    user = db.query(User).filter(User.email == "nimal@example.com").one()
    assert user.password_hash != "Subtitles123!"


def test_register_duplicate_email_conflicts_without_new_row(
    client: TestClient, db: Session
) -> None:
    assert client.post("/api/register", json=_payload()).status_code == 201

    response = client.post(
        "/api/register", json=_payload(name="Someone Else", email="NIMAL@example.com")
    )

    assert response.status_code == 409
    assert response.json()["error_code"] == "CONFLICT"
    assert db.query(User).count() == 1


def test_register_missing_fields_returns_400(client: TestClient, db: Session) -> None:
    response = client.post("/api/register", json={"email": "nimal@example.com"})

    assert response.status_code == 400
    data = response.json()
    assert data["error_code"] == "VALIDATION_ERROR"
    fields = {detail["field"] for detail in data["details"]}
    assert {"name", "password"} <= fields
    assert db.query(User).count() == 0


def test_register_blank_name_returns_400(client: TestClient) -> None:
    response = client.post("/api/register", json=_payload(name="   "))
    assert response.status_code == 400


def test_register_accepts_short_password(client: TestClient) -> None:
    response = client.post("/api/register", json=_payload(password="abc"))
    assert response.status_code == 201


def test_register_empty_password_returns_400(client: TestClient) -> None:
    response = client.post("/api/register", json=_payload(password=""))
    assert response.status_code == 400


def test_register_service_rejects_missing_password(db: Session) -> None:
    with pytest.raises(ValidationFailed):
        register_user(db, "Nimal", "nimal@example.com", "")


def test_register_service_conflict_is_case_insensitive(db: Session) -> None:
    register_user(db, "Nimal", "nimal@example.com", "Subtitles123!")
    with pytest.raises(Conflict):
        register_user(db, "Nimal", "  Nimal@Example.COM ", "Subtitles123!")


def test_bootstrap_email_becomes_super_admin(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "SUPER_ADMIN_EMAIL", "Founder@Example.COM")

    response = client.post("/api/register", json=_payload(email="founder@example.com"))

    assert response.status_code == 201
    assert response.json()["role"] == UserRole.SUPER_ADMIN.value


def test_bootstrap_email_ignored_once_super_admin_exists(
    client: TestClient, super_admin: User, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "SUPER_ADMIN_EMAIL", "second@example.com")

    response = client.post("/api/register", json=_payload(email="second@example.com"))

    assert response.status_code == 201
    assert response.json()["role"] == UserRole.USER.value


def test_register_rejects_failed_captcha(client: TestClient, db: Session) -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"success": False, "error-codes": ["bad"]})
    )
    app.dependency_overrides[get_captcha_verifier] = lambda: RecaptchaVerifier(
        secret_key="secret", transport=transport
    )

    response = client.post("/api/register", json=_payload(captcha_token="token"))

    assert response.status_code == 400
    assert response.json()["error_code"] == "CAPTCHA_FAILED"
    assert db.query(User).count() == 0
