"""Pytest configuration and shared fixtures."""

import os

# Must be set before cineverse is imported: settings and the engine are module globals
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_SECRET"] = "test-secret-not-for-production"
os.environ["SESSION_COOKIE_SECURE"] = "false"
os.environ.pop("RECAPTCHA_SECRET_KEY", None)
os.environ.pop("RECAPTCHA_SITE_KEY", None)
os.environ.pop("SUPER_ADMIN_EMAIL", None)

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from cineverse.db.base import Base
from cineverse.db.engine import engine
from cineverse.db.session import SessionLocal, get_db
from cineverse.main import app
from cineverse.models.user import User
from tests.helpers.auth import auth_headers_for
from tests.helpers.seed import create_test_super_admin, create_test_user, create_test_user_admin


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh in-memory schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def file_sessions(tmp_path) -> Generator[sessionmaker, None, None]:
    """Session factory on a file database, so each session gets its own connection."""
    file_engine = create_engine(f"sqlite:///{tmp_path / 'cineverse.db'}")
    Base.metadata.create_all(bind=file_engine)
    try:
        yield sessionmaker(bind=file_engine, autoflush=False, expire_on_commit=False)
    finally:
        Base.metadata.drop_all(bind=file_engine)
        file_engine.dispose()


@pytest.fixture
def client(db) -> TestClient:
    """Create a FastAPI test client with database dependency override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close the session, it's managed by the db fixture

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def regular_user(db) -> User:
    user = create_test_user(db, email="viewer@example.com")
    db.commit()
    return user


@pytest.fixture
def user_admin(db) -> User:
    user = create_test_user_admin(db, email="moderator@example.com")
    db.commit()
    return user


@pytest.fixture
def super_admin(db) -> User:
    user = create_test_super_admin(db, email="owner@example.com")
    db.commit()
    return user


@pytest.fixture
def auth_headers_user(regular_user) -> dict[str, str]:
    return auth_headers_for(regular_user)


@pytest.fixture
def auth_headers_user_admin(user_admin) -> dict[str, str]:
    return auth_headers_for(user_admin)


@pytest.fixture
def auth_headers_super_admin(super_admin) -> dict[str, str]:
    return auth_headers_for(super_admin)
