"""User model."""

import uuid
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Float, String, Uuid

from cineverse.common.timeutils import utcnow
from cineverse.db.base import Base


class UserRole(str, Enum):
    """User role enum."""

    SUPER_ADMIN = "SUPER_ADMIN"
    USER_ADMIN = "USER_ADMIN"
    USER = "USER"


class AccountType(str, Enum):
    FREE = "FREE"
    PREMIUM = "PREMIUM"


class User(Base):
    """User model. Permissions are derived from role and never stored."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=True)
    role = Column(String(32), nullable=False, default=UserRole.USER.value)
    is_active = Column(Boolean, default=True, nullable=False)
    account_type = Column(String(16), nullable=False, default=AccountType.FREE.value)
    subscription_end_date = Column(DateTime(timezone=True), nullable=True)
    ad_balance = Column(Float, nullable=False, default=0.0)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
