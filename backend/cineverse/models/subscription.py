"""Subscription plans, access keys, payment records and user subscriptions."""

import uuid
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from cineverse.common.timeutils import utcnow
from cineverse.db.base import Base


class SubscriptionInterval(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    LIFETIME = "LIFETIME"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class AccessKeyType(str, Enum):
    SUBSCRIPTION = "SUBSCRIPTION"
    AD_CAMPAIGN = "AD_CAMPAIGN"


class PaymentMethod(str, Enum):
    MANUAL_KEY = "MANUAL_KEY"
    BANK_TRANSFER = "BANK_TRANSFER"
    CARD = "CARD"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentType(str, Enum):
    SUBSCRIPTION = "SUBSCRIPTION"
    AD_CAMPAIGN = "AD_CAMPAIGN"


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(128), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    currency = Column(String(8), nullable=False, default="LKR")
    interval = Column(String(16), nullable=False, default=SubscriptionInterval.MONTHLY.value)
    duration_days = Column(Integer, nullable=False, default=30)
    discount_percent = Column(Integer, nullable=False, default=0)
    features = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class AccessKey(Base):
    __tablename__ = "access_keys"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(64), unique=True, nullable=False, index=True)
    type = Column(String(16), nullable=False, default=AccessKeyType.SUBSCRIPTION.value)
    plan_id = Column(Uuid, ForeignKey("subscription_plans.id", ondelete="SET NULL"), nullable=True)
    credit_amount = Column(Float, nullable=True)
    is_used = Column(Boolean, nullable=False, default=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    used_by_user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_to_user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    plan = relationship("SubscriptionPlan")


class PaymentRecord(Base):
    __tablename__ = "payment_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(8), nullable=False, default="LKR")
    method = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False, default=PaymentStatus.PENDING.value)
    type = Column(String(16), nullable=False)
    access_key_id = Column(Uuid, ForeignKey("access_keys.id", ondelete="SET NULL"), nullable=True)
    gateway_ref_id = Column(String(255), nullable=True)
    gateway_name = Column(String(64), nullable=True)
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = Column(Uuid, ForeignKey("subscription_plans.id"), nullable=False)
    status = Column(String(16), nullable=False, default=SubscriptionStatus.ACTIVE.value)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    payment_id = Column(Uuid, ForeignKey("payment_records.id", ondelete="SET NULL"), nullable=True)
    auto_renew = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    plan = relationship("SubscriptionPlan")
    payment = relationship("PaymentRecord")
