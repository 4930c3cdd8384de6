"""Sponsored posts and ad payment codes."""

import uuid
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from cineverse.common.timeutils import utcnow
from cineverse.db.base import Base


class SponsoredPostStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    REJECTED = "REJECTED"


class AdPayment(Base):
    """A redeemable ad payment code. Once used it stays bound to one sponsored post."""

    __tablename__ = "ad_payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(64), unique=True, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(8), nullable=False, default="LKR")
    duration_days = Column(Integer, nullable=False, default=30)
    is_used = Column(Boolean, nullable=False, default=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    used_by_user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_to_user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    used_by_user = relationship("User", foreign_keys=[used_by_user_id])
    assigned_to_user = relationship("User", foreign_keys=[assigned_to_user_id])
    sponsored_post = relationship("SponsoredPost", back_populates="payment", uselist=False)


class SponsoredPost(Base):
    __tablename__ = "sponsored_posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(1000), nullable=True)
    link_url = Column(String(1000), nullable=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(16), nullable=False, default=SponsoredPostStatus.PENDING.value)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    payment_id = Column(
        Uuid, ForeignKey("ad_payments.id", ondelete="SET NULL"), unique=True, nullable=True
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])
    payment = relationship("AdPayment", back_populates="sponsored_post")
