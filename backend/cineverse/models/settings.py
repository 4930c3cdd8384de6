"""Key-value application settings."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid

from cineverse.common.timeutils import utcnow
from cineverse.db.base import Base


class AppSetting(Base):
    """A JSON string stored under a well-known key."""

    __tablename__ = "app_settings"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    updated_by_user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
