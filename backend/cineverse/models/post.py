"""Post (movie / series) model."""

import uuid
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import relationship

from cineverse.common.timeutils import utcnow
from cineverse.db.base import Base


class PostType(str, Enum):
    MOVIE = "MOVIE"
    SERIES = "SERIES"
    OTHER = "OTHER"


class PostStatus(str, Enum):
    PUBLISHED = "PUBLISHED"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    PENDING_DELETION = "PENDING_DELETION"
    PRIVATE = "PRIVATE"
    DRAFT = "DRAFT"


class Post(Base):
    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(16), nullable=False, default=PostType.MOVIE.value)
    status = Column(String(32), nullable=False, default=PostStatus.DRAFT.value)
    poster_url = Column(String(1000), nullable=True)
    author_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    author = relationship("User", foreign_keys=[author_id])

    __table_args__ = (Index("ix_posts_status_created_at", "status", "created_at"),)
