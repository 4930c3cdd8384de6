"""Published post search."""

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from cineverse.core.config import settings
from cineverse.models.post import Post, PostStatus

MIN_QUERY_LENGTH = 2
DEFAULT_LIMIT = 10


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(limit, settings.SEARCH_MAX_LIMIT))


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_posts(db: Session, q: str | None, limit: int | None = DEFAULT_LIMIT) -> list[Post]:
    """Case-insensitive title/description search over published posts, newest first.

    Queries shorter than two characters return nothing without touching the database.
    """
    query = (q or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    pattern = f"%{_escape_like(query)}%"
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .filter(Post.status == PostStatus.PUBLISHED.value)
        .filter(
            or_(
                Post.title.ilike(pattern, escape="\\"),
                Post.description.ilike(pattern, escape="\\"),
            )
        )
        .order_by(Post.created_at.desc())
        .limit(clamp_limit(limit))
        .all()
    )
