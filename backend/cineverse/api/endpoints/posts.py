"""Post search and moderation endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cineverse.core.app_exceptions import NotFound
from cineverse.core.dependencies import require_permission
from cineverse.core.logging import get_logger
from cineverse.core.permissions import Permission
from cineverse.db.session import get_db
from cineverse.models.post import Post
from cineverse.models.user import User
from cineverse.schemas.post import (
    PostSearchHit,
    PostSearchResponse,
    PostStatusResponse,
    PostStatusUpdate,
)
from cineverse.services.search import DEFAULT_LIMIT, search_posts

logger = get_logger(__name__)

router = APIRouter(tags=["Posts"])


@router.get(
    "/posts/search",
    response_model=PostSearchResponse,
    summary="Search posts",
    description="Search published posts by title or description.",
)
async def search(
    q: str | None = Query(None, description="Search text (at least 2 characters)"),
    limit: int = Query(DEFAULT_LIMIT, description="Maximum hits, clamped to 1..50"),
    db: Session = Depends(get_db),
) -> PostSearchResponse:
    posts = search_posts(db, q, limit)
    return PostSearchResponse(posts=[PostSearchHit.model_validate(post) for post in posts])


@router.patch(
    "/admin/posts/{post_id}/status",
    response_model=PostStatusResponse,
    summary="Change post status",
    tags=["Admin - Posts"],
)
async def change_post_status(
    post_id: UUID,
    request_data: PostStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.POST_CHANGE_STATUS)),
) -> PostStatusResponse:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFound("Post")

    previous = post.status
    post.status = request_data.status.value
    db.commit()
    db.refresh(post)

    logger.info(
        "Post status changed",
        extra={
            "post_id": str(post.id),
            "from": previous,
            "to": post.status,
            "user_id": str(current_user.id),
        },
    )
    return PostStatusResponse.model_validate(post)
