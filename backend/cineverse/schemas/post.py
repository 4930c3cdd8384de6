"""Post search and moderation schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from cineverse.models.post import PostStatus


class PostAuthor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str | None = None


class PostSearchHit(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    type: str
    poster_url: str | None = None
    author: PostAuthor | None = None


class PostSearchResponse(BaseModel):
    posts: list[PostSearchHit]


class PostStatusUpdate(BaseModel):
    status: PostStatus


class PostStatusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    status: str
