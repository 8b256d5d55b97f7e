"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from .common import Pagination


class PostRead(BaseModel):
    """Post joined with its author and, where computed, its counters."""

    post_id: int
    title: str
    excerpt: str
    content: str
    featured_image: str | None = None
    tags: list[str] = Field(default_factory=list)
    author_id: int
    status: str
    views: int
    slug: str
    created_at: datetime
    updated_at: datetime
    username: str | None = None
    profile_picture: str | None = None
    user_email: str | None = None
    comment_count: int | None = None
    like_count: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_author(cls, data: object) -> object:
        if isinstance(data, dict):
            return data
        extracted: dict[str, object | None] = {}
        for field_name in cls.model_fields:
            extracted[field_name] = getattr(data, field_name, None)
        author = getattr(data, "author", None)
        if author is not None:
            extracted["username"] = author.username
            extracted["profile_picture"] = author.profile_picture
        extracted["tags"] = list(extracted.get("tags") or [])
        return extracted


class PostPage(BaseModel):
    """One page of published posts."""

    posts: list[PostRead]
    pagination: Pagination


class StatusUpdate(BaseModel):
    """Requested status transition."""

    status: str | None = None


class TagCount(BaseModel):
    """Tag histogram entry."""

    name: str
    count: int


class AuthorSummary(BaseModel):
    """Author aggregated over a post collection."""

    name: str
    profile_picture: str | None = None
    count: int
