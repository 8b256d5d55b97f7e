"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class CommentCreate(BaseModel):
    """Body for creating a comment or reply."""

    content: str | None = None
    postId: int | None = None
    parentCommentId: int | None = None


class CommentUpdate(BaseModel):
    """Body for editing a comment."""

    content: str | None = None


class CommentRead(BaseModel):
    """Comment with author details, counters and, for trees, nested replies."""

    comment_id: int
    content: str
    author_id: int
    post_id: int
    parent_comment_id: int | None = None
    is_edited: bool
    edited_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    username: str | None = None
    profile_picture: str | None = None
    like_count: int | None = None
    reply_count: int | None = None
    replies: list[CommentRead] | None = Field(default=None)
    post_title: str | None = None
    post_slug: str | None = None

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
        return extracted
