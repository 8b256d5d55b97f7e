"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """Page metadata returned by paginated post listings."""

    currentPage: int = Field(..., ge=1)
    totalPages: int = Field(..., ge=0)
    totalPosts: int = Field(..., ge=0)
    hasNext: bool
    hasPrev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> Pagination:
        total_pages = -(-total // limit) if limit > 0 else 0
        return cls(
            currentPage=page,
            totalPages=total_pages,
            totalPosts=total,
            hasNext=page < total_pages,
            hasPrev=page > 1,
        )


def envelope(data: Any = None, message: str | None = None, **extra: Any) -> dict[str, Any]:
    """Wrap a successful payload as ``{"success": true, "data"?, "message"?}``.

    Keys are only present when a value was supplied.
    """
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body
