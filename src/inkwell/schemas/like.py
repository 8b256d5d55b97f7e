"""Like-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel


class LikeRequest(BaseModel):
    """Optional body for like toggles."""

    likeType: str = "like"


class LikeToggleResult(BaseModel):
    """Outcome of a toggle, paired with the fresh count."""

    liked: bool
    likeCount: int


class UserLikeRead(BaseModel):
    """A like cast by the current user, with its target's title."""

    like_id: int
    target_type: str
    target_id: int
    like_type: str
    created_at: datetime
    target_title: str | None = None


class LikeStats(BaseModel):
    """Likes received on a user's own content."""

    post_likes: int
    comment_likes: int
    total_likes: int
