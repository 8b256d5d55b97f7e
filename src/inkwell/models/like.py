# src/inkwell/models/like.py
"""SQLAlchemy model for polymorphic likes and dislikes."""

from datetime import datetime
from typing import NamedTuple

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.db.session import Base, utcnow

TARGET_TYPES = ("post", "comment")
LIKE_TYPES = ("like", "dislike")


class Like(Base):
    """One reaction from a user on a post or a comment.

    ``target_id`` is a weak reference: there is no foreign key to the target
    table, so deleting a post or comment must remove its likes explicitly.
    """

    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "target_type", "target_id", name="uq_likes_user_target"),
        CheckConstraint("target_type IN ('post', 'comment')", name="ck_likes_target_type"),
        CheckConstraint("like_type IN ('like', 'dislike')", name="ck_likes_like_type"),
        Index("idx_likes_target", "target_type", "target_id"),
    )

    like_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    target_type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    like_type: Mapped[str] = mapped_column(String(20), nullable=False, default="like")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class LikeTarget(NamedTuple):
    """Tagged reference to the post or comment a like points at."""

    target_type: str
    target_id: int

    @classmethod
    def post(cls, post_id: int) -> "LikeTarget":
        return cls("post", post_id)

    @classmethod
    def comment(cls, comment_id: int) -> "LikeTarget":
        return cls("comment", comment_id)
