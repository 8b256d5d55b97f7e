# src/inkwell/models/post.py
"""SQLAlchemy model for blog posts."""

from datetime import datetime

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.db.session import Base, utcnow

from .user import User

POST_STATUSES = ("draft", "published", "archived")

# Native text array on PostgreSQL, JSON list elsewhere.
TagList = JSON().with_variant(ARRAY(Text), "postgresql")


class Post(Base):
    """Article written by an author.

    Only ``published`` posts are visible through the public read paths;
    drafts and archived posts are reachable by their author and admins.
    """

    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'published', 'archived')",
            name="ck_posts_status",
        ),
        CheckConstraint("views >= 0", name="ck_posts_views_non_negative"),
    )

    post_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    excerpt: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    featured_image: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tags: Mapped[list[str]] = mapped_column(TagList, nullable=False, default=list)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="published", index=True)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    author: Mapped[User] = relationship(lazy="joined")
