"""Data access helpers for working with posts."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from inkwell.models.comment import Comment
from inkwell.models.post import Post

__all__ = ["PostRepository"]

PUBLISHED = "published"


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def _newest_first(self, stmt):
        return stmt.order_by(Post.created_at.desc(), Post.post_id.desc())

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier regardless of status."""
        return self.session.get(Post, post_id)

    def get_published_by_slug(self, slug: str) -> Post | None:
        return self.session.execute(
            select(Post).where(Post.slug == slug, Post.status == PUBLISHED)
        ).scalars().first()

    def slug_exists(self, slug: str) -> bool:
        return self.session.execute(
            select(Post.post_id).where(Post.slug == slug)
        ).first() is not None

    def create(self, **fields) -> Post:
        """Insert a new post and return the persisted ORM instance."""
        post = Post(**fields)
        self.session.add(post)
        self.session.flush()
        return post

    def list_published(self, limit: int | None = None, offset: int = 0) -> list[Post]:
        """Return published posts, newest first."""
        stmt = self._newest_first(select(Post).where(Post.status == PUBLISHED))
        if limit is not None:
            stmt = stmt.limit(limit).offset(offset)
        return list(self.session.execute(stmt).scalars().unique())

    def count_published(self) -> int:
        return self.session.execute(
            select(func.count(Post.post_id)).where(Post.status == PUBLISHED)
        ).scalar_one()

    def list_by_author(
        self,
        author_id: int,
        *,
        published_only: bool,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Post]:
        stmt = select(Post).where(Post.author_id == author_id)
        if published_only:
            stmt = stmt.where(Post.status == PUBLISHED)
        stmt = self._newest_first(stmt)
        if limit is not None:
            stmt = stmt.limit(limit).offset(offset)
        return list(self.session.execute(stmt).scalars().unique())

    def list_all(self) -> list[Post]:
        """Return every post in every status, newest first."""
        return list(self.session.execute(self._newest_first(select(Post))).scalars().unique())

    def published_tag_lists(self) -> list[list[str]]:
        rows = self.session.execute(select(Post.tags).where(Post.status == PUBLISHED)).all()
        return [list(tags or []) for (tags,) in rows]

    def comment_counts(self, post_ids: Iterable[int]) -> dict[int, int]:
        """Return ``{post_id: comment count}`` including replies."""
        ids = list(post_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(Comment.post_id, func.count(Comment.comment_id))
            .where(Comment.post_id.in_(ids))
            .group_by(Comment.post_id)
        ).all()
        return {post_id: count for post_id, count in rows}

    def increment_views(self, post_id: int) -> int:
        """Atomically add one view and return the new total."""
        self.session.execute(
            update(Post)
            .where(Post.post_id == post_id)
            .values(views=Post.views + 1)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(
            select(Post.views).where(Post.post_id == post_id)
        ).scalar_one()

    def delete(self, post: Post) -> None:
        self.session.delete(post)
        self.session.flush()
