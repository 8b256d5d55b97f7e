"""Data access helpers for comments and reply threads."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from inkwell.models.comment import Comment
from inkwell.models.post import Post

__all__ = ["CommentRepository"]


class CommentRepository:
    """Thin wrapper around database access for comment entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, comment_id: int) -> Comment | None:
        return self.session.get(Comment, comment_id)

    def create(
        self,
        *,
        content: str,
        post_id: int,
        author_id: int,
        parent_comment_id: int | None = None,
    ) -> Comment:
        """Insert a comment and return the persisted ORM instance."""
        comment = Comment(
            content=content,
            post_id=post_id,
            author_id=author_id,
            parent_comment_id=parent_comment_id,
        )
        self.session.add(comment)
        self.session.flush()
        return comment

    def list_top_level(self, post_id: int, limit: int, offset: int) -> list[Comment]:
        """Return a page of top-level comments on a post, newest first."""
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id, Comment.parent_comment_id.is_(None))
            .order_by(Comment.created_at.desc(), Comment.comment_id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.execute(stmt).scalars().unique())

    def list_post_replies(self, post_id: int) -> list[Comment]:
        """Return every reply on a post at any depth, oldest first."""
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id, Comment.parent_comment_id.is_not(None))
            .order_by(Comment.created_at.asc(), Comment.comment_id.asc())
        )
        return list(self.session.execute(stmt).scalars().unique())

    def list_direct_replies(self, comment_id: int, limit: int, offset: int) -> list[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.parent_comment_id == comment_id)
            .order_by(Comment.created_at.asc(), Comment.comment_id.asc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.execute(stmt).scalars().unique())

    def reply_counts(self, comment_ids: Iterable[int]) -> dict[int, int]:
        """Return ``{comment_id: direct reply count}``."""
        ids = list(comment_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(Comment.parent_comment_id, func.count(Comment.comment_id))
            .where(Comment.parent_comment_id.in_(ids))
            .group_by(Comment.parent_comment_id)
        ).all()
        return {parent_id: count for parent_id, count in rows}

    def list_by_user(
        self, user_id: int, limit: int, offset: int
    ) -> list[tuple[Comment, str, str]]:
        """Return the user's comments, newest first, with their post title and slug."""
        stmt = (
            select(Comment, Post.title, Post.slug)
            .join(Post, Comment.post_id == Post.post_id)
            .where(Comment.author_id == user_id)
            .order_by(Comment.created_at.desc(), Comment.comment_id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [(comment, title, slug) for comment, title, slug in self.session.execute(stmt).unique()]

    def ids_for_post(self, post_id: int) -> list[int]:
        return list(
            self.session.execute(
                select(Comment.comment_id).where(Comment.post_id == post_id)
            ).scalars()
        )

    def ids_for_author(self, author_id: int) -> list[int]:
        return list(
            self.session.execute(
                select(Comment.comment_id).where(Comment.author_id == author_id)
            ).scalars()
        )

    def subtree_ids(self, comment_id: int) -> list[int]:
        """Return ``comment_id`` and the ids of all its descendants."""
        collected = [comment_id]
        frontier = [comment_id]
        while frontier:
            children = list(
                self.session.execute(
                    select(Comment.comment_id).where(Comment.parent_comment_id.in_(frontier))
                ).scalars()
            )
            collected.extend(children)
            frontier = children
        return collected

    def delete_ids(self, comment_ids: Iterable[int]) -> int:
        """Delete the given comments, children before parents."""
        ids = list(comment_ids)
        if not ids:
            return 0
        deleted = 0
        # Reverse breadth-first order removes leaves first so the self FK never dangles.
        for comment_id in reversed(ids):
            result = self.session.execute(
                delete(Comment).where(Comment.comment_id == comment_id)
            )
            deleted += result.rowcount or 0
        return deleted

    def delete_for_post(self, post_id: int) -> int:
        """Delete every comment on a post."""
        ids = self.ids_for_post(post_id)
        if not ids:
            return 0
        # Break the self-reference first so a single bulk delete is order independent.
        self.session.execute(
            Comment.__table__.update()
            .where(Comment.post_id == post_id)
            .values(parent_comment_id=None)
        )
        result = self.session.execute(delete(Comment).where(Comment.post_id == post_id))
        return result.rowcount or 0
