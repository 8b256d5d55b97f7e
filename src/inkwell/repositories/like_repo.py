"""Data access helpers for likes."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from inkwell.models.like import Like, LikeTarget

__all__ = ["LikeRepository"]


class LikeRepository:
    """Queries over the polymorphic ``likes`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find(self, user_id: int, target: LikeTarget) -> Like | None:
        """Return the user's reaction on ``target`` whatever its type."""
        return self.session.execute(
            select(Like).where(
                Like.user_id == user_id,
                Like.target_type == target.target_type,
                Like.target_id == target.target_id,
            )
        ).scalars().first()

    def add(self, user_id: int, target: LikeTarget, like_type: str) -> Like:
        like = Like(
            user_id=user_id,
            target_type=target.target_type,
            target_id=target.target_id,
            like_type=like_type,
        )
        self.session.add(like)
        self.session.flush()
        return like

    def remove(self, like: Like) -> None:
        self.session.delete(like)
        self.session.flush()

    def count(self, target: LikeTarget, like_type: str = "like") -> int:
        """Count rows of exactly ``like_type`` on ``target``."""
        return self.session.execute(
            select(func.count(Like.like_id)).where(
                Like.target_type == target.target_type,
                Like.target_id == target.target_id,
                Like.like_type == like_type,
            )
        ).scalar_one()

    def counts_for(
        self,
        target_type: str,
        target_ids: Iterable[int],
        like_type: str = "like",
    ) -> dict[int, int]:
        """Return ``{target_id: count}`` for many targets in one query."""
        ids = list(target_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(Like.target_id, func.count(Like.like_id))
            .where(
                Like.target_type == target_type,
                Like.target_id.in_(ids),
                Like.like_type == like_type,
            )
            .group_by(Like.target_id)
        ).all()
        return {target_id: count for target_id, count in rows}

    def delete_for_targets(self, target_type: str, target_ids: Iterable[int]) -> int:
        """Remove every like pointing at the given targets; returns the row count."""
        ids = list(target_ids)
        if not ids:
            return 0
        result = self.session.execute(
            delete(Like).where(Like.target_type == target_type, Like.target_id.in_(ids))
        )
        return result.rowcount or 0

    def list_for_user(self, user_id: int) -> list[Like]:
        result = self.session.execute(
            select(Like)
            .where(Like.user_id == user_id)
            .order_by(Like.created_at.desc(), Like.like_id.desc())
        )
        return list(result.scalars())

    def count_received(self, target_type: str, target_ids: Iterable[int]) -> int:
        """Count ``like`` rows across a set of targets."""
        ids = list(target_ids)
        if not ids:
            return 0
        return self.session.execute(
            select(func.count(Like.like_id)).where(
                Like.target_type == target_type,
                Like.target_id.in_(ids),
                Like.like_type == "like",
            )
        ).scalar_one()
