"""Like and dislike toggling on posts and comments."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inkwell.core.errors import ConflictError, ValidationError
from inkwell.models.like import LIKE_TYPES, TARGET_TYPES, LikeTarget
from inkwell.repositories.comment_repo import CommentRepository
from inkwell.repositories.like_repo import LikeRepository
from inkwell.repositories.post_repo import PostRepository
from inkwell.schemas.like import LikeStats, UserLikeRead

logger = logging.getLogger(__name__)

__all__ = [
    "ToggleResult",
    "toggle_like",
    "get_like_count",
    "user_like",
    "user_likes",
    "content_like_stats",
]


@dataclass(frozen=True)
class ToggleResult:
    action: str
    liked: bool


def _check(target: LikeTarget, like_type: str) -> None:
    if target.target_type not in TARGET_TYPES:
        raise ValidationError("Invalid target type. Must be post or comment")
    if like_type not in LIKE_TYPES:
        raise ValidationError("Invalid like type. Must be like or dislike")


def toggle_like(
    db: Session,
    user_id: int,
    target: LikeTarget,
    like_type: str = "like",
) -> ToggleResult:
    """Flip the user's reaction on ``target``.

    Any existing reaction is removed, whatever its type; only when there is
    none is a new row of ``like_type`` inserted. Switching from like to
    dislike therefore takes two calls.

    Raises:
        ConflictError: A concurrent request inserted the same reaction first.
    """
    _check(target, like_type)
    repo = LikeRepository(db)
    existing = repo.find(user_id, target)
    try:
        if existing is not None:
            repo.remove(existing)
            result = ToggleResult(action="removed", liked=False)
        else:
            repo.add(user_id, target, like_type)
            result = ToggleResult(action="added", liked=True)
        db.commit()
    except IntegrityError as err:
        db.rollback()
        logger.warning("Duplicate like by user %d on %s %d", user_id, *target)
        raise ConflictError("Like already recorded") from err
    return result


def get_like_count(db: Session, target: LikeTarget, like_type: str = "like") -> int:
    """Count reactions of exactly ``like_type``; likes and dislikes are never netted."""
    _check(target, like_type)
    return LikeRepository(db).count(target, like_type)


def user_like(db: Session, user_id: int, target: LikeTarget) -> str | None:
    """Return the user's reaction type on ``target``, if any."""
    like = LikeRepository(db).find(user_id, target)
    return like.like_type if like else None


def user_likes(db: Session, user_id: int) -> list[UserLikeRead]:
    """List the user's reactions with the title of what they point at."""
    likes = LikeRepository(db).list_for_user(user_id)
    post_repo = PostRepository(db)
    comment_repo = CommentRepository(db)
    rows: list[UserLikeRead] = []
    for like in likes:
        title = None
        if like.target_type == "post":
            post = post_repo.get_by_id(like.target_id)
            title = post.title if post else None
        else:
            comment = comment_repo.get_by_id(like.target_id)
            title = comment.content[:100] if comment else None
        rows.append(
            UserLikeRead(
                like_id=like.like_id,
                target_type=like.target_type,
                target_id=like.target_id,
                like_type=like.like_type,
                created_at=like.created_at,
                target_title=title,
            )
        )
    return rows


def content_like_stats(db: Session, user_id: int) -> LikeStats:
    """Count likes received on the user's own posts and comments."""
    like_repo = LikeRepository(db)
    post_ids = [post.post_id for post in PostRepository(db).list_by_author(user_id, published_only=False)]
    comment_ids = CommentRepository(db).ids_for_author(user_id)
    post_likes = like_repo.count_received("post", post_ids)
    comment_likes = like_repo.count_received("comment", comment_ids)
    return LikeStats(
        post_likes=post_likes,
        comment_likes=comment_likes,
        total_likes=post_likes + comment_likes,
    )
