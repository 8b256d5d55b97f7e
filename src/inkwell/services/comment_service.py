"""Comment threads: creation, tree reads, edits and subtree deletion."""
from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence

from sqlalchemy.orm import Session

from inkwell.core import roles
from inkwell.core.errors import ForbiddenError, NotFoundError, ValidationError
from inkwell.core.settings import settings
from inkwell.db.session import utcnow
from inkwell.models.comment import Comment
from inkwell.models.user import User
from inkwell.repositories.comment_repo import CommentRepository
from inkwell.repositories.like_repo import LikeRepository
from inkwell.repositories.post_repo import PostRepository
from inkwell.schemas.comment import CommentRead

logger = logging.getLogger(__name__)

COMMENT_NOT_FOUND_MESSAGE = "Comment not found"


def _to_reads(db: Session, comments: Sequence[Comment]) -> list[CommentRead]:
    ids = [comment.comment_id for comment in comments]
    like_counts = LikeRepository(db).counts_for("comment", ids)
    reply_counts = CommentRepository(db).reply_counts(ids)
    return [
        CommentRead.model_validate(comment).model_copy(
            update={
                "like_count": like_counts.get(comment.comment_id, 0),
                "reply_count": reply_counts.get(comment.comment_id, 0),
            }
        )
        for comment in comments
    ]


def build_comment_tree(
    top_level: Sequence[CommentRead],
    replies: Sequence[CommentRead],
) -> list[CommentRead]:
    """Attach ``replies`` beneath their parents at any depth.

    ``replies`` is the flat, oldest-first list of every reply on the post;
    children keep that order under each parent. Replies whose parent is not
    reachable from ``top_level`` are left out.
    """
    children: dict[int, list[CommentRead]] = defaultdict(list)
    for reply in replies:
        if reply.parent_comment_id is not None:
            children[reply.parent_comment_id].append(reply)

    def attach(node: CommentRead, ancestors: frozenset[int]) -> CommentRead:
        path = ancestors | {node.comment_id}
        nested = [
            attach(child, path)
            for child in children.get(node.comment_id, [])
            if child.comment_id not in path
        ]
        return node.model_copy(update={"replies": nested})

    return [attach(comment, frozenset()) for comment in top_level]


def create_comment(
    db: Session,
    author: User,
    *,
    content: str | None,
    post_id: int | None,
    parent_comment_id: int | None = None,
) -> CommentRead:
    """Add a comment or reply after checking the post and parent exist.

    Raises:
        ValidationError: Missing content or post, or a parent from another post.
        NotFoundError: The post or the parent comment does not exist.
    """
    if not content or not content.strip() or post_id is None:
        raise ValidationError("Content and post ID are required")

    if PostRepository(db).get_by_id(post_id) is None:
        raise NotFoundError("Post not found")

    repo = CommentRepository(db)
    if parent_comment_id is not None:
        parent = repo.get_by_id(parent_comment_id)
        if parent is None:
            raise NotFoundError("Parent comment not found")
        if parent.post_id != post_id:
            raise ValidationError("Parent comment belongs to a different post")

    comment = repo.create(
        content=content,
        post_id=post_id,
        author_id=author.user_id,
        parent_comment_id=parent_comment_id,
    )
    db.commit()
    db.refresh(comment)
    return _to_reads(db, [comment])[0]


def get_post_comments_with_replies(
    db: Session, post_id: int, limit: int | None = None, offset: int = 0
) -> list[CommentRead]:
    """Return a page of top-level comments, newest first, each with its full reply tree."""
    if PostRepository(db).get_by_id(post_id) is None:
        raise NotFoundError("Post not found")
    limit = limit or settings.default_page_size
    repo = CommentRepository(db)
    top_level = _to_reads(db, repo.list_top_level(post_id, limit, offset))
    if not top_level:
        return []
    replies = _to_reads(db, repo.list_post_replies(post_id))
    return build_comment_tree(top_level, replies)


def get_comment_replies(
    db: Session, comment_id: int, limit: int | None = None, offset: int = 0
) -> list[CommentRead]:
    """Direct replies of one comment, oldest first."""
    repo = CommentRepository(db)
    if repo.get_by_id(comment_id) is None:
        raise NotFoundError(COMMENT_NOT_FOUND_MESSAGE)
    limit = limit or settings.default_replies_page_size
    return _to_reads(db, repo.list_direct_replies(comment_id, limit, offset))


def get_comment_or_404(db: Session, comment_id: int) -> Comment:
    comment = CommentRepository(db).get_by_id(comment_id)
    if comment is None:
        raise NotFoundError(COMMENT_NOT_FOUND_MESSAGE)
    return comment


def update_comment(
    db: Session, comment_id: int, content: str | None, acting_user: User
) -> CommentRead:
    """Edit a comment; only its author may do so."""
    comment = get_comment_or_404(db, comment_id)
    if comment.author_id != acting_user.user_id:
        raise ForbiddenError("Not authorized to update this comment")
    if not content or not content.strip():
        raise ValidationError("Content is required")

    now = utcnow()
    comment.content = content
    comment.is_edited = True
    comment.edited_at = now
    comment.updated_at = now
    db.commit()
    db.refresh(comment)
    return _to_reads(db, [comment])[0]


def delete_comment(db: Session, comment_id: int, acting_user: User) -> int:
    """Delete a comment, its whole reply subtree and their likes in one transaction.

    Returns:
        Number of comments removed.
    """
    comment = get_comment_or_404(db, comment_id)
    if comment.author_id != acting_user.user_id and not roles.role_satisfies(
        acting_user.role_name, roles.ADMIN
    ):
        raise ForbiddenError("Not authorized to delete this comment")

    repo = CommentRepository(db)
    try:
        subtree = repo.subtree_ids(comment_id)
        LikeRepository(db).delete_for_targets("comment", subtree)
        deleted = repo.delete_ids(subtree)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Comment %d and %d replies deleted", comment_id, deleted - 1)
    return deleted


def comments_by_user(
    db: Session, user_id: int, limit: int | None = None, offset: int = 0
) -> list[CommentRead]:
    """A user's comments, newest first, with the title and slug of their post."""
    limit = limit or settings.default_page_size
    rows = CommentRepository(db).list_by_user(user_id, limit, offset)
    reads = _to_reads(db, [comment for comment, _, _ in rows])
    return [
        read.model_copy(update={"post_title": title, "post_slug": slug})
        for read, (_, title, slug) in zip(reads, rows, strict=True)
    ]
