# src/inkwell/api/v1/endpoints/comments.py
"""Comment and reply endpoints, nested under ``/posts``."""

from fastapi import APIRouter, status

from inkwell.api.v1.dependencies import CurrentUserDep, PageDep, SessionDep
from inkwell.core.settings import settings
from inkwell.models import LikeTarget
from inkwell.schemas import CommentCreate, CommentUpdate, LikeRequest, LikeToggleResult, envelope
from inkwell.services import comment_service, like_service

router = APIRouter(prefix="/posts", tags=["comments"])


@router.post("/comments", status_code=status.HTTP_201_CREATED)
def create_comment(body: CommentCreate, current_user: CurrentUserDep, db: SessionDep) -> dict:
    """Add a comment to a post, or a reply when ``parentCommentId`` is set."""
    comment = comment_service.create_comment(
        db,
        current_user,
        content=body.content,
        post_id=body.postId,
        parent_comment_id=body.parentCommentId,
    )
    return envelope(data=comment, message="Comment added successfully")


@router.get("/comments/{comment_id}/replies")
def comment_replies(
    comment_id: int,
    _: CurrentUserDep,
    db: SessionDep,
    paging: PageDep,
) -> dict:
    limit = paging.limit or settings.default_replies_page_size
    replies = comment_service.get_comment_replies(
        db, comment_id, limit, paging.offset(settings.default_replies_page_size)
    )
    return envelope(data=replies)


@router.put("/comments/{comment_id}")
def update_comment(
    comment_id: int,
    body: CommentUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict:
    comment = comment_service.update_comment(db, comment_id, body.content, current_user)
    return envelope(data=comment, message="Comment updated successfully")


@router.delete("/comments/{comment_id}")
def delete_comment(comment_id: int, current_user: CurrentUserDep, db: SessionDep) -> dict:
    """Delete a comment together with its replies."""
    comment_service.delete_comment(db, comment_id, current_user)
    return envelope(message="Comment deleted successfully")


@router.post("/comments/{comment_id}/like")
def toggle_comment_like(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    body: LikeRequest | None = None,
) -> dict:
    comment_service.get_comment_or_404(db, comment_id)
    target = LikeTarget.comment(comment_id)
    like_type = body.likeType if body else "like"
    result = like_service.toggle_like(db, current_user.user_id, target, like_type)
    like_count = like_service.get_like_count(db, target)
    return envelope(
        data=LikeToggleResult(liked=result.liked, likeCount=like_count),
        message="Comment liked" if result.action == "added" else "Comment unliked",
    )


@router.get("/user/{user_id}/comments")
def user_comments(user_id: int, _: CurrentUserDep, db: SessionDep, paging: PageDep) -> dict:
    comments = comment_service.comments_by_user(
        db, user_id, paging.limit, paging.offset(settings.default_page_size)
    )
    return envelope(data=comments)


@router.get("/{post_id}/comments")
def post_comments(post_id: int, _: CurrentUserDep, db: SessionDep, paging: PageDep) -> dict:
    """Top-level comments, newest first, each with its nested replies."""
    comments = comment_service.get_post_comments_with_replies(
        db, post_id, paging.limit, paging.offset(settings.default_page_size)
    )
    return envelope(data=comments)
