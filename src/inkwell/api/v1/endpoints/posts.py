# src/inkwell/api/v1/endpoints/posts.py
"""Post-related endpoints for the Inkwell API."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from inkwell.api.v1.dependencies import (
    AuthorDep,
    CurrentUserDep,
    MediaStorageDep,
    PageDep,
    SessionDep,
    read_image,
)
from inkwell.models import LikeTarget
from inkwell.schemas import LikeRequest, LikeToggleResult, StatusUpdate, envelope
from inkwell.services import like_service, post_service

router = APIRouter(prefix="/posts", tags=["posts"])

_STATUS_MESSAGES = {
    "published": "Post published successfully",
    "draft": "Post moved to draft successfully",
    "archived": "Post archived successfully",
}


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_post(
    author: AuthorDep,
    db: SessionDep,
    storage: MediaStorageDep,
    title: Annotated[str | None, Form()] = None,
    excerpt: Annotated[str | None, Form()] = None,
    content: Annotated[str | None, Form()] = None,
    tags: Annotated[str | None, Form()] = None,
    post_status: Annotated[str | None, Form(alias="status")] = None,
    featuredImage: Annotated[UploadFile | None, File()] = None,
) -> dict:
    """Create a post from a multipart form.

    Args:
        author: Authenticated user holding at least the author role
        db: Database session
        storage: Backend for the optional featured image
        title: Post title
        excerpt: Short summary shown in listings
        content: HTML body
        tags: Comma separated tags
        post_status: ``draft``, ``published`` (default) or ``archived``
        featuredImage: Optional cover image

    Returns:
        The created post with author details
    """
    image = await read_image(featuredImage)
    post = await asyncio.to_thread(
        post_service.create_post,
        db,
        author,
        title=title,
        excerpt=excerpt,
        content=content,
        tags=tags,
        status=post_status,
        featured_image=image,
        storage=storage,
    )
    message = (
        "Post saved as draft successfully" if post.status == "draft" else "Post published successfully"
    )
    return envelope(data=post, message=message)


@router.get("")
def list_posts(db: SessionDep, paging: PageDep) -> dict:
    """Paginated published posts."""
    return envelope(data=post_service.list_published(db, paging.page, paging.limit))


@router.get("/public")
def public_posts(
    db: SessionDep,
    tag: Annotated[str | None, Query()] = None,
    q: Annotated[str | None, Query()] = None,
    author: Annotated[str | None, Query()] = None,
) -> dict:
    """All published posts, optionally narrowed by tag, search text and author name."""
    return envelope(data=post_service.public_posts(db, tag, q, author))


@router.get("/tags")
def tags(db: SessionDep) -> dict:
    return envelope(data=post_service.tag_histogram(db))


@router.get("/authors")
def authors(db: SessionDep) -> dict:
    return envelope(data=post_service.public_authors(db))


@router.get("/author/{author_id}")
def posts_by_author(author_id: int, db: SessionDep, paging: PageDep) -> dict:
    return envelope(data=post_service.posts_by_author(db, author_id, paging.page, paging.limit))


@router.get("/author/{author_id}/all")
def author_posts(
    author_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    paging: PageDep,
) -> dict:
    """Every post of an author including drafts; the author or an admin only."""
    posts = post_service.author_posts(db, author_id, current_user, paging.page, paging.limit)
    return envelope(data=posts)


@router.get("/{slug}")
def get_post(slug: str, db: SessionDep) -> dict:
    """Fetch a published post by slug, counting the view."""
    return envelope(data=post_service.get_post_by_slug(db, slug))


@router.put("/{post_id}")
async def update_post(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    storage: MediaStorageDep,
    title: Annotated[str | None, Form()] = None,
    excerpt: Annotated[str | None, Form()] = None,
    content: Annotated[str | None, Form()] = None,
    tags: Annotated[str | None, Form()] = None,
    post_status: Annotated[str | None, Form(alias="status")] = None,
    featuredImage: Annotated[UploadFile | None, File()] = None,
) -> dict:
    image = await read_image(featuredImage)
    post = await asyncio.to_thread(
        post_service.update_post,
        db,
        post_id,
        current_user,
        title=title,
        excerpt=excerpt,
        content=content,
        tags=tags,
        status=post_status,
        featured_image=image,
        storage=storage,
    )
    return envelope(data=post, message="Post updated successfully")


@router.patch("/{post_id}/status")
def update_post_status(
    post_id: int,
    body: StatusUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict:
    post = post_service.set_status(db, post_id, body.status, current_user)
    return envelope(data=post, message=_STATUS_MESSAGES[post.status])


@router.delete("/{post_id}")
def delete_post(post_id: int, current_user: CurrentUserDep, db: SessionDep) -> dict:
    post_service.delete_post(db, post_id, current_user)
    return envelope(message="Post deleted successfully")


@router.post("/{post_id}/like")
def toggle_post_like(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    body: LikeRequest | None = None,
) -> dict:
    """Like or unlike a post; any existing reaction is removed first."""
    post_service.get_post_or_404(db, post_id)
    target = LikeTarget.post(post_id)
    like_type = body.likeType if body else "like"
    result = like_service.toggle_like(db, current_user.user_id, target, like_type)
    like_count = like_service.get_like_count(db, target)
    return envelope(
        data=LikeToggleResult(liked=result.liked, likeCount=like_count),
        message="Post liked" if result.action == "added" else "Post unliked",
    )
