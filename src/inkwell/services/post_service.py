"""Service-level helpers for the post lifecycle."""
from __future__ import annotations

import logging
import re
import secrets
import time
from collections import Counter
from collections.abc import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inkwell.core import roles
from inkwell.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from inkwell.core.settings import settings
from inkwell.db.session import utcnow
from inkwell.models.post import POST_STATUSES, Post
from inkwell.models.user import User
from inkwell.repositories.comment_repo import CommentRepository
from inkwell.repositories.like_repo import LikeRepository
from inkwell.repositories.post_repo import PostRepository
from inkwell.schemas.common import Pagination
from inkwell.schemas.post import AuthorSummary, PostPage, PostRead, TagCount
from inkwell.services import selectors
from inkwell.services.media import POST_IMAGE_FOLDER, ImageUpload, MediaStorage

logger = logging.getLogger(__name__)

INVALID_STATUS_MESSAGE = "Invalid status. Must be draft, published, or archived"
POST_NOT_FOUND_MESSAGE = "Post not found"
TITLE_MAX_LENGTH = 200
EXCERPT_MAX_LENGTH = 500

_STRIP_PATTERN = re.compile(r"[^a-z0-9 -]")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_HYPHENS_PATTERN = re.compile(r"-+")


def generate_slug(title: str, now_ms: int | None = None) -> str:
    """Derive a URL slug from ``title`` with a millisecond timestamp suffix.

    Leading and trailing hyphens are deliberately trimmed, so ``" Hello"``
    yields ``hello-<ts>`` rather than ``-hello-<ts>``. A title with no
    usable characters falls back to ``post-<ts>`` instead of a bare
    ``-<ts>``.

    Args:
        title: Post title.
        now_ms: Epoch milliseconds; defaults to the current time.

    Returns:
        Lower-case slug such as ``hello-world-1700000000000``.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    base = _STRIP_PATTERN.sub("", title.lower())
    base = _WHITESPACE_PATTERN.sub("-", base)
    base = _HYPHENS_PATTERN.sub("-", base).strip("-")
    return f"{base or 'post'}-{now_ms}"


def parse_tags(raw: str | Sequence[str] | None) -> list[str]:
    """Split a comma separated tag string, trimming and dropping blanks."""
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    return [tag.strip() for tag in parts if tag and tag.strip()]


def _validate_status(status: str) -> str:
    if status not in POST_STATUSES:
        raise ValidationError(INVALID_STATUS_MESSAGE)
    return status


def _validate_lengths(title: str | None, excerpt: str | None) -> None:
    if title is not None and len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    if excerpt is not None and len(excerpt) > EXCERPT_MAX_LENGTH:
        raise ValidationError(f"Excerpt must be at most {EXCERPT_MAX_LENGTH} characters")


def _can_manage(post: Post, user: User) -> bool:
    return post.author_id == user.user_id or roles.role_satisfies(user.role_name, roles.ADMIN)


def to_post_reads(db: Session, posts: Sequence[Post]) -> list[PostRead]:
    """Convert posts to API schemas with comment and like counters attached."""
    ids = [post.post_id for post in posts]
    comment_counts = PostRepository(db).comment_counts(ids)
    like_counts = LikeRepository(db).counts_for("post", ids)
    return [
        PostRead.model_validate(post).model_copy(
            update={
                "comment_count": comment_counts.get(post.post_id, 0),
                "like_count": like_counts.get(post.post_id, 0),
            }
        )
        for post in posts
    ]


def get_post_or_404(db: Session, post_id: int) -> Post:
    post = PostRepository(db).get_by_id(post_id)
    if post is None:
        raise NotFoundError(POST_NOT_FOUND_MESSAGE)
    return post


def create_post(
    db: Session,
    author: User,
    *,
    title: str | None,
    excerpt: str | None,
    content: str | None,
    tags: str | Sequence[str] | None = None,
    status: str | None = None,
    featured_image: ImageUpload | None = None,
    storage: MediaStorage | None = None,
) -> PostRead:
    """Create a post, retrying the slug on collision.

    Raises:
        ValidationError: Missing fields, overlong fields or an unknown status.
        ConflictError: No unique slug could be found.
    """
    if not (title and title.strip()) or not (excerpt and excerpt.strip()) or not (
        content and content.strip()
    ):
        raise ValidationError("Title, excerpt and content are required")
    _validate_lengths(title, excerpt)
    status = _validate_status(status or "published")

    image_url = None
    if featured_image is not None and storage is not None:
        image_url = storage.save(featured_image, POST_IMAGE_FOLDER)

    repo = PostRepository(db)
    author_id = author.user_id
    tag_list = parse_tags(tags)
    slug = generate_slug(title)
    post: Post | None = None
    for attempt in range(1, settings.slug_max_attempts + 1):
        if not repo.slug_exists(slug):
            try:
                post = repo.create(
                    title=title,
                    excerpt=excerpt,
                    content=content,
                    featured_image=image_url,
                    tags=tag_list,
                    author_id=author_id,
                    slug=slug,
                    status=status,
                )
                db.commit()
                break
            except IntegrityError:
                db.rollback()
                post = None
                logger.warning("Slug collision on insert for %s (attempt %d)", slug, attempt)
        slug = f"{generate_slug(title)}-{secrets.token_hex(3)}"

    if post is None:
        raise ConflictError("Could not generate a unique slug for this title")

    db.refresh(post)
    logger.info("Post %d created by user %d as %s", post.post_id, author_id, status)
    return to_post_reads(db, [post])[0]


def list_published(db: Session, page: int = 1, limit: int | None = None) -> PostPage:
    """Return one page of published posts with pagination metadata."""
    limit = limit or settings.default_page_size
    page = max(page, 1)
    repo = PostRepository(db)
    posts = repo.list_published(limit=limit, offset=(page - 1) * limit)
    total = repo.count_published()
    return PostPage(posts=to_post_reads(db, posts), pagination=Pagination.build(page, limit, total))


def public_posts(
    db: Session,
    tag: str | None = None,
    search_query: str | None = None,
    author_name: str | None = None,
) -> list[PostRead]:
    """Every published post, newest first, narrowed by the optional filters."""
    posts = to_post_reads(db, PostRepository(db).list_published())
    return selectors.filtered_posts(posts, tag, search_query, author_name)


def public_authors(db: Session) -> list[AuthorSummary]:
    return selectors.unique_authors(public_posts(db))


def tag_histogram(db: Session) -> list[TagCount]:
    """Count tags across published posts, most used first, then by name."""
    counter: Counter[str] = Counter()
    for tags in PostRepository(db).published_tag_lists():
        counter.update(tags)
    ordered = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return [TagCount(name=name, count=count) for name, count in ordered[: settings.tag_histogram_limit]]


def get_post_by_slug(db: Session, slug: str) -> PostRead:
    """Fetch a published post and count the view.

    The returned ``views`` already includes this fetch.
    """
    repo = PostRepository(db)
    post = repo.get_published_by_slug(slug)
    if post is None:
        raise NotFoundError(POST_NOT_FOUND_MESSAGE)
    views = repo.increment_views(post.post_id)
    db.commit()
    return to_post_reads(db, [post])[0].model_copy(update={"views": views})


def posts_by_author(
    db: Session, author_id: int, page: int = 1, limit: int | None = None
) -> list[PostRead]:
    """Published posts of one author."""
    limit = limit or settings.default_page_size
    posts = PostRepository(db).list_by_author(
        author_id, published_only=True, limit=limit, offset=(max(page, 1) - 1) * limit
    )
    return to_post_reads(db, posts)


def author_posts(
    db: Session,
    author_id: int,
    acting_user: User,
    page: int = 1,
    limit: int | None = None,
) -> list[PostRead]:
    """All of an author's posts including drafts; only for that author or an admin."""
    if acting_user.user_id != author_id and not roles.role_satisfies(
        acting_user.role_name, roles.ADMIN
    ):
        raise ForbiddenError("Unauthorized to view these posts")
    limit = limit or settings.default_page_size
    posts = PostRepository(db).list_by_author(
        author_id, published_only=False, limit=limit, offset=(max(page, 1) - 1) * limit
    )
    return to_post_reads(db, posts)


def update_post(
    db: Session,
    post_id: int,
    acting_user: User,
    *,
    title: str | None = None,
    excerpt: str | None = None,
    content: str | None = None,
    tags: str | Sequence[str] | None = None,
    status: str | None = None,
    featured_image: ImageUpload | None = None,
    storage: MediaStorage | None = None,
) -> PostRead:
    """Apply a partial update; ``None`` leaves a field unchanged.

    Raises:
        ValidationError: A sent field fails the checks applied at creation.
    """
    post = get_post_or_404(db, post_id)
    if not _can_manage(post, acting_user):
        raise ForbiddenError("Not authorized to update this post")
    if any(value is not None and not value.strip() for value in (title, excerpt, content)):
        raise ValidationError("Title, excerpt and content cannot be blank")
    _validate_lengths(title, excerpt)
    if status is not None:
        _validate_status(status)

    if featured_image is not None and storage is not None:
        post.featured_image = storage.save(featured_image, POST_IMAGE_FOLDER)
    if title is not None:
        post.title = title
    if excerpt is not None:
        post.excerpt = excerpt
    if content is not None:
        post.content = content
    if tags is not None:
        post.tags = parse_tags(tags)
    if status is not None:
        post.status = status
    post.updated_at = utcnow()
    db.commit()
    db.refresh(post)
    return to_post_reads(db, [post])[0]


def set_status(db: Session, post_id: int, new_status: str | None, acting_user: User) -> PostRead:
    """Move a post to another lifecycle state; any transition is allowed."""
    _validate_status(new_status or "")
    post = get_post_or_404(db, post_id)
    if not _can_manage(post, acting_user):
        raise ForbiddenError("Not authorized to update this post")
    post.status = new_status
    post.updated_at = utcnow()
    db.commit()
    db.refresh(post)
    logger.info("Post %d moved to %s by user %d", post_id, new_status, acting_user.user_id)
    return to_post_reads(db, [post])[0]


def delete_post(db: Session, post_id: int, acting_user: User) -> None:
    """Delete a post with its comments and every like on either, atomically."""
    post = get_post_or_404(db, post_id)
    if not _can_manage(post, acting_user):
        raise ForbiddenError("Not authorized to delete this post")

    comment_repo = CommentRepository(db)
    like_repo = LikeRepository(db)
    try:
        like_repo.delete_for_targets("comment", comment_repo.ids_for_post(post_id))
        like_repo.delete_for_targets("post", [post_id])
        comment_repo.delete_for_post(post_id)
        PostRepository(db).delete(post)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Post %d deleted by user %d", post_id, acting_user.user_id)


def all_posts_with_authors(db: Session) -> list[PostRead]:
    """Every post in every status with author name and email, for admins."""
    posts = PostRepository(db).list_all()
    reads = to_post_reads(db, posts)
    return [
        read.model_copy(update={"user_email": post.author.user_email})
        for read, post in zip(reads, posts, strict=True)
    ]
