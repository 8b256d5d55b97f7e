"""Pure derived views over post collections.

These mirror the filters a client applies to the public post list. They take
plain sequences (dicts or objects with post attributes), never touch the
database, and return new lists without mutating their input.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from inkwell.schemas.post import AuthorSummary


def _get(post: Any, name: str) -> Any:
    if isinstance(post, Mapping):
        return post.get(name)
    return getattr(post, name, None)


def _matches_tag(post: Any, tag: str | None) -> bool:
    if not tag:
        return True
    return tag in (_get(post, "tags") or [])


def _matches_search(post: Any, search_query: str | None) -> bool:
    if not search_query:
        return True
    needle = search_query.lower()
    title = (_get(post, "title") or "").lower()
    excerpt = (_get(post, "excerpt") or "").lower()
    return needle in title or needle in excerpt


def _matches_author(post: Any, author_name: str | None) -> bool:
    if not author_name:
        return True
    return author_name.lower() in (_get(post, "username") or "").lower()


def filtered_posts(
    posts: Iterable[Any],
    tag: str | None = None,
    search_query: str | None = None,
    author_name: str | None = None,
) -> list[Any]:
    """Return the posts matching every non-empty filter, in input order."""
    return [
        post
        for post in posts
        if _matches_tag(post, tag)
        and _matches_search(post, search_query)
        and _matches_author(post, author_name)
    ]


def unique_authors(posts: Iterable[Any]) -> list[AuthorSummary]:
    """Group posts by author name, most prolific first.

    The avatar is the one seen on the author's first post. Ties keep
    first-seen order.
    """
    seen: dict[str, dict[str, Any]] = {}
    for post in posts:
        username = _get(post, "username")
        if not username:
            continue
        entry = seen.get(username)
        if entry is None:
            seen[username] = {
                "name": username,
                "profile_picture": _get(post, "profile_picture"),
                "count": 1,
            }
        else:
            entry["count"] += 1
    ordered = sorted(seen.values(), key=lambda entry: entry["count"], reverse=True)
    return [AuthorSummary(**entry) for entry in ordered]
