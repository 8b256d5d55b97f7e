# src/inkwell/models/__init__.py
"""SQLAlchemy models for the Inkwell application."""

from .comment import Comment
from .like import LIKE_TYPES, TARGET_TYPES, Like, LikeTarget
from .post import POST_STATUSES, Post
from .role import Role
from .user import User

__all__ = [
    "Comment",
    "Like", "LikeTarget", "LIKE_TYPES", "TARGET_TYPES",
    "Post", "POST_STATUSES",
    "Role",
    "User",
]
