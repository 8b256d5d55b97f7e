# src/inkwell/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentRead, CommentUpdate
from .common import Pagination, envelope
from .like import LikeRequest, LikeStats, LikeToggleResult, UserLikeRead
from .post import AuthorSummary, PostPage, PostRead, StatusUpdate, TagCount
from .user import LoginRequest, ProfileUpdate, RoleUpdate, UserAdminRow, UserProfile

__all__ = [
    "CommentCreate", "CommentRead", "CommentUpdate",
    "Pagination", "envelope",
    "LikeRequest", "LikeStats", "LikeToggleResult", "UserLikeRead",
    "AuthorSummary", "PostPage", "PostRead", "StatusUpdate", "TagCount",
    "LoginRequest", "ProfileUpdate", "RoleUpdate", "UserAdminRow", "UserProfile",
]
