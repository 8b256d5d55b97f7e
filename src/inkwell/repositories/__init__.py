"""Data access layer: one repository per aggregate."""

from .comment_repo import CommentRepository
from .like_repo import LikeRepository
from .post_repo import PostRepository
from .user_repo import UserRepository

__all__ = ["CommentRepository", "LikeRepository", "PostRepository", "UserRepository"]
