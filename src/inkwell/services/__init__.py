# src/inkwell/services/__init__.py
"""Domain services orchestrating repositories, storage and authorization."""

from . import auth_service, comment_service, like_service, post_service, selectors, user_service

__all__ = [
    "auth_service",
    "comment_service",
    "like_service",
    "post_service",
    "selectors",
    "user_service",
]
