"""Shared API dependencies for authentication and common functionality."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query, UploadFile
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from inkwell.core.errors import ForbiddenError
from inkwell.core.roles import ADMIN, AUTHOR, role_satisfies
from inkwell.db.session import get_db
from inkwell.models import User
from inkwell.services import auth_service
from inkwell.services.media import ImageUpload, MediaStorage, get_media_storage

# HTTP Bearer scheme; missing headers are reported by get_current_user itself.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
MediaStorageDep = Annotated[MediaStorage, Depends(get_media_storage)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent
        db: Database session

    Returns:
        User object for the authenticated user, reloaded on every request

    Raises:
        AuthError: If the token is missing, invalid, expired or orphaned
    """
    token = credentials.credentials if credentials else None
    return auth_service.authenticate_token(db, token)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_role(
    required: str,
    message: str = "Insufficient permissions",
) -> Callable[[User], User]:
    """Build a dependency admitting users whose role ranks at or above ``required``."""

    def _check_role(user: CurrentUserDep) -> User:
        if not role_satisfies(user.role_name, required):
            raise ForbiddenError(message)
        return user

    return _check_role


AuthorDep = Annotated[User, Depends(require_role(AUTHOR))]
AdminDep = Annotated[User, Depends(require_role(ADMIN))]


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int | None

    def offset(self, default_limit: int) -> int:
        return (self.page - 1) * (self.limit or default_limit)


def get_page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> PageParams:
    """Parse ``?page=&limit=`` query parameters."""
    return PageParams(page=page, limit=limit)


PageDep = Annotated[PageParams, Depends(get_page_params)]


async def read_image(upload: UploadFile | None) -> ImageUpload | None:
    """Read an optional multipart file into memory; empty fields count as absent."""
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return ImageUpload(content=content, filename=upload.filename, content_type=upload.content_type)
