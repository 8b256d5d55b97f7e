"""Registration, login and bearer-token authentication."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inkwell.core import roles, security
from inkwell.core.errors import AuthError, ConflictError, ValidationError
from inkwell.core.settings import settings
from inkwell.models.user import User
from inkwell.repositories.user_repo import UserRepository
from inkwell.services.media import AVATAR_FOLDER, ImageUpload, MediaStorage

logger = logging.getLogger(__name__)

__all__ = ["register", "login", "authenticate_token"]

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"
ROLE_RACE_ATTEMPTS = 2


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def register(
    db: Session,
    *,
    username: str | None,
    password: str | None,
    email: str | None,
    role_name: str | None,
    profile_picture: ImageUpload | None = None,
    storage: MediaStorage | None = None,
) -> User:
    """Create an account and return the persisted user.

    Args:
        db: Database session.
        username: Display name.
        password: Plain-text password; only its bcrypt hash is stored.
        email: Unique login email.
        role_name: ``reader`` or ``author``. The configured admin email is
            registered as ``admin`` regardless.
        profile_picture: Optional avatar; stored through ``storage``.
        storage: Media backend used for the avatar.

    Raises:
        ValidationError: A required field is blank or the role is not self-service.
        ConflictError: The email is already registered.
    """
    if any(_blank(value) for value in (username, password, email, role_name)):
        raise ValidationError("All fields are required")

    requested_role = roles.normalize_role(role_name)
    if requested_role not in roles.SELF_SERVICE_ROLES:
        raise ValidationError("Invalid role. Must be reader or author")

    email = email.strip()
    repo = UserRepository(db)
    if repo.get_by_email(email) is not None:
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

    if settings.admin_email and email.lower() == settings.admin_email.lower():
        requested_role = roles.ADMIN

    picture_url = None
    if profile_picture is not None and storage is not None:
        picture_url = storage.save(profile_picture, AVATAR_FOLDER)

    password_hash = security.hash_password(password)
    for attempt in range(1, ROLE_RACE_ATTEMPTS + 1):
        try:
            role = repo.get_or_create_role(requested_role)
            user = repo.create(
                username=username.strip(),
                password_hash=password_hash,
                email=email,
                role=role,
                profile_picture=picture_url,
            )
            db.commit()
            break
        except IntegrityError as err:
            db.rollback()
            if repo.get_by_email(email) is not None:
                raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from err
            if attempt == ROLE_RACE_ATTEMPTS:
                raise
            # The role row was inserted concurrently; it exists now.
            logger.warning("Role %s created concurrently, retrying registration", requested_role)

    logger.info("Registered user %d with role %s", user.user_id, requested_role)
    return user


def login(db: Session, email: str | None, password: str | None) -> str:
    """Verify credentials and issue an access token.

    The two failure messages differ so the login form can tell the user
    which field is wrong.
    """
    if _blank(email) or not password:
        raise ValidationError("Email and password are required")

    user = UserRepository(db).get_by_email(email.strip())
    if user is None:
        raise AuthError("Invalid email or password")
    if not security.verify_password(password, user.password_hash):
        raise AuthError("Invalid password")

    return security.create_access_token(user.user_id, user.role_id)


def authenticate_token(db: Session, token: str | None) -> User:
    """Resolve a bearer token to a freshly loaded user."""
    if not token:
        raise AuthError("Access token required")

    payload = security.decode_access_token(token)
    if payload is None:
        raise AuthError("Invalid or expired token")

    user_id = payload.get("userId")
    if not isinstance(user_id, int):
        raise AuthError("Invalid token")

    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise AuthError("Invalid token")
    return user
