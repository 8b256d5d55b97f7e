"""Profile management and admin user operations."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from inkwell.core import roles
from inkwell.core.errors import NotFoundError, ValidationError
from inkwell.models.user import User
from inkwell.repositories.user_repo import UserRepository
from inkwell.schemas.user import ProfileUpdate
from inkwell.services.media import AVATAR_FOLDER, ImageUpload, MediaStorage

logger = logging.getLogger(__name__)

__all__ = [
    "update_profile",
    "update_profile_image",
    "update_profile_with_image",
    "list_users",
    "change_role",
]


def _apply_profile_fields(user: User, update_data: ProfileUpdate) -> None:
    update_dict = update_data.model_dump(exclude_unset=True)
    name = update_dict.pop("name", None)
    if name:
        user.username = name
    for key in ("bio", "phone", "location"):
        if key in update_dict:
            setattr(user, key, update_dict[key])


def update_profile(db: Session, user: User, update_data: ProfileUpdate) -> User:
    """Apply partial updates to the user's profile fields."""
    _apply_profile_fields(user, update_data)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_profile_image(
    db: Session,
    user: User,
    image: ImageUpload | None,
    storage: MediaStorage,
) -> User:
    """Replace the user's avatar.

    Raises:
        ValidationError: If no image was sent.
    """
    if image is None:
        raise ValidationError("No image file provided")
    user.profile_picture = storage.save(image, AVATAR_FOLDER)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_profile_with_image(
    db: Session,
    user: User,
    update_data: ProfileUpdate,
    image: ImageUpload | None,
    storage: MediaStorage,
) -> User:
    """Apply field updates and, if sent, a new avatar in one commit."""
    _apply_profile_fields(user, update_data)
    if image is not None:
        user.profile_picture = storage.save(image, AVATAR_FOLDER)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def list_users(db: Session) -> list[User]:
    """Return all users with their roles, newest first."""
    return UserRepository(db).list_all()


def change_role(db: Session, user_id: int, role_name: str | None) -> User:
    """Move a user to another role tier.

    Raises:
        ValidationError: If ``role_name`` is not a known role.
        NotFoundError: If the user does not exist.
    """
    if not roles.is_known_role(role_name):
        raise ValidationError("Invalid role. Must be reader, author, or admin")

    repo = UserRepository(db)
    user = repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")

    role = repo.get_or_create_role(roles.normalize_role(role_name))
    user.role_id = role.role_id
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info("User %d moved to role %s", user_id, role.role_name)
    return user
