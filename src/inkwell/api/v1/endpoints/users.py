# src/inkwell/api/v1/endpoints/users.py
"""Profile, role-check and admin endpoints."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from inkwell.api.v1.dependencies import (
    AdminDep,
    CurrentUserDep,
    MediaStorageDep,
    SessionDep,
    read_image,
    require_role,
)
from inkwell.core.roles import ADMIN, AUTHOR
from inkwell.models import User
from inkwell.schemas import ProfileUpdate, RoleUpdate, UserAdminRow, UserProfile, envelope
from inkwell.services import like_service, post_service, user_service

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/profile")
def get_profile(current_user: CurrentUserDep) -> dict:
    """Return the authenticated user's profile."""
    return envelope(data=UserProfile.model_validate(current_user))


@router.put("/profile")
def update_profile(
    update_data: ProfileUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict:
    user = user_service.update_profile(db, current_user, update_data)
    return envelope(data=UserProfile.model_validate(user), message="Profile updated successfully")


@router.put("/profile/image")
async def update_profile_image(
    current_user: CurrentUserDep,
    db: SessionDep,
    storage: MediaStorageDep,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> dict:
    """Replace the avatar only."""
    image = await read_image(avatar)
    user = await asyncio.to_thread(
        user_service.update_profile_image, db, current_user, image, storage
    )
    return envelope(
        data=UserProfile.model_validate(user),
        message="Profile image updated successfully",
        profile_picture=user.profile_picture,
    )


@router.put("/profile/complete")
async def update_profile_complete(
    current_user: CurrentUserDep,
    db: SessionDep,
    storage: MediaStorageDep,
    name: Annotated[str | None, Form()] = None,
    bio: Annotated[str | None, Form()] = None,
    phone: Annotated[str | None, Form()] = None,
    location: Annotated[str | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> dict:
    """Update profile fields and the avatar in one multipart call."""
    fields = {
        key: value
        for key, value in {"name": name, "bio": bio, "phone": phone, "location": location}.items()
        if value is not None
    }
    image = await read_image(avatar)
    user = await asyncio.to_thread(
        user_service.update_profile_with_image,
        db,
        current_user,
        ProfileUpdate(**fields),
        image,
        storage,
    )
    return envelope(data=UserProfile.model_validate(user), message="Profile updated successfully")


@router.get("/check-admin")
def check_admin(
    _: Annotated[User, Depends(require_role(ADMIN, "Access denied. Admins only"))],
) -> dict:
    return envelope(isAdmin=True)


@router.get("/check-author")
def check_author(
    _: Annotated[User, Depends(require_role(AUTHOR, "Access denied. Authors only"))],
) -> dict:
    return envelope(isAuthor=True)


@router.get("/likes")
def my_likes(current_user: CurrentUserDep, db: SessionDep) -> dict:
    """List the caller's likes plus the likes their own content received."""
    return envelope(
        data={
            "likes": like_service.user_likes(db, current_user.user_id),
            "stats": like_service.content_like_stats(db, current_user.user_id),
        }
    )


@router.get("/admin/users")
def list_users(_: AdminDep, db: SessionDep) -> dict:
    users = user_service.list_users(db)
    return envelope(data=[UserAdminRow.model_validate(user) for user in users])


@router.put("/admin/users/{user_id}/role")
def change_user_role(
    user_id: int,
    body: RoleUpdate,
    _: AdminDep,
    db: SessionDep,
) -> dict:
    """Move a user to another role tier."""
    user = user_service.change_role(db, user_id, body.role)
    return envelope(
        data=UserAdminRow.model_validate(user),
        message="User role updated successfully",
    )


@router.get("/admin/posts")
def list_all_posts(_: AdminDep, db: SessionDep) -> dict:
    return envelope(data=post_service.all_posts_with_authors(db))
