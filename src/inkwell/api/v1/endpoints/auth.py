# src/inkwell/api/v1/endpoints/auth.py
"""Authentication endpoints for the Inkwell API."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile, status

from inkwell.api.v1.dependencies import MediaStorageDep, SessionDep, read_image
from inkwell.schemas import LoginRequest, envelope
from inkwell.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    db: SessionDep,
    storage: MediaStorageDep,
    username: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    userEmail: Annotated[str | None, Form()] = None,
    roleName: Annotated[str | None, Form()] = None,
    profilePicture: Annotated[UploadFile | None, File()] = None,
) -> dict:
    """Register a reader or author account from a multipart form."""
    image = await read_image(profilePicture)
    await asyncio.to_thread(
        auth_service.register,
        db,
        username=username,
        password=password,
        email=userEmail,
        role_name=roleName,
        profile_picture=image,
        storage=storage,
    )
    return envelope(message="User registered successfully")


@router.post("/login")
def login(credentials: LoginRequest, db: SessionDep) -> dict:
    """Exchange email and password for a bearer token."""
    token = auth_service.login(db, credentials.userEmail, credentials.password)
    return envelope(data=token, message="Login successful")
