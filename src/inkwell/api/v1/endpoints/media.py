# src/inkwell/api/v1/endpoints/media.py
"""Serves images written by the local media backend."""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from inkwell.api.v1.dependencies import MediaStorageDep
from inkwell.core.errors import NotFoundError
from inkwell.services.media import LocalMediaStorage

router = APIRouter(prefix="/media", tags=["media"])


@router.get("/{folder}/{filename}")
def serve_media(folder: str, filename: str, storage: MediaStorageDep) -> FileResponse:
    """Serve a stored image file."""
    if not isinstance(storage, LocalMediaStorage):
        raise NotFoundError("File not found")
    path = storage.resolve(folder, filename)
    if path is None:
        raise NotFoundError("File not found")
    return FileResponse(path)
