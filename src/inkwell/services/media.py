"""Image storage backends for avatars and featured images.

``LocalMediaStorage`` writes UUID-named files under ``MEDIA_ROOT`` and hands
back URLs served by the ``/media`` router. ``CloudinaryMediaStorage`` pushes
the bytes to Cloudinary and returns the hosted ``secure_url``.
"""
from __future__ import annotations

import io
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import urlparse

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from inkwell.core.errors import InternalError, ValidationError
from inkwell.core.settings import settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}
AVATAR_FOLDER = "avatars"
POST_IMAGE_FOLDER = "posts"
UPLOAD_FAILED_MESSAGE = "Failed to upload image"

# Applied to featured images only; avatars are stored as uploaded.
POST_IMAGE_TRANSFORMATION = [
    {"width": 800, "height": 600, "crop": "limit"},
    {"quality": "auto"},
]


@dataclass(frozen=True)
class ImageUpload:
    """Bytes of an uploaded image plus the metadata the client sent."""

    content: bytes
    filename: str
    content_type: str | None = None

    @property
    def extension(self) -> str:
        return Path(self.filename or "").suffix.lower()


class MediaStorage(Protocol):
    """Anything that can persist an image and return its public URL."""

    def save(self, upload: ImageUpload, folder: str) -> str: ...


def validate_image(upload: ImageUpload, max_bytes: int) -> None:
    """Reject empty, oversized or non-image uploads.

    Raises:
        ValidationError: If the upload is not an acceptable image.
    """
    if not upload.content:
        raise ValidationError("Uploaded file is empty")
    if len(upload.content) > max_bytes:
        raise ValidationError("Image exceeds the maximum upload size")
    is_image_type = (upload.content_type or "").startswith("image/")
    if upload.extension not in ALLOWED_EXTENSIONS and not is_image_type:
        raise ValidationError("Only image files are allowed")


class LocalMediaStorage:
    """Stores images on the local filesystem."""

    def __init__(self, root: str | Path, base_url: str, max_bytes: int) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    def _filename_for(self, upload: ImageUpload) -> str:
        ext = upload.extension
        if ext not in ALLOWED_EXTENSIONS:
            ext = ".png"
        return f"{uuid.uuid4()}{ext}"

    def save(self, upload: ImageUpload, folder: str) -> str:
        validate_image(upload, self.max_bytes)
        target_dir = self.root / folder
        filename = self._filename_for(upload)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            (target_dir / filename).write_bytes(upload.content)
        except OSError as err:
            logger.error("Failed to write upload to %s: %s", target_dir, err)
            raise InternalError(UPLOAD_FAILED_MESSAGE) from err
        logger.info("Stored image %s/%s (%d bytes)", folder, filename, len(upload.content))
        return f"{self.base_url}/{folder}/{filename}"

    def resolve(self, folder: str, filename: str) -> Path | None:
        """Return the on-disk path of a stored file, or None if it is absent.

        Names that would escape the media root are treated as absent.
        """
        root = self.root.resolve()
        candidate = (root / folder / filename).resolve()
        if root not in candidate.parents or not candidate.is_file():
            return None
        return candidate


def _cloudinary_credentials(url: str) -> dict[str, Any]:
    parsed = urlparse(url)
    return {
        "cloud_name": parsed.hostname,
        "api_key": parsed.username,
        "api_secret": parsed.password,
        "secure": True,
    }


class CloudinaryMediaStorage:
    """Uploads images to Cloudinary."""

    def __init__(self, cloudinary_url: str, folder: str, max_bytes: int) -> None:
        cloudinary.config(**_cloudinary_credentials(cloudinary_url))
        self.folder = folder
        self.max_bytes = max_bytes

    def save(self, upload: ImageUpload, folder: str) -> str:
        validate_image(upload, self.max_bytes)
        options: dict[str, Any] = {"resource_type": "image"}
        if folder == POST_IMAGE_FOLDER:
            options["folder"] = self.folder
            options["transformation"] = POST_IMAGE_TRANSFORMATION
        try:
            result = cloudinary.uploader.upload(io.BytesIO(upload.content), **options)
        except (cloudinary.exceptions.Error, OSError) as err:
            logger.error("Cloudinary upload error: %s", err, exc_info=True)
            raise InternalError(UPLOAD_FAILED_MESSAGE) from err
        return result["secure_url"]


def get_media_storage() -> MediaStorage:
    """Build the storage backend selected by ``MEDIA_BACKEND``."""
    if settings.media_backend == "cloudinary":
        if not settings.cloudinary_url:
            raise InternalError("CLOUDINARY_URL is not configured")
        return CloudinaryMediaStorage(
            settings.cloudinary_url,
            settings.cloudinary_folder,
            settings.media_max_bytes,
        )
    return LocalMediaStorage(
        settings.media_root,
        settings.media_base_url,
        settings.media_max_bytes,
    )
