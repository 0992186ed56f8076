"""
Cloudinary media storage for cook and user images.
"""
from __future__ import annotations

import logging
from typing import BinaryIO, Optional

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from .config import get_settings
from .errors import APIError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024


class MediaUploadError(APIError):
    def __init__(self, message: str = "Image upload failed") -> None:
        super().__init__(message, status_code=502)


class CloudinaryStorage:
    """
    Uploads images to Cloudinary and hands back their public URL.

    The SDK is configured lazily on first upload so importing the backend
    never requires Cloudinary credentials.
    """

    def __init__(self, folder: str = "cookbooking") -> None:
        self.folder = folder
        self._configured = False

    def _configure(self) -> None:
        if self._configured:
            return
        settings = get_settings()
        cloudinary.config(
            cloud_name=settings.cloudinary_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_secret_key,
            secure=True,
        )
        self._configured = True

    def upload_image(
        self,
        file: BinaryIO,
        content_type: Optional[str],
        subfolder: str,
        size: Optional[int] = None,
    ) -> str:
        """
        Upload an image and return its ``secure_url``.

        Raises:
            APIError: the file is not an accepted image type or is too large.
            MediaUploadError: Cloudinary rejected the upload.
        """
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise APIError(f"Unsupported image type: {content_type}")
        if size is not None and size > MAX_IMAGE_BYTES:
            raise APIError("Image too large (max 5MB)")

        self._configure()
        try:
            result = cloudinary.uploader.upload(
                file,
                resource_type="image",
                folder=f"{self.folder}/{subfolder}",
            )
        except CloudinaryError as exc:
            logger.error("Cloudinary upload to %s failed: %s", subfolder, exc)
            raise MediaUploadError() from exc

        url = result.get("secure_url")
        if not url:
            logger.error("Cloudinary upload to %s returned no URL", subfolder)
            raise MediaUploadError()
        logger.info("Uploaded image to %s", url)
        return url


storage = CloudinaryStorage()


def get_storage() -> CloudinaryStorage:
    return storage
