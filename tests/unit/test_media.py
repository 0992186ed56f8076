"""Unit tests for the Cloudinary storage wrapper."""
import io
from unittest.mock import patch

import pytest
from cloudinary.exceptions import Error as CloudinaryError

from common.errors import APIError
from common.media import CloudinaryStorage, MediaUploadError


class TestCloudinaryStorage:
    def test_upload_returns_secure_url(self):
        storage = CloudinaryStorage(folder="tests")
        with patch("common.media.cloudinary.uploader.upload", return_value={"secure_url": "https://img/x.png"}) as upload:
            url = storage.upload_image(io.BytesIO(b"png"), "image/png", "cooks", size=3)

        assert url == "https://img/x.png"
        _, kwargs = upload.call_args
        assert kwargs["resource_type"] == "image"
        assert kwargs["folder"] == "tests/cooks"

    def test_rejects_non_images(self):
        storage = CloudinaryStorage()
        with patch("common.media.cloudinary.uploader.upload") as upload:
            with pytest.raises(APIError) as exc_info:
                storage.upload_image(io.BytesIO(b"%PDF"), "application/pdf", "cooks")

        assert exc_info.value.status_code == 400
        upload.assert_not_called()

    def test_rejects_oversized_images(self):
        with pytest.raises(APIError) as exc_info:
            CloudinaryStorage().upload_image(io.BytesIO(b""), "image/png", "cooks", size=6 * 1024 * 1024)

        assert exc_info.value.message == "Image too large (max 5MB)"

    def test_cloudinary_failure_becomes_upload_error(self):
        with patch("common.media.cloudinary.uploader.upload", side_effect=CloudinaryError("bad credentials")):
            with pytest.raises(MediaUploadError) as exc_info:
                CloudinaryStorage().upload_image(io.BytesIO(b"png"), "image/png", "cooks")

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Image upload failed"

    def test_missing_url_is_an_upload_error(self):
        with patch("common.media.cloudinary.uploader.upload", return_value={}):
            with pytest.raises(MediaUploadError):
                CloudinaryStorage().upload_image(io.BytesIO(b"png"), "image/png", "users")
