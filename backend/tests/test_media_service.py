"""
Apna SAHE Backend — Media Service Unit Tests
==============================================

What:  Tests for Cloudinary uploads/destroys and legacy Storage deletion.
How:   The Cloudinary SDK functions and the Storage bucket are patched; no
       network calls are made.

What we test:
    ✅ "ok" and "not found" destroy results both count as success
    ✅ Any other result becomes "Cloudinary destroy failed: <result>"
    ✅ Definitive SDK errors are not retried
    ✅ discard() never raises
    ✅ Missing Storage blobs are treated as already deleted
"""

from unittest.mock import MagicMock, patch

import pytest
from cloudinary.exceptions import BadRequest
from google.api_core import exceptions as google_exceptions

from apna_sahe.config import settings
from apna_sahe.exceptions import MediaServiceError, StorageError
from apna_sahe.services.media_service import MediaService, configure_cloudinary


class TestDestroy:

    def setup_method(self):
        self.service = MediaService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", ["ok", "not found"])
    async def test_destroy_accepted_results(self, result):
        with patch("cloudinary.uploader.destroy", return_value={"result": result}) as destroy:
            assert await self.service.destroy("notes/CSE/3/a.pdf") == result
        destroy.assert_called_once_with("notes/CSE/3/a.pdf", resource_type="raw", invalidate=True)

    @pytest.mark.asyncio
    async def test_destroy_unexpected_result(self):
        with patch("cloudinary.uploader.destroy", return_value={"result": "error"}):
            with pytest.raises(MediaServiceError) as exc_info:
                await self.service.destroy("notes/CSE/3/a.pdf")
        assert exc_info.value.message == "Cloudinary destroy failed: error"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_destroy_sdk_error_not_retried(self):
        with patch("cloudinary.uploader.destroy", side_effect=BadRequest("bad public id")) as destroy:
            with pytest.raises(MediaServiceError) as exc_info:
                await self.service.destroy("bad")
        assert exc_info.value.message.startswith("Cloudinary destroy failed:")
        assert destroy.call_count == 1

    @pytest.mark.asyncio
    async def test_discard_swallows_failures(self):
        with patch("cloudinary.uploader.destroy", return_value={"result": "error"}):
            await self.service.discard("notes/CSE/3/a.pdf")


class TestUpload:

    def setup_method(self):
        self.service = MediaService()

    @pytest.mark.asyncio
    async def test_upload_pdf_returns_url_and_id(self, sample_pdf_bytes):
        response = {
            "secure_url": "https://res.cloudinary.com/test-cloud/raw/upload/v1/notes/CSE/3/a.pdf",
            "public_id": "notes/CSE/3/a.pdf",
        }
        with patch("cloudinary.uploader.upload", return_value=response) as upload:
            hosted = await self.service.upload_pdf(sample_pdf_bytes, "notes/CSE/3/a.pdf")

        assert hosted == {"secure_url": response["secure_url"], "public_id": "notes/CSE/3/a.pdf"}
        _, kwargs = upload.call_args
        assert kwargs["resource_type"] == "raw"
        assert kwargs["public_id"] == "notes/CSE/3/a.pdf"

    @pytest.mark.asyncio
    async def test_upload_failure(self, sample_pdf_bytes):
        with patch("cloudinary.uploader.upload", side_effect=BadRequest("Invalid file")):
            with pytest.raises(MediaServiceError):
                await self.service.upload_pdf(sample_pdf_bytes, "notes/CSE/3/a.pdf")


class TestStorageDeletion:

    def setup_method(self):
        self.service = MediaService()

    @pytest.mark.asyncio
    async def test_delete_storage_file(self):
        bucket = MagicMock()
        with patch("apna_sahe.services.media_service.get_storage_bucket", return_value=bucket):
            await self.service.delete_storage_file("notes/CSE/3/old.pdf")
        bucket.blob.assert_called_once_with("notes/CSE/3/old.pdf")
        bucket.blob.return_value.delete.assert_called_once()

    @pytest.mark.asyncio
    async def test_delete_storage_file_already_gone(self):
        bucket = MagicMock()
        bucket.blob.return_value.delete.side_effect = google_exceptions.NotFound("gone")
        with patch("apna_sahe.services.media_service.get_storage_bucket", return_value=bucket):
            await self.service.delete_storage_file("notes/CSE/3/old.pdf")

    @pytest.mark.asyncio
    async def test_delete_storage_file_forbidden(self):
        bucket = MagicMock()
        bucket.blob.return_value.delete.side_effect = google_exceptions.Forbidden("no access")
        with patch("apna_sahe.services.media_service.get_storage_bucket", return_value=bucket):
            with pytest.raises(StorageError):
                await self.service.delete_storage_file("notes/CSE/3/old.pdf")


class TestConfigureCloudinary:

    def test_configure_uses_settings(self):
        with patch("cloudinary.config") as config:
            configure_cloudinary()
        config.assert_called_once_with(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True,
        )

    def test_configure_fails_without_secret(self):
        with patch.object(settings, "cloudinary_api_secret", ""), patch("cloudinary.config") as config:
            with pytest.raises(ValueError, match="CLOUDINARY_API_SECRET"):
                configure_cloudinary()
        config.assert_not_called()
