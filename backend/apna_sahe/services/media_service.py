"""
Apna SAHE Backend — Media Host Service (Cloudinary)
=====================================================

What:  Uploads note PDFs to Cloudinary as raw resources and removes them again,
       plus removal of legacy note files still held in Firebase Storage.
Why:   The media host serves the PDFs to students; this backend is the only
       holder of the API secret, so deletions must go through it.
How:   The Cloudinary SDK is synchronous, so every call runs in the threadpool.
       Transient failures (socket errors, rate limiting) are retried with
       tenacity; definitive answers (bad request, auth failure) are not.

Destroy Semantics:
    Cloudinary answers a destroy with {"result": "ok"} or
    {"result": "not found"}. Both mean the file is gone, so both count as
    success. Any other result is reported as
    "Cloudinary destroy failed: <result>".
"""

import io
import logging
from typing import Any, Dict

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from cloudinary.exceptions import GeneralError, RateLimited
from google.api_core import exceptions as google_exceptions
from starlette.concurrency import run_in_threadpool
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from apna_sahe.config import settings
from apna_sahe.exceptions import MediaServiceError, StorageError
from apna_sahe.firebase import get_storage_bucket

logger = logging.getLogger(__name__)

RAW_RESOURCE = "raw"
ACCEPTED_DESTROY_RESULTS = {"ok", "not found"}

# What: Errors worth retrying: network trouble and throttling only
TRANSIENT_ERRORS = (GeneralError, RateLimited, ConnectionError, TimeoutError)

_media_retry = retry(
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    stop=stop_after_attempt(settings.retry_max_attempts),
    wait=wait_exponential_jitter(
        initial=settings.retry_min_wait,
        max=settings.retry_max_wait,
        jitter=1,
    ),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


def configure_cloudinary() -> None:
    """
    Configure the Cloudinary SDK from settings.

    When:   Once, during application startup.
    Raises: ValueError if any credential is missing (startup aborts).
    """
    settings.validate_required_for_production()
    cloudinary.config(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        secure=True,
    )
    logger.info("Cloudinary configured with cloud: %s", settings.cloudinary_cloud_name)


class MediaService:
    """Raw file hosting for note PDFs."""

    @_media_retry
    async def _upload(self, content: bytes, public_id: str) -> Dict[str, Any]:
        return await run_in_threadpool(
            cloudinary.uploader.upload,
            io.BytesIO(content),
            resource_type=RAW_RESOURCE,
            public_id=public_id,
            overwrite=False,
        )

    @_media_retry
    async def _destroy(self, public_id: str) -> Dict[str, Any]:
        return await run_in_threadpool(
            cloudinary.uploader.destroy,
            public_id,
            resource_type=RAW_RESOURCE,
            invalidate=True,
        )

    async def upload_pdf(self, content: bytes, public_id: str) -> Dict[str, Any]:
        """
        Upload PDF bytes as a raw resource.

        Returns:
            {"secure_url": ..., "public_id": ...} from the media host response.

        Raises:
            MediaServiceError when the upload fails after retries.
        """
        try:
            result = await self._upload(content, public_id)
        except (CloudinaryError, ConnectionError, TimeoutError) as e:
            logger.error("Cloudinary upload failed for %s: %s", public_id, str(e))
            raise MediaServiceError(
                message="Failed to upload the file. Please try again.",
                context={"public_id": public_id, "error_type": type(e).__name__},
            ) from e

        logger.info("Uploaded %s (%d bytes) to media host", result.get("public_id"), len(content))
        return {"secure_url": result.get("secure_url"), "public_id": result.get("public_id", public_id)}

    async def destroy(self, public_id: str) -> str:
        """
        Delete a raw resource.

        Returns:
            "ok" or "not found".

        Raises:
            MediaServiceError for any other outcome.
        """
        try:
            response = await self._destroy(public_id)
        except (CloudinaryError, ConnectionError, TimeoutError) as e:
            logger.error("Cloudinary destroy raised for %s: %s", public_id, str(e))
            raise MediaServiceError(
                message=f"Cloudinary destroy failed: {e}",
                context={"public_id": public_id},
            ) from e

        result = (response or {}).get("result") or "unknown"
        if result not in ACCEPTED_DESTROY_RESULTS:
            logger.error("Cloudinary destroy for %s returned %s", public_id, result)
            raise MediaServiceError(
                message=f"Cloudinary destroy failed: {result}",
                context={"public_id": public_id, "result": result},
            )

        logger.info("Destroyed %s on media host (result=%s)", public_id, result)
        return result

    async def discard(self, public_id: str) -> None:
        """
        Best-effort removal of an upload whose database write failed.

        Never raises: the original failure is what the client needs to see.
        """
        try:
            await self.destroy(public_id)
        except MediaServiceError as e:
            logger.warning("Could not discard orphaned upload %s: %s", public_id, e.message)

    async def delete_storage_file(self, file_path: str) -> None:
        """
        Delete a legacy note file from Firebase Storage.

        A missing blob counts as deleted, mirroring the "not found" rule above.
        """
        bucket = get_storage_bucket()
        try:
            await run_in_threadpool(bucket.blob(file_path).delete)
        except google_exceptions.NotFound:
            logger.info("Storage file already gone: %s", file_path)
            return
        except google_exceptions.GoogleAPICallError as e:
            logger.error("Failed to delete storage file %s: %s", file_path, str(e))
            raise StorageError(
                message="Failed to delete the note file. Please try again.",
                context={"file_path": file_path, "error_type": type(e).__name__},
            ) from e
        logger.info("Deleted storage file %s", file_path)


# ── Singleton Instance ────────────────────────────────────────────────────
media_service = MediaService()
