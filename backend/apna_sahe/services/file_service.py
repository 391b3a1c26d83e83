"""
Apna SAHE Backend — File Validation Service
=============================================

What:  Validates uploaded note files and derives their storage names.
Why:   Uploads are the only untrusted binary input the backend accepts;
       everything that reaches the media host must be a real PDF within the
       size limit.
How:   Cheap checks first (extension, declared content type, size), then magic
       bytes via python-magic, then a deterministic, sanitized storage path.

Validation Order:
    1. Extension check — no content needed
    2. Declared content type — from the multipart part header
    3. Size check — Content-Length first, then actual byte count
    4. MIME sniffing — reads only the first bytes of the content

Naming Scheme:
    notes/{BRANCH}/{semester}/{BRANCH}_{semester}_{subject}_{epoch_ms}.pdf

    Segments are reduced to letters, digits, dots, dashes and underscores, so
    no user input can introduce path separators.
"""

import logging
import re
import time
from pathlib import Path
from typing import Optional, Tuple

from apna_sahe.config import settings
from apna_sahe.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

PDF_EXTENSION = ".pdf"
PDF_MIME_TYPE = "application/pdf"

_UNSAFE_SEGMENT_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_segment(value: str) -> str:
    """Collapse anything outside [A-Za-z0-9._-] into a single dash."""
    cleaned = _UNSAFE_SEGMENT_CHARS.sub("-", value.strip()).strip("-.")
    return cleaned or "untitled"


class FileService:
    """Validation and naming for PDF note uploads."""

    def __init__(self, max_file_size: Optional[int] = None):
        self.max_file_size = max_file_size or settings.max_file_size

    def validate_extension(self, filename: str) -> None:
        if Path(filename).suffix.lower() != PDF_EXTENSION:
            raise ValidationError(
                message="Only PDF files are allowed",
                field="file",
                context={"extension": Path(filename).suffix.lower()},
            )

    def validate_content_type(self, content_type: Optional[str]) -> None:
        # Browsers send application/pdf; some send application/x-pdf
        if content_type and "pdf" not in content_type.lower():
            raise ValidationError(
                message="Only PDF files are allowed",
                field="file",
                context={"content_type": content_type},
            )

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject empty files and files over the limit.

        Args:
            content_length: Size reported by the client (may be None or wrong)
            actual_size: Byte count actually received
        """
        max_mb = self.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field="file")

        if (content_length and content_length > self.max_file_size) or actual_size > self.max_file_size:
            raise ValidationError(
                message=f"File size should not exceed {max_mb:.0f}MB",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, content: bytes) -> str:
        """
        Validate the real type of the upload from its magic bytes.

        Why: a renamed executable passes the extension check but not this one.

        Raises:
            ValidationError if the content is not a PDF
            StorageError if type detection itself fails
        """
        try:
            import magic
            mime_type = magic.from_buffer(content[:2048], mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise StorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type != PDF_MIME_TYPE:
            raise ValidationError(
                message="Only PDF files are allowed",
                field="file",
                context={"detected_mime": mime_type},
            )
        return mime_type

    def validate_pdf(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> None:
        """Run every check, cheapest first."""
        self.validate_extension(filename)
        self.validate_content_type(content_type)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content)

    def build_storage_name(
        self,
        branch: str,
        semester: str,
        subject: str,
        timestamp_ms: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Returns:
            (file_name, file_path), e.g.
            ("CSE_3_Data-Structures_1700000000000.pdf",
             "notes/CSE/3/CSE_3_Data-Structures_1700000000000.pdf")
        """
        stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
        branch_seg = sanitize_segment(branch.upper())
        semester_seg = sanitize_segment(semester)
        file_name = f"{branch_seg}_{semester_seg}_{sanitize_segment(subject)}_{stamp}{PDF_EXTENSION}"
        return file_name, f"notes/{branch_seg}/{semester_seg}/{file_name}"


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
