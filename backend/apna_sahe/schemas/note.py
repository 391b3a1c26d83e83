"""
Apna SAHE Backend — Note Schemas
==================================

What:  Note documents, note metadata updates, statistics, and the file
       deletion request/response used by the media host endpoint.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from apna_sahe.schemas.common import CamelModel


class NoteResponse(CamelModel):
    """
    A `notes/{id}` document.

    Why both `cloudinary_public_id` and `file_path`:
        Notes uploaded to the media host carry a public id; notes from before
        that migration carry a Firebase Storage path instead.
    """
    id: str
    title: str
    subject: str
    branch: str
    semester: str
    pdf_url: Optional[str] = None
    uploaded_by_name: Optional[str] = None
    uploaded_by_role: Optional[str] = None
    uploader_id: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    cloudinary_public_id: Optional[str] = None
    file_path: Optional[str] = None


class NoteUploadResponse(CamelModel):
    message: str = "Note uploaded successfully"
    id: str
    note: NoteResponse


class NoteUpdate(CamelModel):
    """Metadata an owner or admin may edit. The file itself is immutable."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    subject: Optional[str] = Field(default=None, min_length=1, max_length=120)
    branch: Optional[str] = Field(default=None, min_length=1, max_length=20)
    semester: Optional[str] = Field(default=None, min_length=1, max_length=10)


class NotesStats(CamelModel):
    total_notes: int
    branch_stats: Dict[str, int]
    subject_stats: Dict[str, int]
    recent_notes: List[NoteResponse]


class DeleteNoteFileRequest(CamelModel):
    """
    Body of POST /api/cloudinary/delete-note-file.

    Why optional: a missing noteId is answered with 400 "noteId is required",
    not FastAPI's generic 422.
    """
    note_id: Optional[str] = None


class DeleteNoteFileResponse(CamelModel):
    ok: bool = True
    result: str
