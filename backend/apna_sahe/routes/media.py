"""
Apna SAHE Backend — Media Host Route
======================================

What:  POST /api/cloudinary/delete-note-file, the one operation the web client
       cannot do itself because it needs the Cloudinary API secret.
Who:   Called by the notes page after (or before) it removes the note
       document.

Checks, in order:
    1. Bearer token present and valid                 → 401
    2. `noteId` in the body                           → 400 "noteId is required"
    3. Note exists                                    → 404 "Note not found"
    4. Note has `cloudinaryPublicId`                  → 400
    5. Caller is the uploader or an admin             → 403
    6. Media host destroy returns "ok"/"not found"    → else 500
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends

from apna_sahe.firebase import get_firestore
from apna_sahe.schemas.common import ErrorResponse
from apna_sahe.schemas.note import DeleteNoteFileRequest, DeleteNoteFileResponse
from apna_sahe.security import AuthenticatedUser, get_current_user
from apna_sahe.services.note_service import note_service

router = APIRouter(prefix="/api/cloudinary", tags=["Media"])


@router.post(
    "/delete-note-file",
    response_model=DeleteNoteFileResponse,
    responses={
        400: {"description": "noteId missing, or note has no hosted file", "model": ErrorResponse},
        401: {"description": "Missing or invalid Bearer token", "model": ErrorResponse},
        403: {"description": "Not the uploader or an admin", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Media host refused the destroy", "model": ErrorResponse},
    },
    summary="Delete a note's file from the media host",
)
async def delete_note_file(
    payload: Optional[DeleteNoteFileRequest] = Body(default=None),
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> DeleteNoteFileResponse:
    note_id = payload.note_id if payload else None
    result = await note_service.delete_note_file(db, note_id, user)
    return DeleteNoteFileResponse(result=result)
