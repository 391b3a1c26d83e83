"""
Apna SAHE Backend — Notes Route Handlers
==========================================

What:  Note upload (multipart), browsing with filters, search, statistics,
       metadata edits and deletion.
Who:   Called by the portal's notes browser and upload form.

Request Flow (POST /api/notes):
    1. Client sends multipart/form-data: `file` plus title, subject, branch,
       semester fields
    2. The file is read into memory (bounded by the 10MB check)
    3. NoteService validates, uploads to the media host and records the note
    4. 201 Created with the new note id and document

Caching:
    Listings change whenever someone uploads, so they are served with a
    short private max-age only.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile

from apna_sahe.firebase import get_firestore
from apna_sahe.schemas.common import ErrorResponse, OkResponse
from apna_sahe.schemas.note import NotesStats, NoteResponse, NoteUpdate, NoteUploadResponse
from apna_sahe.security import AuthenticatedUser, get_current_user
from apna_sahe.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["Notes"])

LIST_CACHE_CONTROL = "private, max-age=5"


@router.post(
    "",
    status_code=201,
    response_model=NoteUploadResponse,
    responses={
        400: {"description": "Not a PDF, empty, or larger than 10MB", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Media host or database failure", "model": ErrorResponse},
    },
    summary="Upload a PDF note",
)
async def upload_note(
    file: UploadFile = File(..., description="PDF file, max 10MB"),
    title: str = Form(..., min_length=1, max_length=200),
    subject: str = Form(..., min_length=1, max_length=120),
    branch: str = Form(..., min_length=1, max_length=20),
    semester: str = Form(..., min_length=1, max_length=10),
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> NoteUploadResponse:
    content = await file.read()
    logger.info(
        "Received note upload: filename=%s, size=%d bytes, uid=%s",
        file.filename or "unknown",
        len(content),
        user.uid,
    )
    try:
        return await note_service.upload_note(
            db,
            uploader=user,
            filename=file.filename or "upload.pdf",
            content=content,
            title=title,
            subject=subject,
            branch=branch,
            semester=semester,
            content_type=file.content_type,
            content_length=file.size,
        )
    finally:
        await file.close()


@router.get("", response_model=List[NoteResponse], summary="List notes, newest first")
async def list_notes(
    response: Response,
    branch: Optional[str] = Query(default=None, max_length=20),
    semester: Optional[str] = Query(default=None, max_length=10),
    subject: Optional[str] = Query(default=None, max_length=120),
    uploader_id: Optional[str] = Query(default=None, alias="uploaderId"),
    db=Depends(get_firestore),
) -> List[NoteResponse]:
    response.headers["Cache-Control"] = LIST_CACHE_CONTROL
    return await note_service.list_notes(
        db, branch=branch, semester=semester, subject=subject, uploader_id=uploader_id
    )


@router.get("/search", response_model=List[NoteResponse], summary="Search notes by title or subject")
async def search_notes(
    q: str = Query(..., min_length=1, max_length=120),
    db=Depends(get_firestore),
) -> List[NoteResponse]:
    return await note_service.search_notes(db, q)


@router.get("/stats", response_model=NotesStats, summary="Note counts by branch and subject")
async def notes_stats(db=Depends(get_firestore)) -> NotesStats:
    return await note_service.get_notes_stats(db)


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses={404: {"description": "Note not found", "model": ErrorResponse}},
    summary="One note",
)
async def get_note(note_id: str, db=Depends(get_firestore)) -> NoteResponse:
    return await note_service.get_note_by_id(db, note_id)


@router.patch(
    "/{note_id}",
    response_model=NoteResponse,
    responses={403: {"description": "Not the uploader or an admin", "model": ErrorResponse}},
    summary="Edit a note's title, subject, branch or semester",
)
async def update_note(
    note_id: str,
    update: NoteUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> NoteResponse:
    return await note_service.update_note(db, note_id, update, user)


@router.delete(
    "/{note_id}",
    response_model=OkResponse,
    responses={
        403: {"description": "Not the uploader or an admin", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Delete a note, its file and the points it earned",
)
async def delete_note(
    note_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> OkResponse:
    await note_service.delete_note(db, note_id, user)
    return OkResponse()
