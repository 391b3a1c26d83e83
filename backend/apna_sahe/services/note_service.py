"""
Apna SAHE Backend — Note Service (Business Logic Orchestrator)
================================================================

What:  Upload, listing, search, statistics, metadata edits and deletion of
       study notes, together with the points each note is worth.
Why:   Keeps the upload → host → persist workflow and its compensation steps
       in one place, independent of HTTP concerns.
How:   Composes FileService (validation/naming), MediaService (Cloudinary /
       Storage) and Firestore transactions (note document + points ledger).
Who:   Called by the notes routes.

Orchestration Flow (POST /api/notes):
    ┌──────────┐    ┌────────────┐    ┌──────────────┐    ┌──────────────────┐
    │  Upload  │───▶│  Validate  │───▶│  Media host  │───▶│  Transaction:    │
    │  (Route) │    │  & name    │    │  raw upload  │    │  note + points   │
    └──────────┘    └────────────┘    └──────────────┘    └──────────────────┘
                                                                  │ fails
                                                                  ▼
                                                   destroy the uploaded file

Deletion Flow (DELETE /api/notes/{id}):
    owner/admin check → remove the file → transaction: delete note and take
    back the points when the uploader was a student.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from apna_sahe.config import settings
from apna_sahe.exceptions import ValidationError
from apna_sahe.firebase import (
    NOTES,
    USERS,
    collect,
    fetch_document,
    firestore_errors,
    update_document,
)
from apna_sahe.schemas.note import NotesStats, NoteResponse, NoteUpdate, NoteUploadResponse
from apna_sahe.security.auth import AuthenticatedUser, ensure_can_modify
from apna_sahe.services.file_service import file_service
from apna_sahe.services.media_service import media_service
from apna_sahe.services.points import read_counters, write_counters

logger = logging.getLogger(__name__)

RECENT_NOTES_COUNT = 5


async def _create_note(transaction, note_ref, user_ref, note: Dict[str, Any], points: int) -> None:
    current = await read_counters(transaction, user_ref) if user_ref is not None else None
    transaction.set(note_ref, note)
    if current is not None:
        write_counters(transaction, user_ref, current, points, 1)


async def _remove_note(transaction, note_ref, user_ref, points: int) -> None:
    current = await read_counters(transaction, user_ref) if user_ref is not None else None
    transaction.delete(note_ref)
    if current is not None:
        write_counters(transaction, user_ref, current, -points, -1)


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        Validation problems surface as ValidationError before anything is
        uploaded. Media host failures surface as MediaServiceError. Firestore
        failures are wrapped in DatabaseError; if one happens after the file
        was uploaded, the file is discarded first.
    """

    # ── Upload ────────────────────────────────────────────────────────────

    async def upload_note(
        self,
        db,
        uploader: AuthenticatedUser,
        filename: str,
        content: bytes,
        title: str,
        subject: str,
        branch: str,
        semester: str,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> NoteUploadResponse:
        """
        Validate, host and record a note PDF.

        The uploader's display name and role come from their user document;
        an account without one is recorded under its email and earns no
        points.
        """
        file_service.validate_pdf(filename, content, content_type, content_length)

        user_ref = db.collection(USERS).document(uploader.uid)
        with firestore_errors("reading uploader profile"):
            profile_snapshot = await user_ref.get()
        profile = profile_snapshot.to_dict() if profile_snapshot.exists else {}
        role = profile.get("role") or ("admin" if uploader.has_admin_email else "student")

        branch = branch.strip().upper()
        file_name, file_path = file_service.build_storage_name(branch, semester, subject)
        hosted = await media_service.upload_pdf(content, file_path)

        note_ref = db.collection(NOTES).document()
        note = {
            "title": title.strip(),
            "subject": subject.strip(),
            "branch": branch,
            "semester": semester.strip(),
            "pdfUrl": hosted["secure_url"],
            "cloudinaryPublicId": hosted["public_id"],
            "fileName": file_name,
            "fileSize": len(content),
            "uploadedByName": profile.get("name") or uploader.email,
            "uploadedByRole": role,
            "uploaderId": uploader.uid,
            "uploadedAt": firestore.SERVER_TIMESTAMP,
        }
        rewarded_ref = user_ref if role == "student" and profile_snapshot.exists else None

        try:
            with firestore_errors("creating note"):
                await firestore.async_transactional(_create_note)(
                    db.transaction(), note_ref, rewarded_ref, note, settings.points_per_note
                )
        except Exception:
            logger.error("Note write failed, discarding hosted file %s", hosted["public_id"])
            await media_service.discard(hosted["public_id"])
            raise

        logger.info(
            "Note %s uploaded by uid=%s (%s, %d bytes)",
            note_ref.id, uploader.uid, file_name, len(content),
        )
        created = await self.get_note_by_id(db, note_ref.id)
        return NoteUploadResponse(id=note_ref.id, note=created)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_notes(
        self,
        db,
        branch: Optional[str] = None,
        semester: Optional[str] = None,
        subject: Optional[str] = None,
        uploader_id: Optional[str] = None,
    ) -> List[NoteResponse]:
        """
        Notes matching every given filter, newest first.

        Each filter combination needs its composite index with
        `uploadedAt DESC` in Firestore.
        """
        query = db.collection(NOTES)
        if branch:
            query = query.where(filter=FieldFilter("branch", "==", branch.upper()))
        if semester:
            query = query.where(filter=FieldFilter("semester", "==", semester))
        if subject:
            query = query.where(filter=FieldFilter("subject", "==", subject))
        if uploader_id:
            query = query.where(filter=FieldFilter("uploaderId", "==", uploader_id))
        query = query.order_by("uploadedAt", direction=firestore.Query.DESCENDING)

        with firestore_errors("listing notes"):
            docs = await collect(query)
        return [NoteResponse.model_validate(doc) for doc in docs]

    async def get_all_notes(self, db) -> List[NoteResponse]:
        return await self.list_notes(db)

    async def get_notes_by_branch(self, db, branch: str) -> List[NoteResponse]:
        return await self.list_notes(db, branch=branch)

    async def get_notes_by_semester(self, db, semester: str) -> List[NoteResponse]:
        return await self.list_notes(db, semester=semester)

    async def get_notes_by_subject(self, db, subject: str) -> List[NoteResponse]:
        return await self.list_notes(db, subject=subject)

    async def get_notes_by_branch_and_semester(self, db, branch: str, semester: str) -> List[NoteResponse]:
        return await self.list_notes(db, branch=branch, semester=semester)

    async def get_notes_by_user(self, db, uid: str) -> List[NoteResponse]:
        return await self.list_notes(db, uploader_id=uid)

    async def get_note_by_id(self, db, note_id: str) -> NoteResponse:
        return NoteResponse.model_validate(await fetch_document(db, NOTES, note_id, "Note not found"))

    async def search_notes(self, db, term: str) -> List[NoteResponse]:
        """
        Case-insensitive substring match on title or subject.

        Firestore has no substring queries, so matching runs over the full
        listing. Fine at a single college's scale.
        """
        needle = term.strip().lower()
        notes = await self.get_all_notes(db)
        if not needle:
            return notes
        return [
            note for note in notes
            if needle in note.title.lower() or needle in note.subject.lower()
        ]

    async def get_notes_stats(self, db) -> NotesStats:
        notes = await self.get_all_notes(db)
        return NotesStats(
            total_notes=len(notes),
            branch_stats=dict(Counter(note.branch for note in notes)),
            subject_stats=dict(Counter(note.subject for note in notes)),
            recent_notes=notes[:RECENT_NOTES_COUNT],
        )

    # ── Writes ────────────────────────────────────────────────────────────

    async def update_note(self, db, note_id: str, update: NoteUpdate, user: AuthenticatedUser) -> NoteResponse:
        note = await fetch_document(db, NOTES, note_id, "Note not found")
        await ensure_can_modify(db, user, note.get("uploaderId"), "You are not authorized to update this note")

        data = update.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)
        if not data:
            raise ValidationError("No fields to update")
        if "branch" in data:
            data["branch"] = data["branch"].upper()
        data["updatedAt"] = firestore.SERVER_TIMESTAMP

        await update_document(db, NOTES, note_id, data, "Note not found")
        logger.info("Note %s updated by uid=%s", note_id, user.uid)
        return await self.get_note_by_id(db, note_id)

    async def delete_note(self, db, note_id: str, user: AuthenticatedUser) -> None:
        """
        Remove a note, its file, and the points it earned.

        The file goes first: a note whose file is gone can be retried, a file
        without its note would be orphaned for good.
        """
        note = await fetch_document(db, NOTES, note_id, "Note not found")
        await ensure_can_modify(db, user, note.get("uploaderId"), "You are not authorized to delete this note")

        if note.get("cloudinaryPublicId"):
            await media_service.destroy(note["cloudinaryPublicId"])
        elif note.get("filePath"):
            await media_service.delete_storage_file(note["filePath"])

        note_ref = db.collection(NOTES).document(note_id)
        user_ref = None
        if note.get("uploadedByRole") == "student" and note.get("uploaderId"):
            user_ref = db.collection(USERS).document(note["uploaderId"])

        with firestore_errors("deleting note"):
            await firestore.async_transactional(_remove_note)(
                db.transaction(), note_ref, user_ref, settings.points_per_note
            )
        logger.info("Note %s deleted by uid=%s", note_id, user.uid)

    async def delete_note_file(self, db, note_id: Optional[str], user: AuthenticatedUser) -> str:
        """
        Destroy a note's hosted file without touching the note document.

        Used by clients that delete the document themselves. Check order:
        noteId present → note exists → note has a public id → caller is the
        uploader or an admin.

        Returns:
            The media host's destroy result ("ok" or "not found").
        """
        if not note_id or not note_id.strip():
            raise ValidationError("noteId is required", field="noteId")

        note = await fetch_document(db, NOTES, note_id.strip(), "Note not found")
        public_id = note.get("cloudinaryPublicId")
        if not public_id:
            raise ValidationError("Note has no cloudinaryPublicId", context={"note_id": note["id"]})

        await ensure_can_modify(db, user, note.get("uploaderId"), "Not authorized to delete this file")

        result = await media_service.destroy(public_id)
        logger.info("File of note %s destroyed by uid=%s (result=%s)", note["id"], user.uid, result)
        return result


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
