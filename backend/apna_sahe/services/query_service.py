"""
Apna SAHE Backend — Student Query Service
===========================================

What:  Requests from students for notes on a subject, and the admin workflow
       that marks them completed once notes are available.
Who:   Students create and read their own queries; admins see all of them and
       change their status.

Lifecycle:
    pending ──(admin uploads notes / marks done)──▶ completed
"""

import logging
from typing import List, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from apna_sahe.exceptions import ValidationError
from apna_sahe.firebase import (
    QUERIES,
    USERS,
    collect,
    delete_document,
    fetch_document,
    firestore_errors,
    update_document,
)
from apna_sahe.schemas.query import QueryCreate, QueryResponse, QueryStatus, QueryUpdate
from apna_sahe.security.auth import AuthenticatedUser, ensure_can_modify

logger = logging.getLogger(__name__)

PENDING = "pending"
COMPLETED = "completed"


class QueryService:

    async def _list(self, query, action: str) -> List[QueryResponse]:
        with firestore_errors(action):
            docs = await collect(query.order_by("createdAt", direction=firestore.Query.DESCENDING))
        return [QueryResponse.model_validate(doc) for doc in docs]

    async def create_query(self, db, user: AuthenticatedUser, query: QueryCreate) -> str:
        """
        Record a new pending query for the caller.

        `studentName` falls back to the caller's profile name, then email.
        """
        student_name = query.student_name
        if not student_name:
            with firestore_errors("reading student profile"):
                snapshot = await db.collection(USERS).document(user.uid).get()
            profile = snapshot.to_dict() if snapshot.exists else {}
            student_name = profile.get("name") or user.email

        query_ref = db.collection(QUERIES).document()
        with firestore_errors("creating query"):
            await query_ref.set({
                "userId": user.uid,
                "studentName": student_name,
                "subject": query.subject.strip(),
                "message": query.message,
                "status": PENDING,
                "createdAt": firestore.SERVER_TIMESTAMP,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            })
        logger.info("Query %s created by uid=%s (%s)", query_ref.id, user.uid, query.subject)
        return query_ref.id

    async def get_all_queries(self, db) -> List[QueryResponse]:
        return await self._list(db.collection(QUERIES), "listing queries")

    async def get_queries_by_user(self, db, uid: str) -> List[QueryResponse]:
        query = db.collection(QUERIES).where(filter=FieldFilter("userId", "==", uid))
        return await self._list(query, "listing queries by user")

    async def get_queries_by_status(self, db, status: QueryStatus) -> List[QueryResponse]:
        query = db.collection(QUERIES).where(filter=FieldFilter("status", "==", status))
        return await self._list(query, "listing queries by status")

    async def get_pending_queries(self, db) -> List[QueryResponse]:
        return await self.get_queries_by_status(db, PENDING)

    async def get_query_by_id(
        self,
        db,
        query_id: str,
        user: Optional[AuthenticatedUser] = None,
    ) -> QueryResponse:
        """Fetch one query; when `user` is given, only its author or an admin may."""
        doc = await fetch_document(db, QUERIES, query_id, "Query not found")
        if user is not None:
            await ensure_can_modify(db, user, doc.get("userId"), "You are not authorized to view this query")
        return QueryResponse.model_validate(doc)

    async def update_query_status(self, db, query_id: str, status: QueryStatus) -> QueryResponse:
        data = {"status": status, "updatedAt": firestore.SERVER_TIMESTAMP}
        await update_document(db, QUERIES, query_id, data, "Query not found")
        logger.info("Query %s marked %s", query_id, status)
        return await self.get_query_by_id(db, query_id)

    async def update_query(self, db, query_id: str, update: QueryUpdate) -> QueryResponse:
        data = update.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)
        if not data:
            raise ValidationError("No fields to update")
        data["updatedAt"] = firestore.SERVER_TIMESTAMP
        await update_document(db, QUERIES, query_id, data, "Query not found")
        logger.info("Updated query %s fields=%s", query_id, sorted(data))
        return await self.get_query_by_id(db, query_id)

    async def mark_query_completed(self, db, query_id: str) -> QueryResponse:
        return await self.update_query_status(db, query_id, COMPLETED)

    async def delete_query(self, db, query_id: str, user: Optional[AuthenticatedUser] = None) -> None:
        if user is not None:
            await self.get_query_by_id(db, query_id, user)
        await delete_document(db, QUERIES, query_id)
        logger.info("Deleted query %s", query_id)


# ── Singleton Instance ────────────────────────────────────────────────────
query_service = QueryService()
