"""
Apna SAHE Backend — Event Service
===================================

What:  Campus events (workshops, fests, placement drives) shown on the
       portal's events page.
Who:   Reads are public; the routes restrict writes to admins.

Date Handling:
    `date` is stored as a YYYY-MM-DD string, so lexical order is calendar
    order and "upcoming" is a plain `date >= today` range filter.
"""

import logging
from datetime import date
from typing import List

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from apna_sahe.exceptions import ValidationError
from apna_sahe.firebase import (
    EVENTS,
    collect,
    delete_document,
    fetch_document,
    firestore_errors,
    update_document,
)
from apna_sahe.schemas.event import EventCreate, EventResponse, EventUpdate

logger = logging.getLogger(__name__)

ALL_BRANCHES = "ALL"


class EventService:

    async def _list(self, query, action: str) -> List[EventResponse]:
        with firestore_errors(action):
            docs = await collect(query)
        return [EventResponse.model_validate(doc) for doc in docs]

    async def create_event(self, db, event: EventCreate) -> str:
        data = event.model_dump(by_alias=True)
        data["branch"] = data["branch"].upper()
        data["createdAt"] = firestore.SERVER_TIMESTAMP

        event_ref = db.collection(EVENTS).document()
        with firestore_errors("creating event"):
            await event_ref.set(data)
        logger.info("Created event %s (%s on %s)", event_ref.id, data["title"], data["date"])
        return event_ref.id

    async def get_all_events(self, db) -> List[EventResponse]:
        query = db.collection(EVENTS).order_by("date", direction=firestore.Query.DESCENDING)
        return await self._list(query, "listing events")

    async def get_events_by_branch(self, db, branch: str) -> List[EventResponse]:
        """Events for one branch plus the campus-wide ("ALL") ones."""
        branches = sorted({branch.upper(), ALL_BRANCHES})
        query = (
            db.collection(EVENTS)
            .where(filter=FieldFilter("branch", "in", branches))
            .order_by("date", direction=firestore.Query.DESCENDING)
        )
        return await self._list(query, "listing events by branch")

    async def get_events_by_type(self, db, event_type: str) -> List[EventResponse]:
        query = (
            db.collection(EVENTS)
            .where(filter=FieldFilter("type", "==", event_type))
            .order_by("date", direction=firestore.Query.DESCENDING)
        )
        return await self._list(query, "listing events by type")

    async def get_upcoming_events(self, db, today: date = None) -> List[EventResponse]:
        """Events from today onwards, soonest first."""
        today = today or date.today()
        query = (
            db.collection(EVENTS)
            .where(filter=FieldFilter("date", ">=", today.isoformat()))
            .order_by("date")
        )
        return await self._list(query, "listing upcoming events")

    async def get_event_by_id(self, db, event_id: str) -> EventResponse:
        return EventResponse.model_validate(await fetch_document(db, EVENTS, event_id, "Event not found"))

    async def update_event(self, db, event_id: str, update: EventUpdate) -> EventResponse:
        data = update.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)
        if not data:
            raise ValidationError("No fields to update")
        await update_document(db, EVENTS, event_id, data, "Event not found")
        logger.info("Updated event %s fields=%s", event_id, sorted(data))
        return await self.get_event_by_id(db, event_id)

    async def delete_event(self, db, event_id: str) -> None:
        await delete_document(db, EVENTS, event_id)
        logger.info("Deleted event %s", event_id)


# ── Singleton Instance ────────────────────────────────────────────────────
event_service = EventService()
