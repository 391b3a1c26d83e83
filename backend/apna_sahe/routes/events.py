"""
Apna SAHE Backend — Event Route Handlers
==========================================

What:  Public event listings and admin event management.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from apna_sahe.firebase import get_firestore
from apna_sahe.schemas.common import CreatedResponse, ErrorResponse, OkResponse
from apna_sahe.schemas.event import EventCreate, EventResponse, EventUpdate
from apna_sahe.security import AuthenticatedUser, require_admin
from apna_sahe.services.event_service import event_service

router = APIRouter(prefix="/api/events", tags=["Events"])


@router.post(
    "",
    status_code=201,
    response_model=CreatedResponse,
    responses={403: {"description": "Caller is not an admin", "model": ErrorResponse}},
    summary="Create an event",
)
async def create_event(
    event: EventCreate,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> CreatedResponse:
    return CreatedResponse(id=await event_service.create_event(db, event))


@router.get("", response_model=List[EventResponse], summary="List events, latest date first")
async def list_events(
    branch: Optional[str] = Query(default=None, max_length=20),
    type: Optional[str] = Query(default=None, max_length=60),
    db=Depends(get_firestore),
) -> List[EventResponse]:
    if branch:
        events = await event_service.get_events_by_branch(db, branch)
        return [e for e in events if e.type == type] if type else events
    if type:
        return await event_service.get_events_by_type(db, type)
    return await event_service.get_all_events(db)


@router.get("/upcoming", response_model=List[EventResponse], summary="Events from today on, soonest first")
async def upcoming_events(db=Depends(get_firestore)) -> List[EventResponse]:
    return await event_service.get_upcoming_events(db)


@router.get(
    "/{event_id}",
    response_model=EventResponse,
    responses={404: {"description": "Event not found", "model": ErrorResponse}},
)
async def get_event(event_id: str, db=Depends(get_firestore)) -> EventResponse:
    return await event_service.get_event_by_id(db, event_id)


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    update: EventUpdate,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> EventResponse:
    return await event_service.update_event(db, event_id, update)


@router.delete("/{event_id}", response_model=OkResponse)
async def delete_event(
    event_id: str,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> OkResponse:
    await event_service.delete_event(db, event_id)
    return OkResponse()
