"""
Apna SAHE Backend — Student Query Route Handlers
==================================================

What:  Students ask for notes on a subject; admins review and close the
       requests.

Access:
    POST /api/queries, GET /api/queries/mine         signed-in user
    GET  /api/queries, GET /api/queries/pending      admin
    GET/DELETE /api/queries/{id}                     author or admin
    PATCH /api/queries/{id}, .../status, .../complete admin
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from apna_sahe.firebase import get_firestore
from apna_sahe.schemas.common import CreatedResponse, ErrorResponse, OkResponse
from apna_sahe.schemas.query import (
    QueryCreate,
    QueryResponse,
    QueryStatus,
    QueryStatusUpdate,
    QueryUpdate,
)
from apna_sahe.security import AuthenticatedUser, get_current_user, require_admin
from apna_sahe.services.query_service import query_service

router = APIRouter(prefix="/api/queries", tags=["Queries"])


@router.post("", status_code=201, response_model=CreatedResponse, summary="Request notes for a subject")
async def create_query(
    query: QueryCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> CreatedResponse:
    return CreatedResponse(id=await query_service.create_query(db, user, query))


@router.get("/mine", response_model=List[QueryResponse], summary="The caller's own queries")
async def my_queries(
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> List[QueryResponse]:
    return await query_service.get_queries_by_user(db, user.uid)


@router.get(
    "",
    response_model=List[QueryResponse],
    responses={403: {"description": "Caller is not an admin", "model": ErrorResponse}},
    summary="All queries, optionally by status",
)
async def list_queries(
    status: Optional[QueryStatus] = Query(default=None),
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> List[QueryResponse]:
    if status:
        return await query_service.get_queries_by_status(db, status)
    return await query_service.get_all_queries(db)


@router.get("/pending", response_model=List[QueryResponse], summary="Queries still waiting for notes")
async def pending_queries(
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> List[QueryResponse]:
    return await query_service.get_pending_queries(db)


@router.get(
    "/{query_id}",
    response_model=QueryResponse,
    responses={
        403: {"description": "Not the author or an admin", "model": ErrorResponse},
        404: {"description": "Query not found", "model": ErrorResponse},
    },
)
async def get_query(
    query_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> QueryResponse:
    return await query_service.get_query_by_id(db, query_id, user)


@router.patch("/{query_id}", response_model=QueryResponse)
async def update_query(
    query_id: str,
    update: QueryUpdate,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> QueryResponse:
    return await query_service.update_query(db, query_id, update)


@router.patch("/{query_id}/status", response_model=QueryResponse)
async def update_query_status(
    query_id: str,
    update: QueryStatusUpdate,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> QueryResponse:
    return await query_service.update_query_status(db, query_id, update.status)


@router.post("/{query_id}/complete", response_model=QueryResponse, summary="Mark a query completed")
async def complete_query(
    query_id: str,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> QueryResponse:
    return await query_service.mark_query_completed(db, query_id)


@router.delete("/{query_id}", response_model=OkResponse)
async def delete_query(
    query_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> OkResponse:
    await query_service.delete_query(db, query_id, user)
    return OkResponse()
