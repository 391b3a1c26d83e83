"""
Apna SAHE Backend — Facility Route Handlers
=============================================

What:  The public campus facilities directory and its admin management.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from apna_sahe.firebase import get_firestore
from apna_sahe.schemas.common import CreatedResponse, ErrorResponse, OkResponse
from apna_sahe.schemas.facility import FacilityCreate, FacilityResponse, FacilityUpdate
from apna_sahe.security import AuthenticatedUser, require_admin
from apna_sahe.services.facility_service import facility_service

router = APIRouter(prefix="/api/facilities", tags=["Facilities"])


@router.post(
    "",
    status_code=201,
    response_model=CreatedResponse,
    responses={403: {"description": "Caller is not an admin", "model": ErrorResponse}},
    summary="Add a facility",
)
async def create_facility(
    facility: FacilityCreate,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> CreatedResponse:
    return CreatedResponse(id=await facility_service.create_facility(db, facility))


@router.get("", response_model=List[FacilityResponse], summary="All facilities, by name")
async def list_facilities(db=Depends(get_firestore)) -> List[FacilityResponse]:
    return await facility_service.get_all_facilities(db)


@router.get("/search", response_model=List[FacilityResponse], summary="Search by name or description")
async def search_facilities(
    q: str = Query(..., min_length=1, max_length=120),
    db=Depends(get_firestore),
) -> List[FacilityResponse]:
    return await facility_service.search_facilities(db, q)


@router.get(
    "/{facility_id}",
    response_model=FacilityResponse,
    responses={404: {"description": "Facility not found", "model": ErrorResponse}},
)
async def get_facility(facility_id: str, db=Depends(get_firestore)) -> FacilityResponse:
    return await facility_service.get_facility_by_id(db, facility_id)


@router.patch("/{facility_id}", response_model=FacilityResponse)
async def update_facility(
    facility_id: str,
    update: FacilityUpdate,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> FacilityResponse:
    return await facility_service.update_facility(db, facility_id, update)


@router.delete("/{facility_id}", response_model=OkResponse)
async def delete_facility(
    facility_id: str,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> OkResponse:
    await facility_service.delete_facility(db, facility_id)
    return OkResponse()
