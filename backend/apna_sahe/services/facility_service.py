"""
Apna SAHE Backend — Infrastructure Service
============================================

What:  The campus facilities directory (library, labs, canteen, ...) with
       timings and map links.
Who:   Reads are public; the routes restrict writes to admins.
"""

import logging
from typing import List

from google.cloud import firestore

from apna_sahe.exceptions import ValidationError
from apna_sahe.firebase import (
    FACILITIES,
    collect,
    delete_document,
    fetch_document,
    firestore_errors,
    update_document,
)
from apna_sahe.schemas.facility import FacilityCreate, FacilityResponse, FacilityUpdate

logger = logging.getLogger(__name__)


class InfrastructureService:
    """CRUD and search over the facilities collection."""

    async def create_facility(self, db, facility: FacilityCreate) -> str:
        data = facility.model_dump(by_alias=True)
        data["createdAt"] = firestore.SERVER_TIMESTAMP
        data["updatedAt"] = firestore.SERVER_TIMESTAMP

        facility_ref = db.collection(FACILITIES).document()
        with firestore_errors("creating facility"):
            await facility_ref.set(data)
        logger.info("Created facility %s (%s)", facility_ref.id, data["name"])
        return facility_ref.id

    async def get_all_facilities(self, db) -> List[FacilityResponse]:
        with firestore_errors("listing facilities"):
            docs = await collect(db.collection(FACILITIES).order_by("name"))
        return [FacilityResponse.model_validate(doc) for doc in docs]

    async def get_facility_by_id(self, db, facility_id: str) -> FacilityResponse:
        doc = await fetch_document(db, FACILITIES, facility_id, "Facility not found")
        return FacilityResponse.model_validate(doc)

    async def update_facility(self, db, facility_id: str, update: FacilityUpdate) -> FacilityResponse:
        data = update.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)
        if not data:
            raise ValidationError("No fields to update")
        data["updatedAt"] = firestore.SERVER_TIMESTAMP
        await update_document(db, FACILITIES, facility_id, data, "Facility not found")
        logger.info("Updated facility %s", facility_id)
        return await self.get_facility_by_id(db, facility_id)

    async def delete_facility(self, db, facility_id: str) -> None:
        await delete_document(db, FACILITIES, facility_id)
        logger.info("Deleted facility %s", facility_id)

    async def search_facilities(self, db, term: str) -> List[FacilityResponse]:
        """Case-insensitive substring match on name or description."""
        needle = term.strip().lower()
        facilities = await self.get_all_facilities(db)
        if not needle:
            return facilities
        return [
            facility for facility in facilities
            if needle in facility.name.lower() or needle in (facility.description or "").lower()
        ]


# ── Singleton Instance ────────────────────────────────────────────────────
facility_service = InfrastructureService()
