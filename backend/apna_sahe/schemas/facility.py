"""
Apna SAHE Backend — Facility Schemas
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from apna_sahe.schemas.common import CamelModel


class FacilityCreate(CamelModel):
    name: str = Field(min_length=1, max_length=120)
    description: str = Field(default="", max_length=2000)
    timings: Optional[str] = None
    # Google Maps URL or a free-text location
    map_url: Optional[str] = None


class FacilityUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=2000)
    timings: Optional[str] = None
    map_url: Optional[str] = None


class FacilityResponse(FacilityCreate):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
