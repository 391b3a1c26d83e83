"""
Apna SAHE Backend — Event Schemas
"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from apna_sahe.schemas.common import CamelModel


class EventBase(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    # Target branch, or "ALL" for campus-wide events
    branch: str = Field(min_length=1, max_length=20)
    type: str = Field(min_length=1, max_length=60)
    # Stored as YYYY-MM-DD so that string order is date order
    date: str
    venue: Optional[str] = None
    description: Optional[str] = None
    register_link: Optional[str] = None
    organizer_name: Optional[str] = None
    organizer_phone: Optional[str] = None


def _iso_date(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    try:
        return date.fromisoformat(v).isoformat()
    except ValueError:
        raise ValueError("date must be in YYYY-MM-DD format")


class EventCreate(EventBase):
    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return _iso_date(v)


class EventUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    branch: Optional[str] = Field(default=None, min_length=1, max_length=20)
    type: Optional[str] = Field(default=None, min_length=1, max_length=60)
    date: Optional[str] = None
    venue: Optional[str] = None
    description: Optional[str] = None
    register_link: Optional[str] = None
    organizer_name: Optional[str] = None
    organizer_phone: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return _iso_date(v)

    @field_validator("branch")
    @classmethod
    def upper_branch(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class EventResponse(EventBase):
    id: str
    created_at: Optional[datetime] = None
