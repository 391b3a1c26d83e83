"""
Apna SAHE Backend — Student Query Schemas
===========================================

What:  Student requests for notes on a subject, and their moderation state.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from apna_sahe.schemas.common import CamelModel

QueryStatus = Literal["pending", "completed"]


class QueryCreate(CamelModel):
    subject: str = Field(min_length=1, max_length=120)
    message: str = Field(default="", max_length=2000)
    # Defaults to the name on the caller's profile
    student_name: Optional[str] = Field(default=None, max_length=120)


class QueryUpdate(CamelModel):
    subject: Optional[str] = Field(default=None, min_length=1, max_length=120)
    message: Optional[str] = Field(default=None, max_length=2000)
    status: Optional[QueryStatus] = None


class QueryStatusUpdate(CamelModel):
    status: QueryStatus


class QueryResponse(CamelModel):
    id: str
    user_id: str
    student_name: Optional[str] = None
    subject: str
    message: Optional[str] = None
    status: QueryStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
