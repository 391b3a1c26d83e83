"""
Apna SAHE Backend — Shared Schemas
====================================

What:  Base model with the camelCase alias convention, plus the error, health
       and acknowledgement shapes shared by every route module.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for every resource schema.

    Why camelCase aliases: Firestore documents were written by the web client
    with camelCase field names (`uploaderId`, `pdfUrl`). Matching them keeps
    existing documents readable and the frontend contract unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "forbidden",
            "message": "Not authorized to delete this file",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    Health check response.

    `ok` stays true whenever the process can answer; uptime monitors that only
    look at `ok` keep working. `status` reports dependency health.
    """
    ok: bool = Field(default=True)
    status: str = Field(description="Overall service status: healthy or degraded")
    version: str = Field(description="Application version")
    firestore: str = Field(description="Firestore connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


class CreatedResponse(CamelModel):
    """Returned by create endpoints: the new document id."""
    id: str


class OkResponse(BaseModel):
    """Plain acknowledgement for deletes and state changes."""
    ok: bool = True
