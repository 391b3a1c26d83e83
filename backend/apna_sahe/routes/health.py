"""
Apna SAHE Backend — Health Check Route
========================================

What:  Liveness/readiness probe for the hosting platform and uptime monitors.
How:   Builds the Firestore client and reads at most one user document; any
       failure on the way reports `degraded` instead of an error response.

Status levels:
    - healthy:  Firestore answered
    - degraded: Firestore unreachable; the process still serves requests,
                so `ok` stays true and the HTTP status stays 200
"""

import logging
import time

from fastapi import APIRouter

from apna_sahe import __version__
from apna_sahe.firebase import USERS, get_firestore
from apna_sahe.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns `ok: true` while the process is up, plus Firestore connectivity.",
)
async def health_check() -> HealthResponse:
    firestore_status = "connected"
    overall = "healthy"

    # Client construction can fail too (no project id under default credentials)
    try:
        db = get_firestore()
        await db.collection(USERS).limit(1).get()
    except Exception as e:
        firestore_status = "disconnected"
        overall = "degraded"
        logger.warning("Health check: Firestore unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        firestore=firestore_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
