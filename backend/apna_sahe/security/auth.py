"""
Apna SAHE Backend — Token Verification & Authorization
========================================================

What:  FastAPI dependencies that identify the caller from a Firebase ID token
       and decide whether they may act on a resource.
How:   `get_current_user` parses `Authorization: Bearer <token>` and verifies
       the token with the Admin SDK (in the threadpool, the SDK is blocking).
       `require_admin` and `ensure_can_modify` layer the admin and owner
       checks on top.

Who Is An Admin:
    A caller is an administrator when either
    1. their verified token email equals ADMIN_EMAIL (case-insensitive), or
    2. their `users/{uid}` document has role "admin".
    The email check needs no database read, so it is tried first.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import Depends, Header
from firebase_admin import auth as firebase_auth
from starlette.concurrency import run_in_threadpool

from apna_sahe.config import settings
from apna_sahe.exceptions import (
    AuthenticationError,
    AuthProviderError,
    PermissionDeniedError,
)
from apna_sahe.firebase import USERS, firestore_errors, get_firestore, init_firebase_admin

logger = logging.getLogger(__name__)

BEARER_PATTERN = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


@dataclass
class AuthenticatedUser:
    """The verified identity behind a request."""

    uid: str
    email: str = ""
    claims: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_admin_email(self) -> bool:
        return bool(settings.admin_email) and self.email.lower() == settings.admin_email


def _verify_id_token(id_token: str) -> Dict[str, Any]:
    init_firebase_admin()
    return firebase_auth.verify_id_token(id_token)


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
) -> AuthenticatedUser:
    """
    Resolve the caller from the Authorization header.

    Raises:
        AuthenticationError: header missing/malformed, or token rejected (→ 401)
        AuthProviderError:   signing certificates could not be fetched (→ 503)
    """
    match = BEARER_PATTERN.match(authorization or "")
    if not match:
        raise AuthenticationError("Missing Authorization Bearer token")

    try:
        decoded = await run_in_threadpool(_verify_id_token, match.group(1).strip())
    except firebase_auth.CertificateFetchError as e:
        logger.error("Could not fetch token signing certificates: %s", str(e))
        raise AuthProviderError(context={"error_type": type(e).__name__}) from e
    except (firebase_auth.InvalidIdTokenError, ValueError) as e:
        # Expired, revoked and malformed tokens all land here
        logger.info("Rejected ID token: %s", type(e).__name__)
        raise AuthenticationError(
            "Invalid or expired ID token",
            context={"error_type": type(e).__name__},
        ) from e

    return AuthenticatedUser(
        uid=decoded.get("uid") or decoded.get("sub", ""),
        email=(decoded.get("email") or "").lower(),
        claims=decoded,
    )


async def is_admin_user(db, user: AuthenticatedUser) -> bool:
    """True when the caller has the admin email or an admin user document."""
    if user.has_admin_email:
        return True
    with firestore_errors("checking admin role"):
        snapshot = await db.collection(USERS).document(user.uid).get()
    return snapshot.exists and (snapshot.to_dict() or {}).get("role") == "admin"


async def require_admin(
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> AuthenticatedUser:
    """Dependency for admin-only endpoints (→ 403 for everyone else)."""
    if not await is_admin_user(db, user):
        logger.warning("Admin access denied for uid=%s", user.uid)
        raise PermissionDeniedError("Admin access required")
    return user


async def ensure_can_modify(
    db,
    user: AuthenticatedUser,
    owner_id: Optional[str],
    message: str = "You are not authorized to modify this resource",
) -> None:
    """
    Owner-or-admin check.

    The owner comparison runs first so the common case (a student acting on
    their own note or query) costs no extra read.
    """
    if user.uid and owner_id and user.uid == owner_id:
        return
    if await is_admin_user(db, user):
        return
    logger.warning("uid=%s denied on resource owned by %s", user.uid, owner_id)
    raise PermissionDeniedError(message, context={"owner_id": owner_id})
