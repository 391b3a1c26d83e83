"""
Apna SAHE Backend — Authentication Service
============================================

What:  Registration, password sign-in, sign-out, and the user profile
       operations tied to an auth account.
Why:   Accounts live in Firebase Auth but the portal's notion of a user (role,
       branch, points) lives in `users/{uid}`; the two must be created and
       kept together.
How:   Account management goes through the Admin SDK (threadpool, it blocks).
       Password sign-in goes through the Identity Toolkit REST API with httpx,
       because the Admin SDK cannot check passwords.

Registration Flow:
    ┌──────────────┐    ┌─────────────────┐    ┌──────────────────┐
    │ Domain check │───▶│ Create auth user│───▶│ Write users/{uid}│
    └──────────────┘    └─────────────────┘    └──────────────────┘
                                                        │ fails
                                                        ▼
                                               delete the auth user
    so that a half-registered account never blocks re-registration.
"""

import logging
from typing import Any, Dict, Optional, Union

import httpx
from firebase_admin import auth as firebase_auth
from google.cloud import firestore
from starlette.concurrency import run_in_threadpool
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from apna_sahe.config import settings
from apna_sahe.exceptions import (
    AuthenticationError,
    AuthProviderError,
    ConflictError,
    NotFoundError,
    SaheError,
    ValidationError,
)
from apna_sahe.firebase import (
    USERS,
    fetch_document,
    firestore_errors,
    init_firebase_admin,
    snapshot_to_dict,
    update_document,
)
from apna_sahe.schemas.user import (
    AdminCreateRequest,
    ProfileUpdate,
    SignInResponse,
    SignUpRequest,
    SignUpResponse,
    UserResponse,
)
from apna_sahe.services.points import adjust_counters

logger = logging.getLogger(__name__)

# Identity Toolkit error codes that mean "wrong credentials"
_BAD_CREDENTIALS = {"EMAIL_NOT_FOUND", "INVALID_PASSWORD", "INVALID_LOGIN_CREDENTIALS", "INVALID_EMAIL"}

UserLike = Union[UserResponse, Dict[str, Any], None]


def _create_auth_user(email: str, password: str, name: str):
    init_firebase_admin()
    return firebase_auth.create_user(email=email, password=password, display_name=name)


def _delete_auth_user(uid: str) -> None:
    init_firebase_admin()
    firebase_auth.delete_user(uid)


def _revoke_tokens(uid: str) -> None:
    init_firebase_admin()
    firebase_auth.revoke_refresh_tokens(uid)


async def _award_points(transaction, user_ref, points: int):
    return await adjust_counters(transaction, user_ref, points, 1)


class AuthService:
    """
    Account lifecycle for students and admins.

    Args:
        transport: Optional httpx transport for the sign-in REST call
                   (tests pass an httpx.MockTransport).
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    # ── Email Rules ───────────────────────────────────────────────────────

    def validate_email(self, email: str) -> bool:
        """True iff the address belongs to the college domain."""
        return email.strip().lower().endswith(settings.allowed_email_domain.lower())

    # ── Registration ──────────────────────────────────────────────────────

    async def sign_up_student(self, db, payload: SignUpRequest) -> SignUpResponse:
        if not self.validate_email(payload.email):
            raise ValidationError(
                "Only VRSEC students with @vrsec.ac.in email can register",
                field="email",
            )
        profile = {
            "role": "student",
            "branch": payload.branch.upper(),
            "semester": payload.semester,
        }
        return await self._register(db, payload.email, payload.password, payload.name, profile)

    async def create_admin(self, db, payload: AdminCreateRequest) -> SignUpResponse:
        """Create an admin account. Callers must already be admins."""
        if not self.validate_email(payload.email):
            raise ValidationError("Only VRSEC email addresses are allowed", field="email")
        profile = {"role": "admin", "branch": "ALL", "semester": "N/A"}
        return await self._register(db, payload.email, payload.password, payload.name, profile)

    async def _register(
        self,
        db,
        email: str,
        password: str,
        name: str,
        profile: Dict[str, Any],
    ) -> SignUpResponse:
        email = email.strip().lower()
        try:
            record = await run_in_threadpool(_create_auth_user, email, password, name)
        except firebase_auth.EmailAlreadyExistsError as e:
            raise ConflictError("An account with this email already exists", context={"email": email}) from e
        except ValueError as e:
            # The Admin SDK validates arguments locally (e.g. weak password)
            raise ValidationError(str(e), field="password") from e
        except firebase_auth.UnexpectedResponseError as e:
            logger.error("Auth provider rejected account creation: %s", str(e))
            raise AuthProviderError(context={"error_type": type(e).__name__}) from e

        user_doc = {
            "uid": record.uid,
            "name": name,
            "email": email,
            "points": 0,
            "notesUploaded": 0,
            "createdAt": firestore.SERVER_TIMESTAMP,
            **profile,
        }
        user_ref = db.collection(USERS).document(record.uid)
        try:
            with firestore_errors("creating user profile"):
                await user_ref.set(user_doc)
                snapshot = await user_ref.get()
        except SaheError:
            logger.error("Profile write failed for %s, removing auth account", record.uid)
            try:
                await run_in_threadpool(_delete_auth_user, record.uid)
            except firebase_auth.UserNotFoundError:
                pass
            raise

        logger.info("Registered %s account uid=%s", profile["role"], record.uid)
        return SignUpResponse(uid=record.uid, user_data=UserResponse.model_validate(snapshot_to_dict(snapshot)))

    # ── Sessions ──────────────────────────────────────────────────────────

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(initial=settings.retry_min_wait, max=settings.retry_max_wait, jitter=1),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _password_sign_in(self, email: str, password: str) -> httpx.Response:
        async with httpx.AsyncClient(transport=self._transport, timeout=settings.auth_request_timeout) as client:
            return await client.post(
                settings.identity_toolkit_url,
                params={"key": settings.firebase_web_api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
            )

    async def sign_in(self, db, email: str, password: str) -> SignInResponse:
        """
        Verify a password and return fresh tokens plus the user's profile.

        Raises:
            ValidationError:     address outside the college domain (→ 400)
            AuthenticationError: wrong email/password or disabled account (→ 401)
            NotFoundError:       auth account without a profile document (→ 404)
            AuthProviderError:   provider unreachable or not configured (→ 503)
        """
        if not self.validate_email(email):
            raise ValidationError("Only VRSEC email addresses are allowed", field="email")
        if not settings.firebase_web_api_key:
            raise AuthProviderError(
                "Password sign-in is not configured",
                context={"setting": "FIREBASE_WEB_API_KEY"},
            )

        try:
            response = await self._password_sign_in(email.strip().lower(), password)
        except httpx.TransportError as e:
            logger.error("Identity Toolkit unreachable: %s", str(e))
            raise AuthProviderError(context={"error_type": type(e).__name__}) from e

        if response.status_code == 400:
            try:
                error = response.json().get("error") or {}
                code = error.get("message", "")
            except (ValueError, AttributeError):
                logger.warning("Sign-in rejected with an unreadable error body")
                raise AuthenticationError("Sign-in failed")
            # Codes may carry a suffix, e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : ..."
            code = code.split(":")[0].strip()
            logger.info("Sign-in rejected: %s", code)
            if code == "USER_DISABLED":
                raise AuthenticationError("This account has been disabled")
            if code.startswith("TOO_MANY_ATTEMPTS"):
                raise AuthenticationError("Too many failed attempts. Please try again later.")
            if code in _BAD_CREDENTIALS:
                raise AuthenticationError("Invalid email or password")
            raise AuthenticationError("Sign-in failed", context={"code": code})
        if response.status_code != 200:
            logger.error("Identity Toolkit returned HTTP %d", response.status_code)
            raise AuthProviderError(context={"status": response.status_code})

        body = response.json()
        uid = body["localId"]
        user_data = await self.get_current_user_data(db, uid, message="User data not found in database")
        logger.info("uid=%s signed in", uid)
        return SignInResponse(
            uid=uid,
            id_token=body["idToken"],
            refresh_token=body.get("refreshToken", ""),
            expires_in=int(body.get("expiresIn", 3600)),
            user_data=user_data,
        )

    async def sign_out(self, uid: str) -> None:
        """
        Revoke the user's refresh tokens.

        Existing ID tokens stay valid until they expire (one hour at most).
        """
        try:
            await run_in_threadpool(_revoke_tokens, uid)
        except firebase_auth.UserNotFoundError as e:
            raise NotFoundError("User not found", resource="user", resource_id=uid) from e
        logger.info("Revoked refresh tokens for uid=%s", uid)

    # ── Profile ───────────────────────────────────────────────────────────

    async def get_current_user_data(self, db, uid: str, message: str = "User data not found") -> UserResponse:
        return UserResponse.model_validate(await fetch_document(db, USERS, uid, message))

    async def update_user_profile(self, db, uid: str, update: ProfileUpdate) -> UserResponse:
        data = update.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)
        if not data:
            raise ValidationError("No fields to update")
        await update_document(db, USERS, uid, data, "User data not found")
        logger.info("Updated profile uid=%s fields=%s", uid, sorted(data))
        return await self.get_current_user_data(db, uid)

    async def add_user_points(self, db, uid: str, points: int = 10) -> Optional[Dict[str, int]]:
        """
        Add points and one uploaded note to a user, atomically.

        Returns the new counters, or None when the user does not exist.
        """
        user_ref = db.collection(USERS).document(uid)
        with firestore_errors("adding user points"):
            counters = await firestore.async_transactional(_award_points)(db.transaction(), user_ref, points)
        if counters is not None:
            logger.info("Awarded %d points to uid=%s", points, uid)
        return counters

    # ── Role Predicates ───────────────────────────────────────────────────

    @staticmethod
    def _role(user_data: UserLike) -> Optional[str]:
        if user_data is None:
            return None
        if isinstance(user_data, dict):
            return user_data.get("role")
        return user_data.role

    @classmethod
    def is_admin(cls, user_data: UserLike) -> bool:
        return cls._role(user_data) == "admin"

    @classmethod
    def is_student(cls, user_data: UserLike) -> bool:
        return cls._role(user_data) == "student"


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
