"""
Apna SAHE Backend — Auth Route Handlers
=========================================

What:  Account endpoints: student sign-up, password sign-in, sign-out, the
       caller's own profile, and admin creation.
Who:   Called by the portal's login, registration and profile pages.

Access:
    POST  /api/auth/signup   public
    POST  /api/auth/signin   public
    POST  /api/auth/signout  signed-in user
    GET   /api/auth/me       signed-in user
    PATCH /api/auth/me       signed-in user
    POST  /api/auth/admins   admin
"""

import logging

from fastapi import APIRouter, Depends

from apna_sahe.firebase import get_firestore
from apna_sahe.schemas.common import ErrorResponse, OkResponse
from apna_sahe.schemas.user import (
    AdminCreateRequest,
    ProfileUpdate,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    SignUpResponse,
    UserResponse,
)
from apna_sahe.security import AuthenticatedUser, get_current_user, require_admin
from apna_sahe.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/signup",
    status_code=201,
    response_model=SignUpResponse,
    responses={
        400: {"description": "Address outside the college domain", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Register a student account",
)
async def sign_up(payload: SignUpRequest, db=Depends(get_firestore)) -> SignUpResponse:
    return await auth_service.sign_up_student(db, payload)


@router.post(
    "/signin",
    response_model=SignInResponse,
    responses={
        401: {"description": "Wrong email or password", "model": ErrorResponse},
        404: {"description": "Account has no profile", "model": ErrorResponse},
        503: {"description": "Auth provider unavailable", "model": ErrorResponse},
    },
    summary="Sign in with email and password",
)
async def sign_in(payload: SignInRequest, db=Depends(get_firestore)) -> SignInResponse:
    return await auth_service.sign_in(db, payload.email, payload.password)


@router.post("/signout", response_model=OkResponse, summary="Revoke the caller's refresh tokens")
async def sign_out(user: AuthenticatedUser = Depends(get_current_user)) -> OkResponse:
    await auth_service.sign_out(user.uid)
    return OkResponse()


@router.get(
    "/me",
    response_model=UserResponse,
    responses={404: {"description": "No profile document", "model": ErrorResponse}},
    summary="The caller's profile",
)
async def get_me(
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> UserResponse:
    return await auth_service.get_current_user_data(db, user.uid)


@router.patch("/me", response_model=UserResponse, summary="Update the caller's name, branch or semester")
async def update_me(
    update: ProfileUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> UserResponse:
    return await auth_service.update_user_profile(db, user.uid, update)


@router.post(
    "/admins",
    status_code=201,
    response_model=SignUpResponse,
    responses={403: {"description": "Caller is not an admin", "model": ErrorResponse}},
    summary="Create an admin account",
)
async def create_admin(
    payload: AdminCreateRequest,
    admin: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> SignUpResponse:
    logger.info("Admin uid=%s creating admin account for %s", admin.uid, payload.email)
    return await auth_service.create_admin(db, payload)
