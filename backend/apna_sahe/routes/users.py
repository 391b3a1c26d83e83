"""
Apna SAHE Backend — User Route Handlers
=========================================

What:  User directory (admin), public leaderboard, and admin edits of user
       profiles and points.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from apna_sahe.config import settings
from apna_sahe.firebase import get_firestore
from apna_sahe.schemas.common import ErrorResponse, OkResponse
from apna_sahe.schemas.user import LeaderboardEntry, PointsAward, Role, UserResponse, UserUpdate
from apna_sahe.security import AuthenticatedUser, get_current_user, require_admin
from apna_sahe.services.auth_service import auth_service
from apna_sahe.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "",
    response_model=List[UserResponse],
    responses={403: {"description": "Caller is not an admin", "model": ErrorResponse}},
    summary="List users, optionally by role or branch",
)
async def list_users(
    role: Optional[Role] = Query(default=None),
    branch: Optional[str] = Query(default=None, max_length=20),
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> List[UserResponse]:
    if role:
        users = await user_service.get_users_by_role(db, role)
        # Both filters: narrow the role listing in memory
        if branch:
            users = [u for u in users if u.branch == branch.upper()]
        return users
    if branch:
        return await user_service.get_users_by_branch(db, branch)
    return await user_service.get_all_users(db)


@router.get("/leaderboard", response_model=List[LeaderboardEntry], summary="Top students by points")
async def leaderboard(
    limit: int = Query(default=settings.leaderboard_default_limit, ge=1, le=100),
    db=Depends(get_firestore),
) -> List[LeaderboardEntry]:
    return await user_service.get_leaderboard(db, limit)


@router.get(
    "/{uid}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="One user's profile",
)
async def get_user(
    uid: str,
    _: AuthenticatedUser = Depends(get_current_user),
    db=Depends(get_firestore),
) -> UserResponse:
    return await user_service.get_user_by_id(db, uid)


@router.patch("/{uid}", response_model=UserResponse, summary="Admin edit of a user profile")
async def update_user(
    uid: str,
    update: UserUpdate,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> UserResponse:
    return await user_service.update_user(db, uid, update)


@router.delete("/{uid}", response_model=OkResponse, summary="Delete a user profile")
async def delete_user(
    uid: str,
    _: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> OkResponse:
    await user_service.delete_user(db, uid)
    return OkResponse()


@router.post(
    "/{uid}/points",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Award points (and one uploaded note) to a user",
)
async def award_points(
    uid: str,
    award: PointsAward,
    admin: AuthenticatedUser = Depends(require_admin),
    db=Depends(get_firestore),
) -> UserResponse:
    await auth_service.add_user_points(db, uid, award.points)
    logger.info("Admin uid=%s awarded %d points to uid=%s", admin.uid, award.points, uid)
    return await user_service.get_user_by_id(db, uid)
