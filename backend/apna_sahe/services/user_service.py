"""
Apna SAHE Backend — User Service
==================================

What:  Read and admin-write access to `users/{uid}` documents, including the
       points leaderboard.
Who:   Called by the users routes; role/branch listings are admin-only there.

Query Patterns:
    - By role / branch:  where(field == value)
    - Leaderboard:       where(role == "student") order_by(points desc) limit(n)
                         → needs the composite index (role ASC, points DESC)
"""

import logging
from typing import List

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from apna_sahe.config import settings
from apna_sahe.exceptions import ValidationError
from apna_sahe.firebase import (
    USERS,
    collect,
    delete_document,
    fetch_document,
    firestore_errors,
    update_document,
)
from apna_sahe.schemas.user import LeaderboardEntry, UserResponse, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Directory and leaderboard operations over the users collection."""

    async def get_all_users(self, db) -> List[UserResponse]:
        with firestore_errors("listing users"):
            docs = await collect(db.collection(USERS))
        return [UserResponse.model_validate(doc) for doc in docs]

    async def get_users_by_role(self, db, role: str) -> List[UserResponse]:
        query = db.collection(USERS).where(filter=FieldFilter("role", "==", role))
        with firestore_errors("listing users by role"):
            docs = await collect(query)
        return [UserResponse.model_validate(doc) for doc in docs]

    async def get_users_by_branch(self, db, branch: str) -> List[UserResponse]:
        query = db.collection(USERS).where(filter=FieldFilter("branch", "==", branch.upper()))
        with firestore_errors("listing users by branch"):
            docs = await collect(query)
        return [UserResponse.model_validate(doc) for doc in docs]

    async def get_leaderboard(self, db, limit_count: int = None) -> List[LeaderboardEntry]:
        """
        Top students by points.

        Ranks are positional (1, 2, 3, ...); students with equal points get
        consecutive ranks in the order Firestore returns them.
        """
        limit_count = limit_count or settings.leaderboard_default_limit
        query = (
            db.collection(USERS)
            .where(filter=FieldFilter("role", "==", "student"))
            .order_by("points", direction=firestore.Query.DESCENDING)
            .limit(limit_count)
        )
        with firestore_errors("building leaderboard"):
            docs = await collect(query)
        return [
            LeaderboardEntry.model_validate({**doc, "rank": index + 1})
            for index, doc in enumerate(docs)
        ]

    async def get_user_by_id(self, db, uid: str) -> UserResponse:
        return UserResponse.model_validate(await fetch_document(db, USERS, uid, "User not found"))

    async def update_user(self, db, uid: str, update: UserUpdate) -> UserResponse:
        data = update.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)
        if not data:
            raise ValidationError("No fields to update")
        await update_document(db, USERS, uid, data, "User not found")
        logger.info("Admin updated user uid=%s fields=%s", uid, sorted(data))
        return await self.get_user_by_id(db, uid)

    async def delete_user(self, db, uid: str) -> None:
        """
        Delete the profile document.

        The auth account is left in place; without a profile the account can
        no longer sign in to the portal.
        """
        await delete_document(db, USERS, uid)
        logger.info("Deleted user profile uid=%s", uid)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
