"""
Apna SAHE Backend — User Service Unit Tests
=============================================

What:  Directory listings, the leaderboard ranking, and admin edits.
"""

import pytest

from apna_sahe.exceptions import NotFoundError, ValidationError
from apna_sahe.schemas.user import UserUpdate
from apna_sahe.services.user_service import UserService


@pytest.fixture
def users(fake_db, student_profile):
    fake_db.seed("users", "s1", student_profile("s1", "Asha", points=40, branch="CSE"))
    fake_db.seed("users", "s2", student_profile("s2", "Ravi", points=90, branch="ECE"))
    fake_db.seed("users", "s3", student_profile("s3", "Meena", points=10, branch="CSE"))
    fake_db.seed("users", "a1", {**student_profile("a1", "Admin", points=500), "role": "admin", "branch": "ALL"})
    return fake_db


class TestUserListings:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_all_users(self, users):
        assert {u.uid for u in await self.service.get_all_users(users)} == {"s1", "s2", "s3", "a1"}

    @pytest.mark.asyncio
    async def test_by_role(self, users):
        assert [u.uid for u in await self.service.get_users_by_role(users, "admin")] == ["a1"]

    @pytest.mark.asyncio
    async def test_by_branch_is_case_insensitive(self, users):
        assert {u.uid for u in await self.service.get_users_by_branch(users, "cse")} == {"s1", "s3"}


class TestLeaderboard:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_students_ranked_by_points(self, users):
        board = await self.service.get_leaderboard(users)
        assert [(e.rank, e.uid, e.points) for e in board] == [(1, "s2", 90), (2, "s1", 40), (3, "s3", 10)]

    @pytest.mark.asyncio
    async def test_limit(self, users):
        board = await self.service.get_leaderboard(users, 1)
        assert [e.uid for e in board] == ["s2"]


class TestUserAdmin:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_get_missing_user(self, fake_db):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_user_by_id(fake_db, "nobody")
        assert exc_info.value.message == "User not found"

    @pytest.mark.asyncio
    async def test_update_user_role_and_points(self, users):
        updated = await self.service.update_user(users, "s1", UserUpdate(role="admin", points=5))
        assert updated.role == "admin"
        assert updated.points == 5

    @pytest.mark.asyncio
    async def test_update_missing_user(self, fake_db):
        with pytest.raises(NotFoundError):
            await self.service.update_user(fake_db, "nobody", UserUpdate(name="X"))

    @pytest.mark.asyncio
    async def test_empty_update(self, users):
        with pytest.raises(ValidationError):
            await self.service.update_user(users, "s1", UserUpdate())

    @pytest.mark.asyncio
    async def test_delete_user(self, users):
        await self.service.delete_user(users, "s3")
        assert users.doc("users", "s3") is None
