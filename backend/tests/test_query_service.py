"""
Apna SAHE Backend — Student Query Service Unit Tests
======================================================
"""

import pytest

from apna_sahe.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from apna_sahe.schemas.query import QueryCreate, QueryUpdate
from apna_sahe.services.query_service import QueryService


class TestQueryService:

    def setup_method(self):
        self.service = QueryService()

    @pytest.mark.asyncio
    async def test_create_defaults_to_profile_name(self, fake_db, student_user, student_profile):
        fake_db.seed("users", "stu1", student_profile("stu1", "Asha"))
        query_id = await self.service.create_query(fake_db, student_user, QueryCreate(subject="Compilers"))

        stored = fake_db.doc("queries", query_id)
        assert stored["status"] == "pending"
        assert stored["studentName"] == "Asha"
        assert stored["userId"] == "stu1"

    @pytest.mark.asyncio
    async def test_create_with_explicit_name(self, fake_db, student_user):
        query_id = await self.service.create_query(
            fake_db, student_user, QueryCreate(subject="DBMS", message="Unit 3 please", student_name="A. S.")
        )
        assert fake_db.doc("queries", query_id)["studentName"] == "A. S."

    @pytest.mark.asyncio
    async def test_listings(self, fake_db, student_user, other_student):
        first = await self.service.create_query(fake_db, student_user, QueryCreate(subject="DBMS"))
        second = await self.service.create_query(fake_db, other_student, QueryCreate(subject="Networks"))
        third = await self.service.create_query(fake_db, student_user, QueryCreate(subject="Compilers"))
        await self.service.mark_query_completed(fake_db, first)

        assert [q.id for q in await self.service.get_all_queries(fake_db)] == [third, second, first]
        assert [q.id for q in await self.service.get_queries_by_user(fake_db, "stu1")] == [third, first]
        assert [q.id for q in await self.service.get_pending_queries(fake_db)] == [third, second]
        assert [q.id for q in await self.service.get_queries_by_status(fake_db, "completed")] == [first]

    @pytest.mark.asyncio
    async def test_status_updates(self, fake_db, student_user):
        query_id = await self.service.create_query(fake_db, student_user, QueryCreate(subject="DBMS"))

        completed = await self.service.mark_query_completed(fake_db, query_id)
        assert completed.status == "completed"

        reopened = await self.service.update_query_status(fake_db, query_id, "pending")
        assert reopened.status == "pending"
        assert reopened.updated_at > reopened.created_at

    @pytest.mark.asyncio
    async def test_update_query(self, fake_db, student_user):
        query_id = await self.service.create_query(fake_db, student_user, QueryCreate(subject="DBMS"))
        updated = await self.service.update_query(fake_db, query_id, QueryUpdate(message="Unit 5"))
        assert updated.message == "Unit 5"
        with pytest.raises(ValidationError):
            await self.service.update_query(fake_db, query_id, QueryUpdate())

    @pytest.mark.asyncio
    async def test_missing_query(self, fake_db):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_query_by_id(fake_db, "missing")
        assert exc_info.value.message == "Query not found"
        with pytest.raises(NotFoundError):
            await self.service.mark_query_completed(fake_db, "missing")

    @pytest.mark.asyncio
    async def test_only_author_or_admin_can_read(self, fake_db, student_user, other_student, admin_user):
        query_id = await self.service.create_query(fake_db, student_user, QueryCreate(subject="DBMS"))

        assert (await self.service.get_query_by_id(fake_db, query_id, student_user)).subject == "DBMS"
        assert (await self.service.get_query_by_id(fake_db, query_id, admin_user)).subject == "DBMS"
        with pytest.raises(PermissionDeniedError):
            await self.service.get_query_by_id(fake_db, query_id, other_student)

    @pytest.mark.asyncio
    async def test_delete_checks_author(self, fake_db, student_user, other_student):
        query_id = await self.service.create_query(fake_db, student_user, QueryCreate(subject="DBMS"))

        with pytest.raises(PermissionDeniedError):
            await self.service.delete_query(fake_db, query_id, other_student)
        assert fake_db.doc("queries", query_id) is not None

        await self.service.delete_query(fake_db, query_id, student_user)
        assert fake_db.doc("queries", query_id) is None
