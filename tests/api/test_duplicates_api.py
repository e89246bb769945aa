"""
Tests for the duplicate detection and student roster endpoints.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.database.factories import (
    StudentFactory,
    SubscriptionFactory,
    PersonFactory,
    ContactPointFactory,
)
from tests.constants import TEST_MISSING_ID


@pytest.mark.anyio
class TestDuplicatesAPI:

    async def test_list_duplicate_groups(self, client: AsyncClient, db_session: AsyncSession):
        keep = StudentFactory(phone="+1 612 555 0123", subscription=SubscriptionFactory())
        dup = StudentFactory(phone="612-555-0123")
        await db_session.flush()

        response = await client.get("/duplicates/")

        assert response.status_code == 200
        groups = response.json()
        assert len(groups) == 1
        assert groups[0]["key"] == "phone:6125550123"
        assert groups[0]["keep_record"]["id"] == str(keep.id)
        assert groups[0]["delete_ids"] == [str(dup.id)]
        assert groups[0]["count"] == 2

    async def test_resolve_duplicates(self, client: AsyncClient, db_session: AsyncSession):
        keep, dup = StudentFactory(), StudentFactory()
        await db_session.flush()

        response = await client.post("/duplicates/resolve", json={
            "keep_id": str(keep.id),
            "delete_ids": [str(dup.id)],
        })

        assert response.status_code == 200
        assert response.json()["deleted_ids"] == [str(dup.id)]

    async def test_resolve_keep_in_delete_list(self, client: AsyncClient):
        response = await client.post("/duplicates/resolve", json={
            "keep_id": str(TEST_MISSING_ID),
            "delete_ids": [str(TEST_MISSING_ID)],
        })

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "SELF_REFERENCE"

    async def test_batch_resolve_reports_failures(self, client: AsyncClient, db_session: AsyncSession):
        keep, dup = StudentFactory(), StudentFactory()
        await db_session.flush()

        response = await client.post("/duplicates/batch-resolve", json={
            "duplicate_groups": [
                {"keep_id": str(keep.id), "delete_ids": [str(dup.id)]},
                {"keep_id": str(TEST_MISSING_ID), "delete_ids": [str(dup.id)]},
            ],
            "merge_data": True,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["resolved_count"] == 1
        assert body["failed_groups"][0]["keep_id"] == str(TEST_MISSING_ID)

    async def test_batch_resolve_empty(self, client: AsyncClient):
        response = await client.post("/duplicates/batch-resolve", json={"duplicate_groups": []})

        assert response.status_code == 400
        assert response.json()["error"]["details"]["parameters"] == ["duplicate_groups"]

    async def test_check_duplicate(self, client: AsyncClient, db_session: AsyncSession):
        person = PersonFactory()
        ContactPointFactory(person=person, type="EMAIL", value="returning@example.com")
        await db_session.flush()

        response = await client.post("/duplicates/check", json={
            "email": "Returning@Example.com",
            "program": "DUGSI_PROGRAM",
        })

        assert response.status_code == 200
        assert response.json()["is_duplicate"] is True
        assert response.json()["existing_person_id"] == str(person.id)
        assert response.json()["has_active_profile"] is False


@pytest.mark.anyio
class TestStudentsAPI:

    async def test_list_students_with_payment_health(self, client: AsyncClient, db_session: AsyncSession):
        StudentFactory(name="Healthy", subscription=SubscriptionFactory(status="trialing"))
        StudentFactory(name="Needs Action")
        StudentFactory(name="Pending", status="REGISTERED")
        await db_session.flush()

        response = await client.get("/students/")

        assert response.status_code == 200
        roster = response.json()
        assert [(s["name"], s["payment_health"]) for s in roster] == [
            ("Needs Action", "needs_action"),
            ("Healthy", "healthy"),
            ("Pending", "pending"),
        ]
