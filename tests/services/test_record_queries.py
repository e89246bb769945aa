import pytest
import uuid
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession

from src.irshad_center_backend.database.queries import RecordQueries, ordered_pair
from src.irshad_center_backend.database.db_enums import ContactType, Shift, GuardianRole

from tests.database.factories import (
    PersonFactory,
    ContactPointFactory,
    ProgramProfileFactory,
    EnrollmentFactory,
    TeacherFactory,
    TeacherAssignmentFactory,
    GuardianRelationshipFactory,
    SiblingRelationshipFactory,
    SubscriptionFactory,
    BillingAssignmentFactory,
    StudentFactory,
)


def test_ordered_pair_is_order_independent():
    a, b = uuid.uuid4(), uuid.uuid4()
    assert ordered_pair(a, b) == ordered_pair(b, a)
    first, second = ordered_pair(a, b)
    assert str(first) <= str(second)


@pytest.mark.anyio
class TestRecordQueries:

    async def test_find_person_by_email_loads_profiles(self, record_queries: RecordQueries, db_session: AsyncSession):
        person = PersonFactory()
        ContactPointFactory(person=person, type=ContactType.EMAIL.value, value="ilhan@example.com")
        profile = ProgramProfileFactory(person=person)
        EnrollmentFactory(program_profile=profile)
        await db_session.flush()

        found = await record_queries.find_person_by_contact(email="ilhan@example.com")

        assert found.id == person.id
        assert [p.id for p in found.program_profiles] == [profile.id]
        assert len(found.program_profiles[0].enrollments) == 1

    async def test_find_person_by_whatsapp_number(self, record_queries: RecordQueries, db_session: AsyncSession):
        person = PersonFactory()
        ContactPointFactory(person=person, type=ContactType.WHATSAPP.value, value="6125550199")
        await db_session.flush()

        found = await record_queries.find_person_by_contact(phone="6125550199")

        assert found.id == person.id

    async def test_find_person_without_contact_returns_none(self, record_queries: RecordQueries):
        assert await record_queries.find_person_by_contact() is None

    async def test_inactive_teacher_assignment_is_ignored(self, record_queries: RecordQueries, db_session: AsyncSession):
        assignment = TeacherAssignmentFactory(shift=Shift.EVENING.value, is_active=False)
        await db_session.flush()

        assert await record_queries.find_active_teacher_assignment(assignment.program_profile_id, "EVENING") is None

    async def test_teacher_by_person(self, record_queries: RecordQueries, db_session: AsyncSession):
        teacher = TeacherFactory()
        await db_session.flush()

        found = await record_queries.get_teacher_by_person_id(teacher.person_id)
        assert found.id == teacher.id

    async def test_guardian_relationship_matches_role(self, record_queries: RecordQueries, db_session: AsyncSession):
        relationship = GuardianRelationshipFactory(role=GuardianRole.DONOR.value)
        await db_session.flush()

        assert await record_queries.find_active_guardian_relationship(
            relationship.guardian_id, relationship.dependent_id, "PARENT"
        ) is None
        found = await record_queries.find_active_guardian_relationship(
            relationship.guardian_id, relationship.dependent_id, "DONOR"
        )
        assert found.id == relationship.id

    async def test_sibling_lookup_either_order(self, record_queries: RecordQueries, db_session: AsyncSession):
        first, second = sorted([PersonFactory(), PersonFactory()], key=lambda p: str(p.id))
        relationship = SiblingRelationshipFactory(person1=first, person2=second, is_active=False)
        await db_session.flush()

        assert (await record_queries.find_sibling_relationship(second.id, first.id)).id == relationship.id
        assert await record_queries.list_active_sibling_relationships(first.id) == []

    async def test_billing_assignments_exclude_inactive(self, record_queries: RecordQueries, db_session: AsyncSession):
        subscription = SubscriptionFactory()
        active = BillingAssignmentFactory(subscription_id=subscription.id)
        BillingAssignmentFactory(subscription_id=subscription.id, is_active=False)
        await db_session.flush()

        assignments = await record_queries.list_active_billing_assignments(subscription.id)

        assert [a.id for a in assignments] == [active.id]

    async def test_students_listed_oldest_first_with_subscription(self, record_queries: RecordQueries, db_session: AsyncSession):
        now = datetime.now(timezone.utc)
        newest = StudentFactory(created_at=now)
        oldest = StudentFactory(created_at=now - timedelta(days=60), subscription=SubscriptionFactory())
        middle = StudentFactory(created_at=now - timedelta(days=1))
        await db_session.flush()

        students = await record_queries.list_students_with_subscription()

        assert [s.id for s in students] == [oldest.id, middle.id, newest.id]
        assert students[0].subscription is not None

    async def test_related_sibling_ids_include_dissolved(self, record_queries: RecordQueries, db_session: AsyncSession):
        person, active, dissolved = PersonFactory(), PersonFactory(), PersonFactory()
        for other, is_active in ((active, True), (dissolved, False)):
            person1, person2 = sorted([person, other], key=lambda p: str(p.id))
            SiblingRelationshipFactory(person1=person1, person2=person2, is_active=is_active)
        await db_session.flush()

        assert await record_queries.list_related_sibling_ids(person.id) == {active.id, dissolved.id}
        assert await record_queries.list_related_sibling_ids(active.id) == {person.id}

    async def test_contact_values_match_ignoring_case(self, record_queries: RecordQueries, db_session: AsyncSession):
        person, other = PersonFactory(), PersonFactory()
        ContactPointFactory(person=other, type=ContactType.EMAIL.value, value="Family.Warsame@Example.com")
        await db_session.flush()

        matches = await record_queries.find_contact_points_by_values(
            {"family.warsame@example.com"}, exclude_person_id=person.id
        )
        assert [cp.person_id for cp in matches] == [other.id]
        assert matches[0].person.id == other.id

        assert await record_queries.find_contact_points_by_values(
            {"family.warsame@example.com"}, exclude_person_id=other.id
        ) == []

    async def test_name_fragment_is_case_insensitive(self, record_queries: RecordQueries, db_session: AsyncSession):
        person = PersonFactory(name="Khadra Warsame")
        cousin = PersonFactory(name="Abdi WARSAME")
        PersonFactory(name="Ilhan Omar")
        await db_session.flush()

        matches = await record_queries.find_persons_by_name_fragment("Warsame", exclude_person_id=person.id)

        assert [p.id for p in matches] == [cousin.id]

    async def test_dependents_of_guardians_load_both_sides(self, record_queries: RecordQueries, db_session: AsyncSession):
        guardian = PersonFactory(name="Hawa Ibrahim")
        child, other_child = PersonFactory(), PersonFactory()
        GuardianRelationshipFactory(guardian_id=guardian.id, dependent_id=child.id)
        GuardianRelationshipFactory(guardian_id=guardian.id, dependent_id=other_child.id)
        GuardianRelationshipFactory(guardian_id=guardian.id, dependent_id=PersonFactory().id, is_active=False)
        await db_session.flush()

        guardian_links = await record_queries.list_active_guardian_relationships(child.id)
        assert [rel.guardian_id for rel in guardian_links] == [guardian.id]

        dependents = await record_queries.list_active_dependents_of([guardian.id], exclude_person_id=child.id)
        assert [rel.dependent_id for rel in dependents] == [other_child.id]
        assert dependents[0].guardian.name == "Hawa Ibrahim"
        assert dependents[0].dependent.id == other_child.id
