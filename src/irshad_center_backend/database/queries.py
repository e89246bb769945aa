'''
Read-side data access used by the validation and duplicate services.
Each method is a single lookup; no business rules live here.
'''
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select, or_, and_, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .engine import get_db_session
from . import models as db_models
from .db_enums import ContactType
from ..common.logger import log


def ordered_pair(first_id: UUID, second_id: UUID) -> tuple[UUID, UUID]:
    """Returns the two ids in the canonical (smaller, larger) order used by sibling rows."""
    if str(first_id) <= str(second_id):
        return first_id, second_id
    return second_id, first_id


class RecordQueries:
    """
    Thin async reader over the current session.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def _first(self, stmt):
        try:
            result = await self.db.execute(stmt)
            return result.scalars().first()
        except Exception as e:
            log.error(f"Database error running lookup {stmt}: {e}", exc_info=True)
            raise

    # --- People & programs ---

    async def get_person(self, person_id: UUID) -> db_models.Persons | None:
        return await self.db.get(db_models.Persons, person_id)

    async def get_program_profile(self, program_profile_id: UUID) -> db_models.ProgramProfiles | None:
        return await self.db.get(db_models.ProgramProfiles, program_profile_id)

    async def get_batch(self, batch_id: UUID) -> db_models.Batches | None:
        return await self.db.get(db_models.Batches, batch_id)

    async def get_teacher(self, teacher_id: UUID) -> db_models.Teachers | None:
        return await self.db.get(db_models.Teachers, teacher_id)

    async def get_teacher_by_person_id(self, person_id: UUID) -> db_models.Teachers | None:
        stmt = select(db_models.Teachers).filter(db_models.Teachers.person_id == person_id)
        return await self._first(stmt)

    async def find_person_by_contact(
        self,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> db_models.Persons | None:
        """
        Finds a person owning the given (already normalized) email or phone,
        eager-loading contact points and program profiles with enrollments.
        """
        conditions = []
        if email:
            conditions.append(and_(
                db_models.ContactPoints.type == ContactType.EMAIL.value,
                db_models.ContactPoints.value == email
            ))
        if phone:
            conditions.append(and_(
                db_models.ContactPoints.type.in_([ContactType.PHONE.value, ContactType.WHATSAPP.value]),
                db_models.ContactPoints.value == phone
            ))
        if not conditions:
            return None

        stmt = select(db_models.Persons).join(
            db_models.ContactPoints, db_models.ContactPoints.person_id == db_models.Persons.id
        ).options(
            selectinload(db_models.Persons.contact_points),
            selectinload(db_models.Persons.program_profiles).selectinload(db_models.ProgramProfiles.enrollments)
        ).filter(or_(*conditions))
        return await self._first(stmt)

    async def get_person_with_contacts(self, person_id: UUID) -> db_models.Persons | None:
        stmt = select(db_models.Persons).options(
            selectinload(db_models.Persons.contact_points)
        ).filter(db_models.Persons.id == person_id)
        return await self._first(stmt)

    async def find_persons_by_name_fragment(
        self,
        fragment: str,
        exclude_person_id: UUID
    ) -> list[db_models.Persons]:
        """Case-insensitive substring match on the full name."""
        stmt = select(db_models.Persons).filter(
            db_models.Persons.name.icontains(fragment, autoescape=True),
            db_models.Persons.id != exclude_person_id
        ).order_by(db_models.Persons.name)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_contact_points_by_values(
        self,
        values: set[str],
        exclude_person_id: UUID
    ) -> list[db_models.ContactPoints]:
        """Contact points of other persons whose value matches any of `values`, ignoring case."""
        stmt = select(db_models.ContactPoints).options(
            selectinload(db_models.ContactPoints.person)
        ).filter(
            func.lower(db_models.ContactPoints.value).in_([v.lower() for v in values]),
            db_models.ContactPoints.person_id != exclude_person_id
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # --- Relationships & assignments ---

    async def find_active_teacher_assignment(
        self,
        program_profile_id: UUID,
        shift: str
    ) -> db_models.TeacherAssignments | None:
        stmt = select(db_models.TeacherAssignments).filter(
            db_models.TeacherAssignments.program_profile_id == program_profile_id,
            db_models.TeacherAssignments.shift == shift,
            db_models.TeacherAssignments.is_active.is_(True)
        )
        return await self._first(stmt)

    async def find_active_guardian_relationship(
        self,
        guardian_id: UUID,
        dependent_id: UUID,
        role: str
    ) -> db_models.GuardianRelationships | None:
        stmt = select(db_models.GuardianRelationships).filter(
            db_models.GuardianRelationships.guardian_id == guardian_id,
            db_models.GuardianRelationships.dependent_id == dependent_id,
            db_models.GuardianRelationships.role == role,
            db_models.GuardianRelationships.is_active.is_(True)
        )
        return await self._first(stmt)

    async def list_active_guardian_relationships(self, dependent_id: UUID) -> list[db_models.GuardianRelationships]:
        stmt = select(db_models.GuardianRelationships).filter(
            db_models.GuardianRelationships.dependent_id == dependent_id,
            db_models.GuardianRelationships.is_active.is_(True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_active_dependents_of(
        self,
        guardian_ids: list[UUID],
        exclude_person_id: UUID
    ) -> list[db_models.GuardianRelationships]:
        """Active relationships of the given guardians, with both persons loaded."""
        stmt = select(db_models.GuardianRelationships).options(
            selectinload(db_models.GuardianRelationships.guardian),
            selectinload(db_models.GuardianRelationships.dependent)
        ).filter(
            db_models.GuardianRelationships.guardian_id.in_(guardian_ids),
            db_models.GuardianRelationships.dependent_id != exclude_person_id,
            db_models.GuardianRelationships.is_active.is_(True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_sibling_relationship(
        self,
        first_id: UUID,
        second_id: UUID
    ) -> db_models.SiblingRelationships | None:
        """Looks up the relationship for an unordered pair, active or not."""
        person1_id, person2_id = ordered_pair(first_id, second_id)
        stmt = select(db_models.SiblingRelationships).filter(
            db_models.SiblingRelationships.person1_id == person1_id,
            db_models.SiblingRelationships.person2_id == person2_id
        )
        return await self._first(stmt)

    async def list_active_sibling_relationships(self, person_id: UUID) -> list[db_models.SiblingRelationships]:
        stmt = select(db_models.SiblingRelationships).options(
            selectinload(db_models.SiblingRelationships.person1),
            selectinload(db_models.SiblingRelationships.person2)
        ).filter(
            or_(
                db_models.SiblingRelationships.person1_id == person_id,
                db_models.SiblingRelationships.person2_id == person_id
            ),
            db_models.SiblingRelationships.is_active.is_(True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_related_sibling_ids(self, person_id: UUID) -> set[UUID]:
        """Everyone with a sibling row involving `person_id`, active or dissolved."""
        stmt = select(
            db_models.SiblingRelationships.person1_id,
            db_models.SiblingRelationships.person2_id
        ).filter(
            or_(
                db_models.SiblingRelationships.person1_id == person_id,
                db_models.SiblingRelationships.person2_id == person_id
            )
        )
        result = await self.db.execute(stmt)
        return {
            person2_id if person1_id == person_id else person1_id
            for person1_id, person2_id in result.all()
        }

    # --- Billing ---

    async def get_subscription(self, subscription_id: UUID) -> db_models.Subscriptions | None:
        return await self.db.get(db_models.Subscriptions, subscription_id)

    async def list_active_billing_assignments(self, subscription_id: UUID) -> list[db_models.BillingAssignments]:
        stmt = select(db_models.BillingAssignments).filter(
            db_models.BillingAssignments.subscription_id == subscription_id,
            db_models.BillingAssignments.is_active.is_(True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # --- Student roster ---

    async def get_student(self, student_id: UUID) -> db_models.Students | None:
        return await self.db.get(db_models.Students, student_id)

    async def list_students_with_subscription(self) -> list[db_models.Students]:
        """All roster rows with their subscription, oldest first."""
        stmt = select(db_models.Students).options(
            selectinload(db_models.Students.subscription)
        ).order_by(db_models.Students.created_at)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
