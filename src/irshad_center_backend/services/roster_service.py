'''
Mutation entry points for teachers, enrollments, relationships and billing.
Each one runs the matching ValidationService rule before writing.
Sibling suggestions are read-only.
'''
from datetime import date
from typing import Annotated, Optional
import uuid
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database.queries import RecordQueries, ordered_pair
from ..database import models as db_models
from ..database.db_enums import Shift, GuardianRole, EnrollmentStatus, DetectionMethod
from ..models import roster as roster_models
from ..common.exceptions import ValidationError, ErrorCode, NotFoundDetails
from ..common.logger import log
from ..core.siblings import calculate_confidence_score, last_name, years_apart, SIMILAR_AGE_YEARS
from .validation_service import ValidationService


class RosterService:
    """
    Service for validated writes to the roster.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        queries: Annotated[RecordQueries, Depends(RecordQueries)],
        validation_service: Annotated[ValidationService, Depends(ValidationService)]
    ):
        self.db = db
        self.queries = queries
        self.validation_service = validation_service

    async def _save(self, obj):
        self.db.add(obj)
        try:
            await self.db.flush()
        except Exception as e:
            log.error(f"Database error saving {type(obj).__name__}: {e}", exc_info=True)
            raise
        return obj

    # --- Teachers ---

    async def create_teacher(self, person_id: UUID) -> roster_models.TeacherRead:
        log.info(f"Attempting to create teacher for person {person_id}.")
        await self.validation_service.validate_teacher_creation(person_id)

        teacher = await self._save(db_models.Teachers(id=uuid.uuid4(), person_id=person_id))
        return roster_models.TeacherRead.model_validate(teacher)

    async def assign_teacher(
        self,
        program_profile_id: UUID,
        teacher_id: UUID,
        shift: Shift
    ) -> roster_models.TeacherAssignmentRead:
        await self.validation_service.validate_teacher_assignment(program_profile_id, teacher_id, shift)

        assignment = await self._save(db_models.TeacherAssignments(
            id=uuid.uuid4(),
            program_profile_id=program_profile_id,
            teacher_id=teacher_id,
            shift=Shift(shift).value,
            is_active=True,
            start_date=date.today()
        ))
        log.info(f"Assigned teacher {teacher_id} to profile {program_profile_id} for the {assignment.shift} shift.")
        return roster_models.TeacherAssignmentRead.model_validate(assignment)

    # --- Enrollments ---

    async def create_enrollment(
        self,
        program_profile_id: UUID,
        batch_id: Optional[UUID] = None,
        status: EnrollmentStatus = EnrollmentStatus.REGISTERED,
        start_date: Optional[date] = None
    ) -> roster_models.EnrollmentRead:
        await self.validation_service.validate_enrollment(
            status=status,
            program_profile_id=program_profile_id,
            batch_id=batch_id
        )

        enrollment = await self._save(db_models.Enrollments(
            id=uuid.uuid4(),
            program_profile_id=program_profile_id,
            batch_id=batch_id,
            status=EnrollmentStatus(status).value,
            start_date=start_date or date.today()
        ))
        return roster_models.EnrollmentRead.model_validate(enrollment)

    # --- Guardians ---

    async def create_guardian_relationship(
        self,
        guardian_id: UUID,
        dependent_id: UUID,
        role: GuardianRole = GuardianRole.PARENT
    ) -> roster_models.GuardianRelationshipRead:
        await self.validation_service.validate_guardian_relationship(guardian_id, dependent_id, role)

        relationship = await self._save(db_models.GuardianRelationships(
            id=uuid.uuid4(),
            guardian_id=guardian_id,
            dependent_id=dependent_id,
            role=GuardianRole(role).value,
            is_active=True
        ))
        return roster_models.GuardianRelationshipRead.model_validate(relationship)

    # --- Siblings ---

    async def link_siblings(
        self,
        person_id: UUID,
        sibling_ids: Optional[list[UUID]]
    ) -> roster_models.LinkSiblingsResult:
        """
        Links each sibling to `person_id`, each inside its own savepoint.
        Dissolved relationships are reactivated, active ones are left alone,
        and a failure for one sibling is rolled back and recorded without
        stopping the rest.
        """
        result = roster_models.LinkSiblingsResult()
        if not sibling_ids:
            log.info(f"No siblings to link for person {person_id}.")
            return result

        log.info(f"Linking {len(sibling_ids)} sibling(s) to person {person_id}.")
        for sibling_id in sibling_ids:
            try:
                async with self.db.begin_nested():
                    added = await self._link_sibling(person_id, sibling_id)
            except Exception as e:
                log.error(f"Failed to link sibling {sibling_id} to {person_id}: {e}")
                result.failed += 1
                result.failures.append(roster_models.SiblingFailure(sibling_id=sibling_id, error=str(e)))
                continue
            if added:
                result.added += 1

        log.info(f"Sibling linking complete for {person_id}: added={result.added} failed={result.failed}.")
        return result

    async def _link_sibling(self, person_id: UUID, sibling_id: UUID) -> bool:
        """Returns False when an active relationship already exists."""
        sibling = await self.queries.get_person(sibling_id)
        if sibling is None:
            log.warning(f"Sibling person {sibling_id} not found, skipping.")
            raise ValidationError(
                "Person not found",
                ErrorCode.NOT_FOUND,
                NotFoundDetails(entity="Person", entity_ids=[sibling_id])
            )

        existing = await self.queries.find_sibling_relationship(person_id, sibling_id)
        if existing is not None:
            if existing.is_active:
                log.info(f"Sibling relationship {person_id} <-> {sibling_id} already active.")
                return False
            existing.is_active = True
            existing.detection_method = DetectionMethod.MANUAL.value
            existing.confidence = calculate_confidence_score(DetectionMethod.MANUAL)
            await self.db.flush()
            log.info(f"Reactivated sibling relationship {existing.id}.")
            return True

        await self.validation_service.validate_sibling_relationship(person_id, sibling_id)

        person1_id, person2_id = ordered_pair(person_id, sibling_id)
        await self._save(db_models.SiblingRelationships(
            id=uuid.uuid4(),
            person1_id=person1_id,
            person2_id=person2_id,
            is_active=True,
            detection_method=DetectionMethod.MANUAL.value,
            confidence=calculate_confidence_score(DetectionMethod.MANUAL)
        ))
        return True

    async def get_siblings(self, person_id: UUID) -> list[roster_models.SiblingRead]:
        person = await self.queries.get_person(person_id)
        if person is None:
            raise ValidationError(
                "Person not found",
                ErrorCode.NOT_FOUND,
                NotFoundDetails(entity="Person", entity_ids=[person_id])
            )

        relationships = await self.queries.list_active_sibling_relationships(person_id)
        siblings = []
        for rel in relationships:
            sibling = rel.person2 if rel.person1_id == person_id else rel.person1
            siblings.append(roster_models.SiblingRead(
                person_id=sibling.id,
                name=sibling.name,
                relationship_id=rel.id,
                detection_method=rel.detection_method,
                confidence=rel.confidence
            ))
        return siblings

    async def detect_potential_siblings(self, person_id: UUID) -> list[roster_models.SiblingSuggestion]:
        """
        Suggests unlinked siblings of `person_id` from shared guardians,
        a shared last name and shared contact values. Anyone with a sibling
        row for this person, active or dissolved, is left out. Each candidate
        appears once with its best-scoring match, highest confidence first.
        """
        person = await self.queries.get_person_with_contacts(person_id)
        if person is None:
            raise ValidationError(
                "Person not found",
                ErrorCode.NOT_FOUND,
                NotFoundDetails(entity="Person", entity_ids=[person_id])
            )

        related_ids = await self.queries.list_related_sibling_ids(person_id)
        suggestions: dict[UUID, roster_models.SiblingSuggestion] = {}

        def suggest(candidate, method: DetectionMethod, confidence: float, reasons: list[str]):
            if candidate.id == person_id or candidate.id in related_ids:
                return
            current = suggestions.get(candidate.id)
            if current is not None and current.confidence >= confidence:
                return
            suggestions[candidate.id] = roster_models.SiblingSuggestion(
                person_id=candidate.id,
                name=candidate.name,
                date_of_birth=candidate.date_of_birth,
                detection_method=method,
                confidence=confidence,
                reasons=reasons
            )

        # Other dependents of this person's guardians
        guardian_ids = [rel.guardian_id for rel in await self.queries.list_active_guardian_relationships(person_id)]
        if guardian_ids:
            shared_guardians = {}
            for rel in await self.queries.list_active_dependents_of(guardian_ids, exclude_person_id=person_id):
                dependent, guardians = shared_guardians.setdefault(rel.dependent_id, (rel.dependent, {}))
                guardians[rel.guardian_id] = rel.guardian.name
            for dependent, guardians in shared_guardians.values():
                suggest(
                    dependent,
                    DetectionMethod.GUARDIAN_MATCH,
                    calculate_confidence_score(DetectionMethod.GUARDIAN_MATCH, shared_guardians=len(guardians)),
                    [f"Shared guardian: {name}" for name in guardians.values()]
                )

        surname = last_name(person.name)
        if surname:
            for match in await self.queries.find_persons_by_name_fragment(surname, exclude_person_id=person_id):
                gap = years_apart(person.date_of_birth, match.date_of_birth)
                reasons = [f"Shared last name: {surname}"]
                if gap is not None and gap < SIMILAR_AGE_YEARS:
                    reasons.append(f"Similar age ({round(gap)} years apart)")
                suggest(
                    match,
                    DetectionMethod.NAME_MATCH,
                    calculate_confidence_score(DetectionMethod.NAME_MATCH, age_difference_years=gap),
                    reasons
                )

        contact_values = {cp.value for cp in person.contact_points}
        if contact_values:
            shared_contacts = {}
            for cp in await self.queries.find_contact_points_by_values(contact_values, exclude_person_id=person_id):
                match, reasons = shared_contacts.setdefault(cp.person_id, (cp.person, []))
                reasons.append(f"Shared {cp.type.lower()}: {cp.value}")
            for match, reasons in shared_contacts.values():
                suggest(
                    match,
                    DetectionMethod.CONTACT_MATCH,
                    calculate_confidence_score(DetectionMethod.CONTACT_MATCH, shared_contacts=len(reasons)),
                    reasons
                )

        ranked = sorted(suggestions.values(), key=lambda s: s.confidence, reverse=True)
        log.info(f"Found {len(ranked)} potential sibling(s) for person {person_id}.")
        return ranked

    # --- Billing ---

    async def upsert_billing_assignment(
        self,
        subscription_id: UUID,
        program_profile_id: UUID,
        amount: int,
        percentage: Optional[float] = None
    ) -> roster_models.BillingAssignmentRead:
        """Updates the profile's active assignment on the subscription, or creates one."""
        await self.validation_service.validate_billing_assignment(subscription_id, program_profile_id, amount)

        stmt = select(db_models.BillingAssignments).filter(
            db_models.BillingAssignments.subscription_id == subscription_id,
            db_models.BillingAssignments.program_profile_id == program_profile_id,
            db_models.BillingAssignments.is_active.is_(True)
        )
        assignment = (await self.db.execute(stmt)).scalars().first()

        if assignment is None:
            assignment = db_models.BillingAssignments(
                id=uuid.uuid4(),
                subscription_id=subscription_id,
                program_profile_id=program_profile_id,
                is_active=True
            )
        assignment.amount = amount
        assignment.percentage = percentage

        await self._save(assignment)
        return roster_models.BillingAssignmentRead.model_validate(assignment)
