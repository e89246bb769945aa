'''
Business-rule validation run before a mutation is persisted.

Every method either returns None (the mutation may proceed) or raises
ValidationError. Checks that need no I/O run first, then existence checks,
then business rules. The service never writes.
'''
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends

from ..database.queries import RecordQueries
from ..database.db_enums import Program, Shift, GuardianRole, EnrollmentStatus
from ..common.exceptions import (
    ValidationError,
    ErrorCode,
    NotFoundDetails,
    WrongProgramDetails,
    DuplicateShiftDetails,
    SelfReferenceDetails,
    AlreadyExistsDetails,
    RequiredParameterDetails,
)
from ..common.logger import log


def _not_found(message: str, entity: str, *entity_ids: UUID) -> ValidationError:
    return ValidationError(
        message,
        ErrorCode.NOT_FOUND,
        NotFoundDetails(entity=entity, entity_ids=list(entity_ids))
    )


class ValidationService:
    """
    Enforces the program, uniqueness and self-reference rules that the
    database schema alone cannot express.
    """
    def __init__(self, queries: Annotated[RecordQueries, Depends(RecordQueries)]):
        self.queries = queries

    async def validate_teacher_assignment(
        self,
        program_profile_id: UUID,
        teacher_id: UUID,
        shift: Shift | str
    ) -> None:
        """Teacher assignments are Dugsi-only and unique per (profile, shift) while active."""
        shift = Shift(shift)

        profile = await self.queries.get_program_profile(program_profile_id)
        if profile is None:
            raise _not_found("Program profile not found", "ProgramProfile", program_profile_id)

        if profile.program != Program.DUGSI.value:
            raise ValidationError(
                "Teacher assignments are only allowed for Dugsi program students",
                ErrorCode.WRONG_PROGRAM,
                WrongProgramDetails(program_profile_id=program_profile_id, actual_program=profile.program)
            )

        teacher = await self.queries.get_teacher(teacher_id)
        if teacher is None:
            raise _not_found("Teacher not found", "Teacher", teacher_id)

        existing = await self.queries.find_active_teacher_assignment(program_profile_id, shift.value)
        if existing is not None:
            raise ValidationError(
                f"Student already has an active {shift.value} shift assignment",
                ErrorCode.DUPLICATE_SHIFT,
                DuplicateShiftDetails(
                    program_profile_id=program_profile_id,
                    shift=shift.value,
                    existing_assignment_id=existing.id
                )
            )

    async def validate_enrollment(
        self,
        status: EnrollmentStatus | str,
        program_profile_id: Optional[UUID] = None,
        program: Optional[Program | str] = None,
        batch_id: Optional[UUID] = None
    ) -> None:
        """
        Resolves the program from the profile when an id is given, otherwise
        from `program`. Dugsi never has batches; Mahad without a batch is
        allowed but logged.
        """
        log.info(f"Validating {EnrollmentStatus(status).value} enrollment for profile={program_profile_id} program={program} batch={batch_id}")

        if program_profile_id:
            profile = await self.queries.get_program_profile(program_profile_id)
            if profile is None:
                log.error(f"Program profile {program_profile_id} not found during enrollment validation.")
                raise _not_found("Program profile not found", "ProgramProfile", program_profile_id)
            resolved_program = Program(profile.program)
        elif program:
            resolved_program = Program(program)
        else:
            raise ValidationError(
                "Either program_profile_id or program must be provided",
                ErrorCode.REQUIRED_PARAMETER,
                RequiredParameterDetails(parameters=["program_profile_id", "program"])
            )

        if resolved_program == Program.DUGSI and batch_id is not None:
            raise ValidationError(
                "Dugsi enrollments cannot have batches. Dugsi uses teacher assignments instead.",
                ErrorCode.WRONG_PROGRAM,
                WrongProgramDetails(
                    program_profile_id=program_profile_id,
                    actual_program=resolved_program.value,
                    batch_id=batch_id
                )
            )

        if resolved_program == Program.MAHAD and batch_id is None:
            log.warning(f"Mahad enrollment without batch (profile={program_profile_id or 'new'}).")

        if batch_id is not None:
            batch = await self.queries.get_batch(batch_id)
            if batch is None:
                raise _not_found("Batch not found", "Batch", batch_id)

    async def validate_guardian_relationship(
        self,
        guardian_id: UUID,
        dependent_id: UUID,
        role: GuardianRole | str
    ) -> None:
        role = GuardianRole(role)

        if guardian_id == dependent_id:
            raise ValidationError(
                "A person cannot be their own guardian",
                ErrorCode.SELF_REFERENCE,
                SelfReferenceDetails(entity_id=guardian_id)
            )

        # Looked up one after the other so the error names the missing side.
        guardian = await self.queries.get_person(guardian_id)
        if guardian is None:
            raise _not_found("Guardian person not found", "Person", guardian_id)

        dependent = await self.queries.get_person(dependent_id)
        if dependent is None:
            raise _not_found("Dependent person not found", "Person", dependent_id)

        existing = await self.queries.find_active_guardian_relationship(guardian_id, dependent_id, role.value)
        if existing is not None:
            raise ValidationError(
                f"Active {role.value} relationship already exists between these persons",
                ErrorCode.ALREADY_EXISTS,
                AlreadyExistsDetails(entity="GuardianRelationship", existing_id=existing.id, role=role.value)
            )

    async def validate_sibling_relationship(self, person1_id: UUID, person2_id: UUID) -> None:
        """
        Order-independent. A missing person is reported without saying which
        one, since the pair has no direction. Only an active relationship
        blocks; a dissolved one may be re-created.
        """
        if person1_id == person2_id:
            raise ValidationError(
                "A person cannot be their own sibling",
                ErrorCode.SELF_REFERENCE,
                SelfReferenceDetails(entity_id=person1_id)
            )

        person1 = await self.queries.get_person(person1_id)
        person2 = await self.queries.get_person(person2_id)
        if person1 is None or person2 is None:
            raise _not_found("One or both persons not found", "Person", person1_id, person2_id)

        existing = await self.queries.find_sibling_relationship(person1_id, person2_id)
        if existing is not None and existing.is_active:
            raise ValidationError(
                "Active sibling relationship already exists",
                ErrorCode.ALREADY_EXISTS,
                AlreadyExistsDetails(entity="SiblingRelationship", existing_id=existing.id)
            )

    async def validate_billing_assignment(
        self,
        subscription_id: UUID,
        program_profile_id: UUID,
        amount: int
    ) -> None:
        """
        Over-allocation is advisory: it is logged and the call still succeeds.
        The profile's own current assignment is excluded from the total so an
        update is not counted twice.
        """
        subscription = await self.queries.get_subscription(subscription_id)
        if subscription is None:
            raise _not_found("Subscription not found", "Subscription", subscription_id)

        profile = await self.queries.get_program_profile(program_profile_id)
        if profile is None:
            raise _not_found("Program profile not found", "ProgramProfile", program_profile_id)

        assignments = await self.queries.list_active_billing_assignments(subscription_id)
        total_assigned = sum(
            a.amount for a in assignments if a.program_profile_id != program_profile_id
        )
        new_total = total_assigned + amount

        if new_total > subscription.amount:
            overage = new_total - subscription.amount
            overage_pct = (overage / subscription.amount * 100) if subscription.amount else 100.0
            log.warning(
                f"BillingAssignment total exceeds subscription amount: subscription={subscription_id} "
                f"subscription_amount={subscription.amount} already_assigned={total_assigned} "
                f"new_amount={amount} new_total={new_total} overage={overage} ({overage_pct:.2f}%)"
            )

    async def validate_teacher_creation(self, person_id: UUID) -> None:
        person = await self.queries.get_person(person_id)
        if person is None:
            raise _not_found("Person not found", "Person", person_id)

        existing = await self.queries.get_teacher_by_person_id(person_id)
        if existing is not None:
            raise ValidationError(
                f"Person {person.name} is already a teacher",
                ErrorCode.ALREADY_EXISTS,
                AlreadyExistsDetails(entity="Teacher", existing_id=existing.id)
            )
