'''
Duplicate student detection and resolution.
'''
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database.queries import RecordQueries
from ..database import models as db_models
from ..database.db_enums import ContactType, EnrollmentStatus, Program
from ..core.duplicates import find_duplicate_groups, normalize_email, normalize_phone
from ..models import students as student_models
from ..common.exceptions import (
    ValidationError,
    ErrorCode,
    NotFoundDetails,
    SelfReferenceDetails,
    RequiredParameterDetails,
)
from ..common.logger import log

# Fields copied from a deleted duplicate into the kept record when the kept one is empty.
MERGEABLE_FIELDS = ('phone', 'date_of_birth', 'education_level', 'grade_level', 'school_name')

ACTIVE_ENROLLMENT_STATUSES = {EnrollmentStatus.REGISTERED.value, EnrollmentStatus.ENROLLED.value}


class DuplicateService:
    """
    Finds likely duplicate roster rows and resolves them by deleting the
    redundant ones, optionally merging their data into the kept row first.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        queries: Annotated[RecordQueries, Depends(RecordQueries)]
    ):
        self.db = db
        self.queries = queries

    async def find_duplicate_groups(self) -> list[student_models.DuplicateGroup]:
        log.info("Scanning student roster for duplicates.")
        students = await self.queries.list_students_with_subscription()
        snapshot = [student_models.StudentSnapshot.model_validate(s) for s in students]
        groups = find_duplicate_groups(snapshot)
        log.info(f"Found {len(groups)} duplicate groups across {len(snapshot)} students.")
        return groups

    async def resolve_duplicates(
        self,
        keep_id: UUID,
        delete_ids: list[UUID],
        merge_data: bool = False
    ) -> student_models.DuplicateResolutionResult:
        """
        Deletes `delete_ids` and keeps `keep_id`. With `merge_data`, gaps in
        the kept record (None or empty strings) are filled from the deleted
        ones; existing values are never overwritten. All ids are checked
        before anything is written.
        """
        if not delete_ids:
            raise ValidationError(
                "No duplicate records selected for deletion",
                ErrorCode.REQUIRED_PARAMETER,
                RequiredParameterDetails(parameters=["delete_ids"])
            )

        if keep_id in delete_ids:
            raise ValidationError(
                "Cannot delete the record you want to keep",
                ErrorCode.SELF_REFERENCE,
                SelfReferenceDetails(entity_id=keep_id)
            )

        keep_record = await self.queries.get_student(keep_id)
        if keep_record is None:
            raise ValidationError(
                "Student record to keep not found",
                ErrorCode.NOT_FOUND,
                NotFoundDetails(entity="Student", entity_ids=[keep_id])
            )

        delete_records = [await self.queries.get_student(student_id) for student_id in delete_ids]
        missing = [student_id for student_id, record in zip(delete_ids, delete_records) if record is None]
        if missing:
            raise ValidationError(
                f"Some duplicate records not found: {', '.join(str(m) for m in missing)}",
                ErrorCode.NOT_FOUND,
                NotFoundDetails(entity="Student", entity_ids=missing)
            )

        affected_batch_ids = []
        for record in [keep_record, *delete_records]:
            if record.batch_id is not None and record.batch_id not in affected_batch_ids:
                affected_batch_ids.append(record.batch_id)

        merged_fields = []
        if merge_data:
            merged_fields = self._merge_into(keep_record, delete_records)

        try:
            await self.db.execute(
                delete(db_models.Students).where(db_models.Students.id.in_(delete_ids))
            )
            await self.db.flush()
        except Exception as e:
            log.error(f"Database error deleting duplicates of {keep_id}: {e}", exc_info=True)
            raise

        log.info(
            f"Resolved duplicates for {keep_id}: deleted {len(delete_ids)}, merged {merged_fields or 'nothing'}. "
            f"Revalidating batches {[str(b) for b in affected_batch_ids]}."
        )
        return student_models.DuplicateResolutionResult(
            keep_id=keep_id,
            deleted_ids=list(delete_ids),
            merged_fields=merged_fields,
            affected_batch_ids=affected_batch_ids
        )

    def _merge_into(
        self,
        keep_record: db_models.Students,
        delete_records: list[db_models.Students]
    ) -> list[str]:
        merged = []
        for record in delete_records:
            for field in MERGEABLE_FIELDS:
                value = getattr(record, field)
                if value not in (None, '') and getattr(keep_record, field) in (None, ''):
                    setattr(keep_record, field, value)
                    merged.append(field)
        return merged

    async def batch_resolve_duplicates(
        self,
        duplicate_groups: list[student_models.DuplicateResolutionRequest],
        merge_data: bool = False
    ) -> student_models.BatchResolutionResult:
        """
        Resolves each group in turn, each inside its own savepoint. A failing
        group is rolled back, recorded and skipped; the remaining groups are
        still processed.
        """
        if not duplicate_groups:
            raise ValidationError(
                "No duplicate groups provided",
                ErrorCode.REQUIRED_PARAMETER,
                RequiredParameterDetails(parameters=["duplicate_groups"])
            )

        resolved_count = 0
        failed_groups = []
        affected_batch_ids = []

        for group in duplicate_groups:
            try:
                async with self.db.begin_nested():
                    result = await self.resolve_duplicates(
                        group.keep_id,
                        group.delete_ids,
                        merge_data or group.merge_data
                    )
            except Exception as e:
                log.error(f"Failed to resolve duplicate group {group.keep_id}: {e}")
                failed_groups.append(student_models.FailedGroup(keep_id=group.keep_id, error=str(e)))
                continue

            resolved_count += 1
            for batch_id in result.affected_batch_ids:
                if batch_id not in affected_batch_ids:
                    affected_batch_ids.append(batch_id)

        if failed_groups:
            log.warning(f"Failed to resolve {len(failed_groups)} of {len(duplicate_groups)} duplicate group(s).")

        return student_models.BatchResolutionResult(
            resolved_count=resolved_count,
            failed_groups=failed_groups,
            affected_batch_ids=affected_batch_ids
        )

    async def check_duplicate(
        self,
        program: Program | str,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> student_models.DuplicateCheckResult:
        """
        Registration-time check: is someone with this email or phone already
        on file, and do they already hold an active profile in `program`?
        Callers must create the person in the same transaction; the unique
        (type, value) constraint on contact points is the final guard.
        """
        program = Program(program)
        email = normalize_email(email)
        phone = normalize_phone(phone)
        if not email and not phone:
            return student_models.DuplicateCheckResult(is_duplicate=False)

        log.info(f"Checking for duplicate {program.value} registration (email={email}, phone={phone}).")
        person = await self.queries.find_person_by_contact(email=email, phone=phone)
        if person is None:
            return student_models.DuplicateCheckResult(is_duplicate=False)

        active_profile = next(
            (
                profile for profile in person.program_profiles
                if profile.program == program.value and any(
                    e.status in ACTIVE_ENROLLMENT_STATUSES and e.end_date is None
                    for e in profile.enrollments
                )
            ),
            None
        )

        email_matches = bool(email) and any(
            cp.type == ContactType.EMAIL.value and cp.value.lower() == email
            for cp in person.contact_points
        )
        phone_matches = bool(phone) and any(
            cp.type in (ContactType.PHONE.value, ContactType.WHATSAPP.value) and cp.value == phone
            for cp in person.contact_points
        )
        if email_matches and phone_matches:
            duplicate_field = 'both'
        elif phone_matches:
            duplicate_field = 'phone'
        else:
            duplicate_field = 'email'

        return student_models.DuplicateCheckResult(
            is_duplicate=True,
            duplicate_field=duplicate_field,
            existing_person_id=person.id,
            has_active_profile=active_profile is not None,
            active_profile_id=active_profile.id if active_profile else None
        )
