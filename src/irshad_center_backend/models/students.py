'''
Pydantic models for the student roster, duplicate groups and their resolution.
'''
from datetime import date, datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..database.db_enums import StudentStatus, BillingType, PaymentHealth, Program


class SubscriptionSnapshot(BaseModel):
    id: Optional[UUID] = None
    status: str
    amount: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class StudentSnapshot(BaseModel):
    """
    The slice of a roster row that duplicate detection and payment health read.
    """
    id: UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    batch_id: Optional[UUID] = None
    status: StudentStatus = StudentStatus.REGISTERED
    billing_type: Optional[BillingType] = None
    subscription: Optional[SubscriptionSnapshot] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StudentRead(StudentSnapshot):
    date_of_birth: Optional[date] = None
    school_name: Optional[str] = None
    payment_health: PaymentHealth


# --- Duplicate detection ---

class DuplicateGroup(BaseModel):
    """A set of roster rows sharing a normalized email or phone."""
    key: str
    match_type: Literal['email', 'phone']
    match_value: str
    keep_record: StudentSnapshot
    duplicate_records: list[StudentSnapshot]

    @computed_field
    @property
    def count(self) -> int:
        return 1 + len(self.duplicate_records)

    @computed_field
    @property
    def delete_ids(self) -> list[UUID]:
        return [record.id for record in self.duplicate_records]


# --- Resolution inputs/outputs ---

class DuplicateResolutionRequest(BaseModel):
    keep_id: UUID
    delete_ids: list[UUID]
    merge_data: bool = False


class BatchResolutionRequest(BaseModel):
    duplicate_groups: list[DuplicateResolutionRequest]
    merge_data: bool = False


class DuplicateResolutionResult(BaseModel):
    keep_id: UUID
    deleted_ids: list[UUID]
    merged_fields: list[str] = Field(default_factory=list)
    affected_batch_ids: list[UUID] = Field(default_factory=list)


class FailedGroup(BaseModel):
    keep_id: UUID
    error: str


class BatchResolutionResult(BaseModel):
    resolved_count: int
    failed_groups: list[FailedGroup] = Field(default_factory=list)
    affected_batch_ids: list[UUID] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_groups


# --- Registration duplicate check ---

class DuplicateCheckRequest(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    program: Program


class DuplicateCheckResult(BaseModel):
    is_duplicate: bool
    duplicate_field: Optional[Literal['email', 'phone', 'both']] = None
    existing_person_id: Optional[UUID] = None
    has_active_profile: bool = False
    active_profile_id: Optional[UUID] = None
