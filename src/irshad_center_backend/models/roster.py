'''
Pydantic models for teacher, enrollment, relationship and billing mutations.
'''
from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..database.db_enums import Shift, GuardianRole, EnrollmentStatus, DetectionMethod


# --- API Input Models ---

class TeacherCreate(BaseModel):
    person_id: UUID

class TeacherAssignmentCreate(BaseModel):
    program_profile_id: UUID
    teacher_id: UUID
    shift: Shift

class EnrollmentCreate(BaseModel):
    program_profile_id: UUID
    batch_id: Optional[UUID] = None
    status: EnrollmentStatus = EnrollmentStatus.REGISTERED
    start_date: Optional[date] = None

class GuardianRelationshipCreate(BaseModel):
    guardian_id: UUID
    dependent_id: UUID
    role: GuardianRole = GuardianRole.PARENT

class SiblingLinkRequest(BaseModel):
    sibling_ids: list[UUID]

class BillingAssignmentUpsert(BaseModel):
    subscription_id: UUID
    program_profile_id: UUID
    amount: int = Field(..., ge=0, description="Minor currency units (cents).")
    percentage: Optional[float] = Field(None, ge=0, le=100)


# --- API Read Models ---

class TeacherRead(BaseModel):
    id: UUID
    person_id: UUID

    model_config = ConfigDict(from_attributes=True)

class TeacherAssignmentRead(BaseModel):
    id: UUID
    program_profile_id: UUID
    teacher_id: UUID
    shift: Shift
    is_active: bool
    start_date: date

    model_config = ConfigDict(from_attributes=True)

class EnrollmentRead(BaseModel):
    id: UUID
    program_profile_id: UUID
    batch_id: Optional[UUID] = None
    status: EnrollmentStatus
    start_date: date
    end_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)

class GuardianRelationshipRead(BaseModel):
    id: UUID
    guardian_id: UUID
    dependent_id: UUID
    role: GuardianRole
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

class BillingAssignmentRead(BaseModel):
    id: UUID
    subscription_id: UUID
    program_profile_id: UUID
    amount: int
    percentage: Optional[float] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

class SiblingFailure(BaseModel):
    sibling_id: UUID
    error: str

class LinkSiblingsResult(BaseModel):
    added: int = 0
    failed: int = 0
    failures: list[SiblingFailure] = Field(default_factory=list)

class SiblingRead(BaseModel):
    person_id: UUID
    name: str
    relationship_id: UUID
    detection_method: str
    confidence: Optional[float] = None

class SiblingSuggestion(BaseModel):
    """A person who may be a sibling but is not linked yet."""
    person_id: UUID
    name: str
    date_of_birth: Optional[date] = None
    detection_method: DetectionMethod
    confidence: float
    reasons: list[str] = Field(default_factory=list)
