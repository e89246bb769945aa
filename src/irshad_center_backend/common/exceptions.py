"""
This file contains custom, application-specific exceptions.

Every business-rule violation is raised as a single `ValidationError` carrying
an `ErrorCode` and an optional, code-specific details model. The details are a
closed union discriminated on `code`, so callers can match on the variant
instead of probing an open dictionary.
"""
import enum
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field


class ErrorCode(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    WRONG_PROGRAM = "WRONG_PROGRAM"
    DUPLICATE_SHIFT = "DUPLICATE_SHIFT"
    SELF_REFERENCE = "SELF_REFERENCE"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    REQUIRED_PARAMETER = "REQUIRED_PARAMETER"


# --- Details variants (one per code) ---

class NotFoundDetails(BaseModel):
    code: Literal[ErrorCode.NOT_FOUND] = ErrorCode.NOT_FOUND
    entity: str
    entity_ids: list[UUID] = Field(default_factory=list)

class WrongProgramDetails(BaseModel):
    code: Literal[ErrorCode.WRONG_PROGRAM] = ErrorCode.WRONG_PROGRAM
    actual_program: str
    program_profile_id: Optional[UUID] = None
    batch_id: Optional[UUID] = None

class DuplicateShiftDetails(BaseModel):
    code: Literal[ErrorCode.DUPLICATE_SHIFT] = ErrorCode.DUPLICATE_SHIFT
    program_profile_id: UUID
    shift: str
    existing_assignment_id: UUID

class SelfReferenceDetails(BaseModel):
    code: Literal[ErrorCode.SELF_REFERENCE] = ErrorCode.SELF_REFERENCE
    entity_id: UUID

class AlreadyExistsDetails(BaseModel):
    code: Literal[ErrorCode.ALREADY_EXISTS] = ErrorCode.ALREADY_EXISTS
    entity: str
    existing_id: UUID
    role: Optional[str] = None

class RequiredParameterDetails(BaseModel):
    code: Literal[ErrorCode.REQUIRED_PARAMETER] = ErrorCode.REQUIRED_PARAMETER
    parameters: list[str]


ValidationErrorDetails = Annotated[
    Union[
        NotFoundDetails,
        WrongProgramDetails,
        DuplicateShiftDetails,
        SelfReferenceDetails,
        AlreadyExistsDetails,
        RequiredParameterDetails,
    ],
    Field(discriminator="code")
]


HTTP_STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.WRONG_PROGRAM: 400,
    ErrorCode.DUPLICATE_SHIFT: 409,
    ErrorCode.SELF_REFERENCE: 400,
    ErrorCode.ALREADY_EXISTS: 409,
    ErrorCode.REQUIRED_PARAMETER: 400,
}


class ValidationError(Exception):
    """Raised when a proposed mutation breaks a business rule."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: Optional[ValidationErrorDetails] = None,
    ):
        if details is not None and details.code != code:
            raise ValueError(f"Details of kind {details.code.value} cannot describe a {code.value} error.")
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE[self.code]

    def to_response(self) -> dict:
        """Convert to the REST error envelope."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details.model_dump(mode="json") if self.details else None,
            }
        }

    def __repr__(self) -> str:
        return f"ValidationError(code={self.code.value!r}, message={self.message!r})"
