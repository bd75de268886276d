# This project was developed with assistance from AI tools.
"""Document completeness request/response schemas."""

from db.enums import ApplicantStatus, DocumentKind, DocumentStatus
from pydantic import BaseModel


class DocumentRequirement(BaseModel):
    """A single required document with its fulfillment status."""

    kind: DocumentKind
    label: str
    is_provided: bool = False
    document_id: int | None = None
    status: DocumentStatus | None = None


class CompletenessResponse(BaseModel):
    """Document completeness summary for an applicant."""

    code_id: str
    civil_status: str | None = None
    applicant_status: ApplicantStatus
    is_complete: bool
    is_fully_approved: bool
    requirements: list[DocumentRequirement]
    provided_count: int
    required_count: int
