# This project was developed with assistance from AI tools.
"""Document request/response schemas."""

from datetime import datetime
from typing import Literal

from db.enums import ApplicantStatus, DocumentCategory, DocumentKind, DocumentStatus
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination


class DocumentUploadRequest(BaseModel):
    """File metadata for an uploaded document.

    The file itself lives in external storage; only its reference is stored.
    """

    kind: str = Field(description="Document kind, e.g. psa, itr, med_cert.")
    file_name: str = Field(min_length=1, max_length=500)
    display_name: str = Field(min_length=1, max_length=255)


class RenewalCertificateRequest(BaseModel):
    file_name: str = Field(min_length=1, max_length=500)
    display_name: str = Field(min_length=1, max_length=255)


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    applicant_id: int
    kind: DocumentKind
    file_name: str
    display_name: str
    status: DocumentStatus
    category: DocumentCategory | None = None
    rejection_reason: str | None = None
    uploaded_at: datetime | None = None


class DocumentUploadResponse(BaseModel):
    """Upload outcome, including any status change it caused."""

    document: DocumentResponse
    created: bool
    applicant_status: ApplicantStatus
    status_changed: bool = False


class DocumentListResponse(BaseModel):
    data: list[DocumentResponse]
    count: int


class DocumentReviewRequest(BaseModel):
    """Staff decision on a single document."""

    code_id: str
    kind: str
    status: Literal[DocumentStatus.APPROVED, DocumentStatus.REJECTED]
    file_name: str | None = Field(
        default=None,
        description="When given, must match the stored file so a replaced upload is not reviewed blind.",
    )
    rejection_reason: str | None = None


class DocumentReviewResponse(BaseModel):
    document: DocumentResponse
    applicant_status: ApplicantStatus
    status_changed: bool = False


class FollowupItem(BaseModel):
    """Follow-up document awaiting staff review."""

    code_id: str
    applicant_name: str
    barangay: str | None = None
    document: DocumentResponse


class FollowupListResponse(BaseModel):
    data: list[FollowupItem]
    pagination: Pagination
