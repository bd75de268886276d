# This project was developed with assistance from AI tools.
"""Staff review action schemas."""

from typing import Literal

from db.enums import ApplicantStatus
from pydantic import BaseModel, Field, model_validator


class ApplicationReviewRequest(BaseModel):
    """Accept or decline a Pending/Incomplete application."""

    action: Literal["accept", "decline"]
    remarks: str | None = None
    sync_documents: bool = Field(
        default=True,
        description="On accept, mark every Submitted required document Approved first.",
    )

    @model_validator(mode="after")
    def decline_needs_remarks(self):
        if self.action == "decline" and not (self.remarks and self.remarks.strip()):
            raise ValueError("remarks are required when declining an application")
        return self


class RemarksRequest(BaseModel):
    remarks: str = Field(min_length=1)


class NoteRequest(BaseModel):
    """Optional note recorded on the status history."""

    remarks: str | None = None


class RenewalDecisionRequest(BaseModel):
    """Superadmin decision on a renewal cycle."""

    decision: Literal["approve", "decline"] | None = Field(
        default=None,
        description="When omitted, remarks mentioning 'declined' mean decline.",
    )
    remarks: str | None = None


class StatusChangeResponse(BaseModel):
    """Result of a status transition."""

    code_id: str
    previous_status: ApplicantStatus
    status: ApplicantStatus
    email_sent: bool | None = None
