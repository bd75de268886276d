# This project was developed with assistance from AI tools.
"""Applicant intake request/response schemas."""

from datetime import date, datetime

from db.enums import ApplicantStatus
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from . import Pagination


class FamilyMemberInput(BaseModel):
    """A child listed on step 2 of the intake form."""

    full_name: str = Field(min_length=1, max_length=300)
    age: int | None = Field(default=None, ge=0, le=120)
    educational_attainment: str | None = None
    birthdate: date | None = None


class ApplicationSubmission(BaseModel):
    """All intake steps submitted at once.

    Step 1 is identity, step 2 the family list, steps 3-5 classification,
    needs/problems and the emergency contact.
    """

    # Step 1
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=100)
    middle_name: str | None = None
    last_name: str = Field(min_length=1, max_length=100)
    suffix: str | None = None
    age: int | None = Field(default=None, ge=0, le=120)
    gender: str | None = None
    date_of_birth: date | None = None
    place_of_birth: str | None = None
    barangay: str | None = None
    education: str | None = None
    civil_status: str | None = None
    occupation: str | None = None
    religion: str | None = None
    company: str | None = None
    income: str | None = None
    employment_status: str | None = None
    contact_number: str | None = None
    pantawid_beneficiary: bool = False
    indigenous: bool = False
    # Step 2
    family_members: list[FamilyMemberInput] = Field(default_factory=list)
    # Step 3
    classification: str | None = None
    # Step 4
    needs_problems: str | None = None
    # Step 5
    emergency_name: str | None = None
    emergency_relationship: str | None = None
    emergency_address: str | None = None
    emergency_contact: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name, self.suffix]
        return " ".join(p.strip() for p in parts if p and p.strip())


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    first_name: str
    middle_name: str | None = None
    last_name: str
    suffix: str | None = None
    barangay: str | None = None
    civil_status: str | None = None
    contact_number: str | None = None
    classification: str | None = None


class ApplicantResponse(BaseModel):
    """Applicant summary returned by intake and lookup endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    code_id: str
    email: str
    name: str
    status: ApplicantStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
    profile: ProfileResponse | None = None


class SubmissionResponse(BaseModel):
    applicant: ApplicantResponse
    resubmitted: bool = False


class ApplicantListResponse(BaseModel):
    data: list[ApplicantResponse]
    pagination: Pagination


class OpenRemarkResponse(BaseModel):
    """An unresolved remark together with the applicant it concerns."""

    id: int
    code_id: str
    name: str
    barangay: str | None = None
    status: ApplicantStatus
    remarks: str
    admin_id: str | None = None
    superadmin_id: str | None = None
    created_at: datetime | None = None


class OpenRemarkListResponse(BaseModel):
    data: list[OpenRemarkResponse]
    pagination: Pagination
