# This project was developed with assistance from AI tools.
"""
Domain enums for the solo-parent registration lifecycle.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class ApplicantStatus(str, enum.Enum):
    PENDING = "Pending"
    VERIFIED = "Verified"
    DECLINED = "Declined"
    TERMINATED = "Terminated"
    RENEWAL = "Renewal"
    INCOMPLETE = "Incomplete"
    PENDING_REMARKS = "Pending Remarks"

    @classmethod
    def active_statuses(cls) -> frozenset["ApplicantStatus"]:
        """Statuses from which staff may still decline an applicant."""
        return frozenset(
            {cls.PENDING, cls.INCOMPLETE, cls.VERIFIED, cls.RENEWAL, cls.PENDING_REMARKS}
        )

    @classmethod
    def valid_transitions(cls) -> dict["ApplicantStatus", frozenset["ApplicantStatus"]]:
        """Allowed status transitions in the registration lifecycle."""
        return {
            cls.PENDING: frozenset({cls.VERIFIED, cls.INCOMPLETE, cls.DECLINED}),
            cls.INCOMPLETE: frozenset({cls.VERIFIED, cls.INCOMPLETE, cls.DECLINED}),
            cls.VERIFIED: frozenset(
                {cls.PENDING_REMARKS, cls.TERMINATED, cls.RENEWAL, cls.DECLINED}
            ),
            cls.PENDING_REMARKS: frozenset({cls.VERIFIED, cls.TERMINATED, cls.DECLINED}),
            cls.TERMINATED: frozenset({cls.VERIFIED}),
            cls.RENEWAL: frozenset({cls.VERIFIED, cls.RENEWAL, cls.DECLINED}),
            cls.DECLINED: frozenset({cls.PENDING}),
        }


class UserRole(str, enum.Enum):
    APPLICANT = "applicant"
    BARANGAY_ADMIN = "barangay_admin"
    SUPERADMIN = "superadmin"


class CivilStatus(str, enum.Enum):
    SINGLE = "single"
    MARRIED = "married"
    DIVORCED = "divorced"
    WIDOWED = "widowed"
    OTHER = "other"


class DocumentKind(str, enum.Enum):
    PSA = "psa"
    ITR = "itr"
    MED_CERT = "med_cert"
    MARRIAGE = "marriage"
    CENOMAR = "cenomar"
    DEATH_CERT = "death_cert"
    BARANGAY_CERT = "barangay_cert"

    @property
    def has_category(self) -> bool:
        """Barangay certificates predate document categories and never carry one."""
        return self is not DocumentKind.BARANGAY_CERT


class DocumentStatus(str, enum.Enum):
    PENDING = "Pending"
    SUBMITTED = "Submitted"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class DocumentCategory(str, enum.Enum):
    APPLICATION = "application"
    FOLLOWUP = "followup"


class NotificationAudience(str, enum.Enum):
    APPLICANT = "applicant"
    BARANGAY_ADMIN = "barangay_admin"
    SUPERADMIN = "superadmin"
