# This project was developed with assistance from AI tools.
"""
Solo-parent registry -- domain models

Applicants, their intake profile, supporting documents, remarks,
notifications, and the status-change trail.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    ApplicantStatus,
    DocumentCategory,
    DocumentKind,
    DocumentStatus,
    NotificationAudience,
)


class Applicant(Base):
    """Registrant in the solo-parent program, keyed by an immutable code_id."""

    __tablename__ = "applicants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code_id = Column(String(20), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(300), nullable=False)
    status = Column(
        Enum(ApplicantStatus, name="applicant_status", native_enum=False),
        nullable=False,
        default=ApplicantStatus.PENDING,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    profile = relationship(
        "ApplicantProfile", back_populates="applicant", uselist=False, cascade="all, delete-orphan",
    )
    family_members = relationship(
        "FamilyMember", back_populates="applicant", cascade="all, delete-orphan",
    )
    documents = relationship(
        "ApplicantDocument", back_populates="applicant", cascade="all, delete-orphan",
    )
    remarks = relationship(
        "ApplicantRemark", back_populates="applicant", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Applicant(id={self.id}, code_id='{self.code_id}', status='{self.status}')>"


class ApplicantProfile(Base):
    """Intake data captured by the multi-step registration form."""

    __tablename__ = "applicant_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    applicant_id = Column(
        Integer, ForeignKey("applicants.id", ondelete="CASCADE"), unique=True, nullable=False,
    )
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=False)
    suffix = Column(String(20), nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    place_of_birth = Column(String(255), nullable=True)
    barangay = Column(String(100), nullable=True, index=True)
    education = Column(String(100), nullable=True)
    civil_status = Column(String(30), nullable=True)
    occupation = Column(String(100), nullable=True)
    religion = Column(String(100), nullable=True)
    company = Column(String(255), nullable=True)
    income = Column(String(50), nullable=True)
    employment_status = Column(String(50), nullable=True)
    contact_number = Column(String(30), nullable=True)
    pantawid_beneficiary = Column(Boolean, nullable=False, default=False)
    indigenous = Column(Boolean, nullable=False, default=False)
    classification = Column(String(255), nullable=True)
    needs_problems = Column(Text, nullable=True)
    emergency_name = Column(String(255), nullable=True)
    emergency_relationship = Column(String(100), nullable=True)
    emergency_address = Column(Text, nullable=True)
    emergency_contact = Column(String(30), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    applicant = relationship("Applicant", back_populates="profile")

    def __repr__(self):
        return f"<ApplicantProfile(applicant_id={self.applicant_id}, civil_status='{self.civil_status}')>"


class FamilyMember(Base):
    """Child listed on the intake form. Replaced wholesale on re-submission."""

    __tablename__ = "family_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    applicant_id = Column(
        Integer, ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    full_name = Column(String(300), nullable=False)
    age = Column(Integer, nullable=True)
    educational_attainment = Column(String(100), nullable=True)
    birthdate = Column(Date, nullable=True)

    applicant = relationship("Applicant", back_populates="family_members")


class ApplicantDocument(Base):
    """Supporting document. At most one row per (applicant, kind)."""

    __tablename__ = "applicant_documents"
    __table_args__ = (
        UniqueConstraint("applicant_id", "kind", name="uq_applicant_document_kind"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    applicant_id = Column(
        Integer, ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    kind = Column(
        Enum(DocumentKind, name="document_kind", native_enum=False),
        nullable=False,
    )
    file_name = Column(String(500), nullable=False)
    display_name = Column(String(255), nullable=False)
    status = Column(
        Enum(DocumentStatus, name="document_status", native_enum=False),
        nullable=False,
        default=DocumentStatus.PENDING,
    )
    # NULL for barangay_cert rows
    category = Column(
        Enum(DocumentCategory, name="document_category", native_enum=False),
        nullable=True,
    )
    rejection_reason = Column(Text, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    applicant = relationship("Applicant", back_populates="documents")

    def __repr__(self):
        return f"<ApplicantDocument(applicant_id={self.applicant_id}, kind='{self.kind}', status='{self.status}')>"


class ApplicantRemark(Base):
    """Remarks issued by staff against a verified applicant."""

    __tablename__ = "applicant_remarks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    applicant_id = Column(
        Integer, ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    remarks = Column(Text, nullable=False)
    admin_id = Column(String(255), nullable=True)
    superadmin_id = Column(String(255), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    applicant = relationship("Applicant", back_populates="remarks")


class Notification(Base):
    """Notification addressed to an applicant or to staff about an applicant."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    target_id = Column(
        Integer, ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    audience = Column(
        Enum(NotificationAudience, name="notification_audience", native_enum=False),
        nullable=False,
    )
    kind = Column(String(50), nullable=False, index=True)
    message = Column(Text, nullable=False)
    barangay = Column(String(100), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Notification(id={self.id}, target={self.target_id}, kind='{self.kind}')>"


class StatusChange(Base):
    """Append-only applicant status history. INSERT + SELECT only."""

    __tablename__ = "status_changes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    applicant_id = Column(
        Integer, ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    from_status = Column(
        Enum(ApplicantStatus, name="applicant_status", native_enum=False),
        nullable=True,
    )
    to_status = Column(
        Enum(ApplicantStatus, name="applicant_status", native_enum=False),
        nullable=False,
    )
    remarks = Column(Text, nullable=True)
    changed_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<StatusChange(applicant_id={self.applicant_id}, {self.from_status} -> {self.to_status})>"
