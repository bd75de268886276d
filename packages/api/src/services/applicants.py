# This project was developed with assistance from AI tools.
"""Applicant lookup, code_id generation, and intake profile mapping."""

import logging
import secrets
from datetime import UTC, datetime

from db import Applicant, ApplicantProfile, ApplicantRemark, FamilyMember
from db.enums import ApplicantStatus
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.applicant import ApplicationSubmission
from ..schemas.auth import UserContext
from .errors import NotFoundError, StorageError
from .scope import apply_data_scope

logger = logging.getLogger(__name__)

_CODE_ID_ATTEMPTS = 5

_PROFILE_FIELDS = (
    "first_name",
    "middle_name",
    "last_name",
    "suffix",
    "age",
    "gender",
    "date_of_birth",
    "place_of_birth",
    "barangay",
    "education",
    "civil_status",
    "occupation",
    "religion",
    "company",
    "income",
    "employment_status",
    "contact_number",
    "pantawid_beneficiary",
    "indigenous",
    "classification",
    "needs_problems",
    "emergency_name",
    "emergency_relationship",
    "emergency_address",
    "emergency_contact",
)


async def get_applicant(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    *,
    lock: bool = False,
) -> Applicant:
    """Return an applicant visible to the caller, with its profile loaded.

    ``lock=True`` takes a row lock for the rest of the transaction.
    Out-of-scope applicants raise NotFoundError rather than a permission
    error, to avoid leaking existence of records.
    """
    stmt = (
        select(Applicant)
        .options(selectinload(Applicant.profile))
        .where(Applicant.code_id == code_id)
        .execution_options(populate_existing=True)
    )
    stmt = apply_data_scope(stmt, user.data_scope, user)
    if lock:
        stmt = stmt.with_for_update(of=Applicant)
    applicant = (await session.execute(stmt)).scalar_one_or_none()
    if applicant is None:
        raise NotFoundError(f"Applicant {code_id} not found")
    return applicant


async def list_applicants(
    session: AsyncSession,
    user: UserContext,
    *,
    status: ApplicantStatus | None = None,
    barangay: str | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Applicant], int]:
    """Return applicants visible to the caller, most recently updated first.

    Args:
        status: Only return applicants in this status.
        barangay: Only return applicants registered in this barangay. Barangay
            admins are already limited to their own.
    """
    count_stmt = apply_data_scope(
        _apply_filters(select(func.count(Applicant.id)).select_from(Applicant), status, barangay),
        user.data_scope,
        user,
    )
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        select(Applicant)
        .options(selectinload(Applicant.profile))
        .order_by(Applicant.updated_at.desc(), Applicant.id.desc())
        .offset(offset)
        .limit(limit)
    )
    stmt = apply_data_scope(_apply_filters(stmt, status, barangay), user.data_scope, user)
    applicants = (await session.execute(stmt)).scalars().all()
    return list(applicants), total


def _apply_filters(stmt, status, barangay):
    if status is not None:
        stmt = stmt.where(Applicant.status == status)
    if barangay:
        stmt = stmt.where(Applicant.profile.has(ApplicantProfile.barangay == barangay))
    return stmt


async def list_open_remarks(
    session: AsyncSession,
    user: UserContext,
    *,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[tuple[ApplicantRemark, Applicant]], int]:
    """Unresolved remarks on applicants visible to the caller, oldest first."""
    count_stmt = (
        select(func.count(ApplicantRemark.id))
        .select_from(ApplicantRemark)
        .join(Applicant, Applicant.id == ApplicantRemark.applicant_id)
        .where(ApplicantRemark.is_read.is_(False))
    )
    count_stmt = apply_data_scope(count_stmt, user.data_scope, user)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        select(ApplicantRemark, Applicant)
        .join(Applicant, Applicant.id == ApplicantRemark.applicant_id)
        .options(selectinload(Applicant.profile))
        .where(ApplicantRemark.is_read.is_(False))
        .order_by(ApplicantRemark.created_at.asc(), ApplicantRemark.id.asc())
        .offset(offset)
        .limit(limit)
    )
    stmt = apply_data_scope(stmt, user.data_scope, user)
    rows = (await session.execute(stmt)).all()
    return [(remark, applicant) for remark, applicant in rows], total


async def find_by_email(session: AsyncSession, email: str, *, lock: bool = False) -> Applicant | None:
    stmt = (
        select(Applicant)
        .options(selectinload(Applicant.profile), selectinload(Applicant.family_members))
        .where(Applicant.email == email.strip().lower())
        .execution_options(populate_existing=True)
    )
    if lock:
        stmt = stmt.with_for_update(of=Applicant)
    return (await session.execute(stmt)).scalar_one_or_none()


def _candidate_code_id(now: datetime) -> str:
    return f"{now:%Y_%m}_{secrets.randbelow(900000) + 100000}"


async def generate_code_id(session: AsyncSession, now: datetime | None = None) -> str:
    """Generate an unused ``YYYY_MM_NNNNNN`` code."""
    now = now or datetime.now(UTC)
    for _ in range(_CODE_ID_ATTEMPTS):
        code_id = _candidate_code_id(now)
        taken = await session.execute(select(Applicant.id).where(Applicant.code_id == code_id))
        if taken.scalar_one_or_none() is None:
            return code_id
        logger.info("code_id %s already taken, drawing another", code_id)
    raise StorageError("Could not allocate a unique applicant code.")


def apply_profile(profile: ApplicantProfile, submission: ApplicationSubmission) -> ApplicantProfile:
    """Copy intake step fields onto a profile row."""
    for name in _PROFILE_FIELDS:
        setattr(profile, name, getattr(submission, name))
    return profile


def build_family(submission: ApplicationSubmission) -> list[FamilyMember]:
    return [
        FamilyMember(
            full_name=member.full_name,
            age=member.age,
            educational_attainment=member.educational_attainment,
            birthdate=member.birthdate,
        )
        for member in submission.family_members
    ]


def first_name(applicant: Applicant) -> str:
    if applicant.profile is not None and applicant.profile.first_name:
        return applicant.profile.first_name
    return applicant.name.split()[0] if applicant.name else "Applicant"


def barangay_of(applicant: Applicant) -> str | None:
    return applicant.profile.barangay if applicant.profile is not None else None


def civil_status_of(applicant: Applicant) -> str | None:
    return applicant.profile.civil_status if applicant.profile is not None else None


async def reload_applicant(session: AsyncSession, applicant_id: int) -> Applicant:
    """Re-read an applicant after commit so server-side timestamps are current."""
    stmt = (
        select(Applicant)
        .options(selectinload(Applicant.profile))
        .where(Applicant.id == applicant_id)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one()
