# This project was developed with assistance from AI tools.
"""Functional tests for intake submission, re-submission, and scoped lookup."""

import re

import pytest
from db import Applicant, FamilyMember, Notification, StatusChange
from db.enums import ApplicantStatus, NotificationAudience
from sqlalchemy import func, select

from factories import make_submission
from personas import BARANGAY_ADMIN, OTHER_BARANGAY_ADMIN, applicant_user
from src.services import lifecycle
from src.services.applicants import generate_code_id, get_applicant
from src.services.errors import ConflictError, NotFoundError

CODE_ID = re.compile(r"^\d{4}_\d{2}_\d{6}$")


async def _count(session, model, *where) -> int:
    return (await session.execute(select(func.count()).select_from(model).where(*where))).scalar()


async def test_submit_creates_pending_applicant(session):
    result = await lifecycle.submit_application(session, make_submission())

    applicant = result.applicant
    assert result.created is True
    assert result.previous_status is None
    assert applicant.status == ApplicantStatus.PENDING
    assert CODE_ID.match(applicant.code_id)
    assert applicant.email == "maria.santos@example.com"
    assert applicant.name == "Maria Reyes Santos"
    assert applicant.profile.civil_status == "married"
    assert applicant.profile.barangay == "Poblacion"
    assert await _count(session, FamilyMember, FamilyMember.applicant_id == applicant.id) == 2

    history = (
        await session.execute(select(StatusChange).where(StatusChange.applicant_id == applicant.id))
    ).scalars().all()
    assert [(h.from_status, h.to_status) for h in history] == [(None, ApplicantStatus.PENDING)]


async def test_submit_notifies_superadmin_once(session):
    result = await lifecycle.submit_application(session, make_submission())

    rows = (
        await session.execute(
            select(Notification).where(Notification.target_id == result.applicant.id)
        )
    ).scalars().all()
    assert len(rows) == 1
    assert rows[0].kind == "new_app"
    assert rows[0].audience == NotificationAudience.SUPERADMIN
    assert rows[0].message == "New application was created"
    assert rows[0].barangay == "Poblacion"


async def test_duplicate_email_is_conflict(session):
    await lifecycle.submit_application(session, make_submission())

    with pytest.raises(ConflictError, match="Email already registered"):
        await lifecycle.submit_application(
            session, make_submission(email="MARIA.SANTOS@example.com", first_name="Other")
        )
    assert await _count(session, Applicant) == 1


async def test_declined_applicant_resubmits_with_same_code_id(session, superadmin, mailer):
    first = await lifecycle.submit_application(session, make_submission())
    code_id = first.applicant.code_id
    await lifecycle.review_application(
        session, superadmin, code_id, action="decline", remarks="Blurry documents", mailer=mailer
    )

    again = await lifecycle.submit_application(
        session,
        make_submission(
            civil_status="widowed",
            family_members=[{"full_name": "Pedro Santos", "age": 3}],
        ),
    )

    assert again.created is False
    assert again.previous_status == ApplicantStatus.DECLINED
    assert again.applicant.code_id == code_id
    assert again.applicant.status == ApplicantStatus.PENDING
    assert again.applicant.profile.civil_status == "widowed"
    assert await _count(session, Applicant) == 1
    members = (
        await session.execute(
            select(FamilyMember.full_name).where(FamilyMember.applicant_id == first.applicant.id)
        )
    ).scalars().all()
    assert members == ["Pedro Santos"]
    assert await _count(
        session, Notification, Notification.kind == "new_app"
    ) == 2


async def test_generate_code_id_format(session):
    assert CODE_ID.match(await generate_code_id(session))


# ---------------------------------------------------------------------------
# Data scope on lookup
# ---------------------------------------------------------------------------


async def test_barangay_admin_sees_own_barangay_only(session):
    created = await lifecycle.submit_application(session, make_submission())
    code_id = created.applicant.code_id

    found = await get_applicant(session, BARANGAY_ADMIN, code_id)
    assert found.id == created.applicant.id

    with pytest.raises(NotFoundError):
        await get_applicant(session, OTHER_BARANGAY_ADMIN, code_id)


async def test_applicant_sees_only_own_record(session):
    created = await lifecycle.submit_application(session, make_submission())
    code_id = created.applicant.code_id

    found = await get_applicant(session, applicant_user("Maria.Santos@example.com"), code_id)
    assert found.code_id == code_id

    with pytest.raises(NotFoundError):
        await get_applicant(session, applicant_user("someone.else@example.com"), code_id)
