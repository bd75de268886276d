# This project was developed with assistance from AI tools.
"""Functional tests for document upserts, uploads, and staff review."""

import asyncio

import pytest
from db import ApplicantDocument, Notification, StatusChange
from db.enums import (
    ApplicantStatus,
    DocumentCategory,
    DocumentKind,
    DocumentStatus,
    NotificationAudience,
)
from sqlalchemy import func, select

from factories import make_submission
from personas import BARANGAY_ADMIN, OTHER_BARANGAY_ADMIN, SUPERADMIN, applicant_user
from src.services import documents, lifecycle
from src.services.completeness import check_completeness, is_complete
from src.services.errors import (
    ConflictError,
    InvalidDocumentKind,
    NotFoundError,
    ValidationError,
)
from src.services.mailer import EmailTemplate

MARRIED_KINDS = ["psa", "itr", "med_cert", "marriage"]


async def _submit(session, **overrides):
    return (await lifecycle.submit_application(session, make_submission(**overrides))).applicant


async def _upload(session, code_id, kind, file_name=None, user=SUPERADMIN):
    return await documents.upload_application_document(
        session,
        user,
        code_id,
        kind,
        file_name=file_name or f"uploads/{code_id}/{kind}.pdf",
        display_name=f"{kind}.pdf",
    )


async def _followup(session, code_id, kind, file_name=None):
    return await documents.upload_followup_document(
        session,
        SUPERADMIN,
        code_id,
        kind,
        file_name=file_name or f"uploads/{code_id}/followup-{kind}.pdf",
        display_name=f"{kind}.pdf",
    )


async def _document_count(session, applicant_id) -> int:
    stmt = select(func.count(ApplicantDocument.id)).where(
        ApplicantDocument.applicant_id == applicant_id
    )
    return (await session.execute(stmt)).scalar()


async def _notifications(session, applicant_id, kind=None):
    stmt = select(Notification).where(Notification.target_id == applicant_id)
    if kind is not None:
        stmt = stmt.where(Notification.kind == kind)
    return (await session.execute(stmt)).scalars().all()


# ---------------------------------------------------------------------------
# Upsert semantics
# ---------------------------------------------------------------------------


async def test_reupload_updates_single_row(session):
    applicant = await _submit(session)

    first = await _upload(session, applicant.code_id, "psa", "uploads/psa-v1.pdf")
    second = await _upload(session, applicant.code_id, "psa", "uploads/psa-v2.pdf")

    assert first.created is True
    assert second.created is False
    assert second.document.id == first.document.id
    assert second.document.file_name == "uploads/psa-v2.pdf"
    assert second.document.category == DocumentCategory.APPLICATION
    assert await _document_count(session, applicant.id) == 1


async def test_followup_upload_overwrites_category_and_resets_status(session):
    applicant = await _submit(session)
    await _upload(session, applicant.code_id, "itr")

    outcome = await _followup(session, applicant.code_id, "itr")

    assert outcome.created is False
    assert outcome.document.status == DocumentStatus.PENDING
    assert outcome.document.category == DocumentCategory.FOLLOWUP


async def test_application_upload_keeps_existing_category(session):
    applicant = await _submit(session)
    await _followup(session, applicant.code_id, "med_cert")

    outcome = await _upload(session, applicant.code_id, "med_cert")

    assert outcome.document.status == DocumentStatus.SUBMITTED
    assert outcome.document.category == DocumentCategory.FOLLOWUP


async def test_reupload_clears_rejection_reason(session, mailer):
    applicant = await _submit(session)
    await _upload(session, applicant.code_id, "psa")
    await documents.review_document(
        session,
        SUPERADMIN,
        applicant.code_id,
        "psa",
        DocumentStatus.REJECTED,
        rejection_reason="Unreadable scan",
        mailer=mailer,
    )

    outcome = await _upload(session, applicant.code_id, "psa", "uploads/psa-rescan.pdf")

    assert outcome.document.status == DocumentStatus.SUBMITTED
    assert outcome.document.rejection_reason is None


async def test_unknown_kind_is_rejected(session):
    applicant = await _submit(session)

    with pytest.raises(InvalidDocumentKind):
        await _upload(session, applicant.code_id, "passport")
    assert await _document_count(session, applicant.id) == 0


async def test_concurrent_uploads_of_same_kind_leave_one_row(session_factory, monkeypatch):
    async with session_factory() as setup:
        applicant = await _submit(setup)

    real_find = documents.find_document

    async def slow_find(session, applicant_id, kind):
        document = await real_find(session, applicant_id, kind)
        await asyncio.sleep(0.05)
        return document

    monkeypatch.setattr(documents, "find_document", slow_find)

    async def upload(file_name):
        async with session_factory() as session:
            return await _upload(session, applicant.code_id, "psa", file_name)

    first, second = await asyncio.gather(upload("uploads/a.pdf"), upload("uploads/b.pdf"))

    async with session_factory() as check:
        rows = (
            await check.execute(
                select(ApplicantDocument).where(ApplicantDocument.applicant_id == applicant.id)
            )
        ).scalars().all()
    assert len(rows) == 1
    assert rows[0].kind == DocumentKind.PSA
    assert rows[0].file_name in {"uploads/a.pdf", "uploads/b.pdf"}
    assert first.document.id == second.document.id


# ---------------------------------------------------------------------------
# Completeness-driven transitions
# ---------------------------------------------------------------------------


async def test_partial_upload_stays_pending(session):
    applicant = await _submit(session, civil_status="single")

    await _upload(session, applicant.code_id, "psa")
    outcome = await _upload(session, applicant.code_id, "itr")

    assert outcome.applicant.status == ApplicantStatus.PENDING
    assert outcome.status_changed is False
    assert not await is_complete(session, applicant.id, "single")
    assert await _notifications(session, applicant.id, "docs_complete") == []


async def test_married_applicant_verified_once_all_documents_submitted(session):
    applicant = await _submit(session, civil_status="married")

    outcomes = [await _upload(session, applicant.code_id, kind) for kind in MARRIED_KINDS]

    assert [o.status_changed for o in outcomes] == [False, False, False, True]
    assert outcomes[-1].applicant.status == ApplicantStatus.VERIFIED
    assert len(await _notifications(session, applicant.id, "new_app")) == 1
    complete = await _notifications(session, applicant.id, "docs_complete")
    assert len(complete) == 1
    assert complete[0].audience == NotificationAudience.SUPERADMIN



async def test_earlier_outcome_keeps_its_status_after_later_uploads(session):
    applicant = await _submit(session, civil_status="other")

    first = await _upload(session, applicant.code_id, "psa")
    await _upload(session, applicant.code_id, "itr")
    last = await _upload(session, applicant.code_id, "med_cert")

    assert last.status == ApplicantStatus.VERIFIED
    assert first.status == ApplicantStatus.PENDING
    assert first.status_changed is False
    assert last.status_changed is True

async def test_extra_kind_does_not_count_towards_completeness(session):
    applicant = await _submit(session, civil_status="single")
    for kind in ["psa", "itr", "med_cert", "marriage"]:
        await _upload(session, applicant.code_id, kind)

    summary = await check_completeness(session, SUPERADMIN, applicant.code_id)

    assert summary.applicant_status == ApplicantStatus.PENDING
    assert summary.is_complete is False
    assert summary.provided_count == 3
    assert summary.required_count == 4
    missing = [r.kind for r in summary.requirements if not r.is_provided]
    assert missing == [DocumentKind.CENOMAR]


async def test_pending_followup_blocks_completeness(session):
    applicant = await _submit(session, civil_status="other")
    await _upload(session, applicant.code_id, "psa")
    await _upload(session, applicant.code_id, "itr")
    outcome = await _followup(session, applicant.code_id, "med_cert")

    assert outcome.applicant.status == ApplicantStatus.PENDING
    assert not await is_complete(session, applicant.id, "other")


# ---------------------------------------------------------------------------
# Renewal certificate
# ---------------------------------------------------------------------------


async def test_barangay_cert_requires_renewal(session):
    applicant = await _submit(session)

    with pytest.raises(ConflictError):
        await documents.upload_renewal_certificate(
            session, SUPERADMIN, applicant.code_id, file_name="cert.pdf", display_name="cert.pdf"
        )


async def test_barangay_cert_has_no_category(session, mailer):
    applicant = await _submit(session, civil_status="other")
    for kind in ["psa", "itr", "med_cert"]:
        await _upload(session, applicant.code_id, kind)
    await lifecycle.start_renewal(session, SUPERADMIN, applicant.code_id)

    outcome = await documents.upload_renewal_certificate(
        session, SUPERADMIN, applicant.code_id, file_name="cert.pdf", display_name="cert.pdf"
    )

    assert outcome.document.kind == DocumentKind.BARANGAY_CERT
    assert outcome.document.category is None
    assert outcome.document.status == DocumentStatus.PENDING
    assert len(await _notifications(session, applicant.id, "renewal_submitted")) == 1


# ---------------------------------------------------------------------------
# Listing / deletion / follow-up queue
# ---------------------------------------------------------------------------


async def test_delete_document(session):
    applicant = await _submit(session)
    await _upload(session, applicant.code_id, "psa")

    await documents.delete_document(session, SUPERADMIN, applicant.code_id, "psa")

    assert await _document_count(session, applicant.id) == 0
    with pytest.raises(NotFoundError):
        await documents.delete_document(session, SUPERADMIN, applicant.code_id, "psa")


async def test_applicant_lists_own_documents_only(session):
    mine = await _submit(session)
    other = await _submit(session, email="rosa@example.com", first_name="Rosa")
    await _upload(session, mine.code_id, "psa")
    await _upload(session, other.code_id, "psa")

    me = applicant_user()
    assert len(await documents.list_documents(session, me, mine.code_id)) == 1
    with pytest.raises(NotFoundError):
        await documents.list_documents(session, me, other.code_id)


async def test_followup_queue_is_scoped_by_barangay(session):
    poblacion = await _submit(session)
    bagbaguin = await _submit(
        session, email="rosa@example.com", first_name="Rosa", barangay="Bagbaguin"
    )
    await _followup(session, poblacion.code_id, "itr")
    await _followup(session, bagbaguin.code_id, "psa")
    await _upload(session, poblacion.code_id, "psa")

    rows, total = await documents.list_pending_followups(session, BARANGAY_ADMIN)
    assert total == 1
    doc, owner, barangay = rows[0]
    assert owner.code_id == poblacion.code_id
    assert doc.kind == DocumentKind.ITR
    assert barangay == "Poblacion"

    rows, total = await documents.list_pending_followups(session, SUPERADMIN)
    assert total == 2

    rows, total = await documents.list_pending_followups(session, OTHER_BARANGAY_ADMIN)
    assert [owner.code_id for _, owner, _ in rows] == [bagbaguin.code_id]


# ---------------------------------------------------------------------------
# Staff review
# ---------------------------------------------------------------------------


async def test_reject_requires_reason(session, mailer):
    applicant = await _submit(session)
    await _upload(session, applicant.code_id, "psa")

    with pytest.raises(ValidationError):
        await documents.review_document(
            session, SUPERADMIN, applicant.code_id, "psa", DocumentStatus.REJECTED, mailer=mailer
        )


async def test_reject_records_reason_and_notifies(session, mailer):
    applicant = await _submit(session)
    await _upload(session, applicant.code_id, "psa")

    outcome = await documents.review_document(
        session,
        SUPERADMIN,
        applicant.code_id,
        "psa",
        DocumentStatus.REJECTED,
        rejection_reason="  Unreadable scan ",
        mailer=mailer,
    )

    assert outcome.document.status == DocumentStatus.REJECTED
    assert outcome.document.rejection_reason == "Unreadable scan"
    rejected = await _notifications(session, applicant.id, "document_rejected")
    assert len(rejected) == 1
    assert "Unreadable scan" in rejected[0].message
    mailer.send_all.assert_not_awaited()


async def test_review_of_replaced_file_is_conflict(session, mailer):
    applicant = await _submit(session)
    await _upload(session, applicant.code_id, "psa", "uploads/psa-v1.pdf")
    await _upload(session, applicant.code_id, "psa", "uploads/psa-v2.pdf")

    with pytest.raises(ConflictError):
        await documents.review_document(
            session,
            SUPERADMIN,
            applicant.code_id,
            "psa",
            DocumentStatus.APPROVED,
            file_name="uploads/psa-v1.pdf",
            mailer=mailer,
        )


async def test_review_missing_document_is_not_found(session, mailer):
    applicant = await _submit(session)

    with pytest.raises(NotFoundError):
        await documents.review_document(
            session, SUPERADMIN, applicant.code_id, "itr", DocumentStatus.APPROVED, mailer=mailer
        )


async def test_approving_last_followup_verifies_incomplete_applicant(session, mailer):
    applicant = await _submit(session, civil_status="married")
    for kind in MARRIED_KINDS:
        await _followup(session, applicant.code_id, kind)
    accepted = await lifecycle.review_application(
        session, SUPERADMIN, applicant.code_id, action="accept", mailer=mailer
    )
    assert accepted.applicant.status == ApplicantStatus.INCOMPLETE

    outcomes = [
        await documents.review_document(
            session, BARANGAY_ADMIN, applicant.code_id, kind, DocumentStatus.APPROVED, mailer=mailer
        )
        for kind in MARRIED_KINDS
    ]

    assert [o.status_changed for o in outcomes] == [False, False, False, True]
    assert outcomes[-1].applicant.status == ApplicantStatus.VERIFIED
    assert outcomes[-1].email_sent is True
    sent = mailer.send_all.await_args.args[0]
    assert [m.template for m in sent] == [EmailTemplate.STATUS]
    assert sent[0].variables["action"] == "Accept"
    assert len(await _notifications(session, applicant.id, "document_approved")) == 4
    assert len(await _notifications(session, applicant.id, "new_solo_parent")) == 1


async def _verified_by_upload(session):
    applicant = await _submit(session, civil_status="other")
    for kind in ("psa", "itr", "med_cert"):
        await _upload(session, applicant.code_id, kind)
    return applicant.code_id, applicant.id


async def _into_renewal(session, code_id):
    await lifecycle.start_renewal(session, SUPERADMIN, code_id)
    await documents.upload_renewal_certificate(
        session, SUPERADMIN, code_id, file_name="brgy-cert.pdf", display_name="Barangay Certificate"
    )


async def _into_pending_remarks(session, code_id):
    await lifecycle.issue_remarks(session, SUPERADMIN, code_id, "Reported as remarried")


async def _into_terminated(session, code_id):
    await lifecycle.terminate(session, SUPERADMIN, code_id, remarks="Child turned 22")


@pytest.mark.parametrize(
    "move, expected",
    [
        (_into_renewal, ApplicantStatus.RENEWAL),
        (_into_pending_remarks, ApplicantStatus.PENDING_REMARKS),
        (_into_terminated, ApplicantStatus.TERMINATED),
    ],
)
async def test_document_approval_does_not_reverify(session, mailer, move, expected):
    code_id, applicant_id = await _verified_by_upload(session)
    await move(session, code_id)
    verified_before = await _verified_count(session, applicant_id)

    outcomes = [
        await documents.review_document(
            session, SUPERADMIN, code_id, kind, DocumentStatus.APPROVED, mailer=mailer
        )
        for kind in ("psa", "itr", "med_cert")
    ]

    assert [o.status for o in outcomes] == [expected] * 3
    assert not any(o.status_changed for o in outcomes)
    assert await _verified_count(session, applicant_id) == verified_before
    statuses = dict(
        (
            await session.execute(
                select(ApplicantDocument.kind, ApplicantDocument.status).where(
                    ApplicantDocument.applicant_id == applicant_id
                )
            )
        ).all()
    )
    if expected == ApplicantStatus.RENEWAL:
        assert statuses[DocumentKind.BARANGAY_CERT] == DocumentStatus.PENDING


async def _verified_count(session, applicant_id) -> int:
    stmt = select(func.count(StatusChange.id)).where(
        StatusChange.applicant_id == applicant_id,
        StatusChange.to_status == ApplicantStatus.VERIFIED,
    )
    return (await session.execute(stmt)).scalar()
