# This project was developed with assistance from AI tools.
"""Supporting-document storage and review.

One row per (applicant, kind). Uploads go through ``upsert_document``,
which uses the dialect's INSERT .. ON CONFLICT so that concurrent uploads
of the same kind collapse into a single row.
"""

import logging
from dataclasses import dataclass, field

from db import Applicant, ApplicantDocument, ApplicantProfile
from db.enums import (
    ApplicantStatus,
    DocumentCategory,
    DocumentKind,
    DocumentStatus,
    NotificationAudience,
)
from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from .applicants import barangay_of, civil_status_of, get_applicant, reload_applicant
from .completeness import is_complete, is_fully_approved
from .errors import ConflictError, NotFoundError, StorageError, ValidationError
from .lifecycle import (
    TransitionResult,
    change_status,
    execute,
    notify_verified,
    status_email,
)
from .mailer import EmailSender
from .notifications import NotificationSink
from .requirements import document_label, parse_document_kind
from .scope import apply_data_scope
from .transactions import use_serializable

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Statuses a document approval may lift to Verified. Every other status
# reaches Verified only through its own staff action.
_REVIEW_PROMOTABLE = frozenset({ApplicantStatus.PENDING, ApplicantStatus.INCOMPLETE})


@dataclass
class UpsertResult:
    document: ApplicantDocument
    created: bool


@dataclass
class DocumentOutcome(TransitionResult):
    """Document write plus whatever status change it caused."""

    document: ApplicantDocument | None = field(default=None)


def _insert_for(session: AsyncSession):
    dialect = session.get_bind().dialect.name
    try:
        return _INSERT_BY_DIALECT[dialect]
    except KeyError as exc:
        raise StorageError(f"Document upsert is not supported on {dialect}") from exc


async def find_document(
    session: AsyncSession, applicant_id: int, kind: DocumentKind
) -> ApplicantDocument | None:
    stmt = (
        select(ApplicantDocument)
        .where(ApplicantDocument.applicant_id == applicant_id, ApplicantDocument.kind == kind)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def upsert_document(
    session: AsyncSession,
    applicant_id: int,
    kind: DocumentKind,
    *,
    file_name: str,
    display_name: str,
    status: DocumentStatus,
    category: DocumentCategory | None = None,
    overwrite_category: bool = False,
) -> UpsertResult:
    """Insert or update the (applicant, kind) document row.

    New rows get ``category`` when the kind carries one. Existing rows keep
    their category unless ``overwrite_category`` is set. Re-uploading clears
    any previous rejection reason. Does not evaluate completeness.
    """
    existing = await find_document(session, applicant_id, kind)
    category = category if kind.has_category else None

    set_ = {
        "file_name": file_name,
        "display_name": display_name,
        "status": status,
        "rejection_reason": None,
        "uploaded_at": func.now(),
    }
    if overwrite_category and category is not None:
        set_["category"] = category

    insert = _insert_for(session)
    stmt = insert(ApplicantDocument).values(
        applicant_id=applicant_id,
        kind=kind,
        file_name=file_name,
        display_name=display_name,
        status=status,
        category=category,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["applicant_id", "kind"],
        set_=set_,
    )
    await session.execute(stmt)

    document = await find_document(session, applicant_id, kind)
    if document is None:
        raise StorageError(f"Document {kind.value} vanished after upsert")
    logger.info(
        "%s %s document for applicant %s (status=%s)",
        "Inserted" if existing is None else "Updated",
        kind.value,
        applicant_id,
        status.value,
    )
    return UpsertResult(document=document, created=existing is None)


# ---------------------------------------------------------------------------
# Upload flows
# ---------------------------------------------------------------------------


async def _upload_application_document(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    kind: DocumentKind,
    file_name: str,
    display_name: str,
) -> DocumentOutcome:
    applicant = await get_applicant(session, user, code_id, lock=True)
    upsert = await upsert_document(
        session,
        applicant.id,
        kind,
        file_name=file_name,
        display_name=display_name,
        status=DocumentStatus.SUBMITTED,
        category=DocumentCategory.APPLICATION,
    )

    previous = applicant.status
    if applicant.status == ApplicantStatus.PENDING and await is_complete(
        session, applicant.id, civil_status_of(applicant)
    ):
        await change_status(
            session,
            applicant,
            ApplicantStatus.VERIFIED,
            changed_by=user.user_id,
            remarks="All required documents submitted",
        )
        await NotificationSink(session).record(
            applicant.id,
            "docs_complete",
            f"{applicant.name} has submitted all required documents.",
            audience=NotificationAudience.SUPERADMIN,
            barangay=barangay_of(applicant),
        )

    applicant_id = applicant.id
    await session.commit()
    return DocumentOutcome(
        applicant=await reload_applicant(session, applicant_id),
        previous_status=previous,
        created=upsert.created,
        document=await find_document(session, applicant_id, kind),
    )


async def upload_application_document(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    kind: str | DocumentKind,
    *,
    file_name: str,
    display_name: str,
) -> DocumentOutcome:
    """Intake-flow upload: status Submitted, category application on insert.

    A Pending applicant whose required set becomes fully Submitted moves
    to Verified and staff are notified.
    """
    kind = parse_document_kind(kind)
    return await execute(
        session, _upload_application_document, user, code_id, kind, file_name, display_name
    )


async def _upload_followup_document(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    kind: DocumentKind,
    file_name: str,
    display_name: str,
) -> DocumentOutcome:
    applicant = await get_applicant(session, user, code_id, lock=True)
    upsert = await upsert_document(
        session,
        applicant.id,
        kind,
        file_name=file_name,
        display_name=display_name,
        status=DocumentStatus.PENDING,
        category=DocumentCategory.FOLLOWUP,
        overwrite_category=True,
    )
    applicant_id = applicant.id
    await session.commit()
    return DocumentOutcome(
        applicant=await reload_applicant(session, applicant_id),
        previous_status=applicant.status,
        created=upsert.created,
        document=await find_document(session, applicant_id, kind),
    )


async def upload_followup_document(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    kind: str | DocumentKind,
    *,
    file_name: str,
    display_name: str,
) -> DocumentOutcome:
    """Post-review upload: status Pending, category followup on insert and update."""
    kind = parse_document_kind(kind)
    return await execute(
        session, _upload_followup_document, user, code_id, kind, file_name, display_name
    )


async def _upload_renewal_certificate(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    file_name: str,
    display_name: str,
) -> DocumentOutcome:
    applicant = await get_applicant(session, user, code_id, lock=True)
    if applicant.status != ApplicantStatus.RENEWAL:
        raise ConflictError("A barangay certificate can only be uploaded during renewal")
    upsert = await upsert_document(
        session,
        applicant.id,
        DocumentKind.BARANGAY_CERT,
        file_name=file_name,
        display_name=display_name,
        status=DocumentStatus.PENDING,
    )
    await NotificationSink(session).record(
        applicant.id,
        "renewal_submitted",
        f"{applicant.name} submitted a barangay certificate for renewal.",
        audience=NotificationAudience.SUPERADMIN,
        barangay=barangay_of(applicant),
    )
    applicant_id = applicant.id
    await session.commit()
    return DocumentOutcome(
        applicant=await reload_applicant(session, applicant_id),
        previous_status=applicant.status,
        created=upsert.created,
        document=await find_document(session, applicant_id, DocumentKind.BARANGAY_CERT),
    )


async def upload_renewal_certificate(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    *,
    file_name: str,
    display_name: str,
) -> DocumentOutcome:
    """Barangay certificate for the renewal cycle; carries no category."""
    return await execute(
        session, _upload_renewal_certificate, user, code_id, file_name, display_name
    )


# ---------------------------------------------------------------------------
# Listing / deletion
# ---------------------------------------------------------------------------


async def list_documents(
    session: AsyncSession, user: UserContext, code_id: str
) -> list[ApplicantDocument]:
    applicant = await get_applicant(session, user, code_id)
    stmt = (
        select(ApplicantDocument)
        .where(ApplicantDocument.applicant_id == applicant.id)
        .order_by(ApplicantDocument.uploaded_at.desc(), ApplicantDocument.id.desc())
    )
    return list((await session.execute(stmt)).scalars().all())


async def delete_document(
    session: AsyncSession, user: UserContext, code_id: str, kind: str | DocumentKind
) -> None:
    kind = parse_document_kind(kind)
    applicant = await get_applicant(session, user, code_id)
    result = await session.execute(
        delete(ApplicantDocument).where(
            ApplicantDocument.applicant_id == applicant.id,
            ApplicantDocument.kind == kind,
        )
    )
    if result.rowcount == 0:
        await session.rollback()
        raise NotFoundError(f"No {kind.value} document for applicant {code_id}")
    await session.commit()
    logger.info("Deleted %s document for applicant %s", kind.value, code_id)


async def list_pending_followups(
    session: AsyncSession,
    user: UserContext,
    *,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[tuple[ApplicantDocument, Applicant, str | None]], int]:
    """Follow-up documents awaiting review, oldest first."""
    filters = (
        ApplicantDocument.category == DocumentCategory.FOLLOWUP,
        ApplicantDocument.status == DocumentStatus.PENDING,
    )

    count_stmt = (
        select(func.count(ApplicantDocument.id))
        .select_from(ApplicantDocument)
        .join(Applicant, Applicant.id == ApplicantDocument.applicant_id)
        .where(*filters)
    )
    count_stmt = apply_data_scope(count_stmt, user.data_scope, user)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        select(ApplicantDocument, Applicant)
        .join(Applicant, Applicant.id == ApplicantDocument.applicant_id)
        .where(*filters)
        .order_by(ApplicantDocument.uploaded_at.asc(), ApplicantDocument.id.asc())
        .offset(offset)
        .limit(limit)
    )
    stmt = apply_data_scope(stmt, user.data_scope, user)
    rows = (await session.execute(stmt)).all()

    barangays = {}
    if rows:
        result = await session.execute(
            select(ApplicantProfile.applicant_id, ApplicantProfile.barangay).where(
                ApplicantProfile.applicant_id.in_({applicant.id for _, applicant in rows})
            )
        )
        barangays = dict(result.all())
    return [(doc, applicant, barangays.get(applicant.id)) for doc, applicant in rows], total


# ---------------------------------------------------------------------------
# Staff review of a single document
# ---------------------------------------------------------------------------


async def _review_document(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    kind: DocumentKind,
    status: DocumentStatus,
    file_name: str | None,
    rejection_reason: str | None,
) -> DocumentOutcome:
    await use_serializable(session)
    applicant = await get_applicant(session, user, code_id, lock=True)
    document = await find_document(session, applicant.id, kind)
    if document is None:
        raise NotFoundError(f"No {kind.value} document for applicant {code_id}")
    if file_name is not None and document.file_name != file_name:
        raise ConflictError(f"The {kind.value} document was replaced; reload before reviewing")

    label = document_label(kind)
    document.status = status
    sink = NotificationSink(session)
    if status == DocumentStatus.APPROVED:
        document.rejection_reason = None
        await sink.record(applicant.id, "document_approved", f"Your {label} has been accepted.")
    else:
        document.rejection_reason = rejection_reason
        await sink.record(
            applicant.id, "document_rejected", f"Your {label} was rejected. {rejection_reason}"
        )
    await session.flush()

    previous = applicant.status
    emails = []
    if status == DocumentStatus.APPROVED and await is_fully_approved(
        session, applicant.id, civil_status_of(applicant)
    ):
        if applicant.status not in _REVIEW_PROMOTABLE:
            logger.debug(
                "Applicant %s fully approved but stays %s",
                code_id,
                applicant.status.value,
            )
        else:
            await change_status(
                session,
                applicant,
                ApplicantStatus.VERIFIED,
                changed_by=user.user_id,
                remarks="All required documents approved",
            )
            await notify_verified(session, applicant)
            emails.append(status_email(applicant, "Accept"))

    applicant_id = applicant.id
    await session.commit()
    return DocumentOutcome(
        applicant=await reload_applicant(session, applicant_id),
        previous_status=previous,
        emails=emails,
        document=await find_document(session, applicant_id, kind),
    )


async def review_document(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    kind: str | DocumentKind,
    status: DocumentStatus,
    *,
    file_name: str | None = None,
    rejection_reason: str | None = None,
    mailer: EmailSender | None = None,
) -> DocumentOutcome:
    """Approve or reject one document and notify the applicant.

    When every required kind ends up Approved the applicant is promoted to
    Verified, but only from Pending or Incomplete.
    """
    kind = parse_document_kind(kind)
    if status not in (DocumentStatus.APPROVED, DocumentStatus.REJECTED):
        raise ValidationError("Documents can only be reviewed as Approved or Rejected")
    if status == DocumentStatus.REJECTED:
        if not rejection_reason or not rejection_reason.strip():
            raise ValidationError("A rejection reason is required")
        rejection_reason = rejection_reason.strip()
    return await execute(
        session,
        _review_document,
        user,
        code_id,
        kind,
        status,
        file_name,
        rejection_reason,
        mailer=mailer,
    )
