# This project was developed with assistance from AI tools.
"""Applicant status transition engine.

Every transition locks the applicant row, checks the move against
``ApplicantStatus.valid_transitions()``, writes the new status together
with a StatusChange row and any dependent rows, records notifications,
and commits. Emails are queued on the result and sent only after the
commit succeeds.
"""

import logging
from dataclasses import dataclass, field

from db import Applicant, ApplicantDocument, ApplicantProfile, ApplicantRemark, StatusChange
from db.enums import (
    ApplicantStatus,
    DocumentKind,
    DocumentStatus,
    NotificationAudience,
    UserRole,
)
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.applicant import ApplicationSubmission
from ..schemas.auth import UserContext
from .applicants import (
    apply_profile,
    barangay_of,
    build_family,
    civil_status_of,
    find_by_email,
    first_name,
    generate_code_id,
    get_applicant,
    reload_applicant,
)
from .completeness import is_fully_approved
from .errors import ConflictError, InvalidTransitionError, ValidationError
from .mailer import EmailSender, EmailTemplate, OutgoingEmail, get_email_sender
from .notifications import NotificationSink
from .requirements import document_label, required_documents
from .transactions import run_with_retry, use_serializable

logger = logging.getLogger(__name__)

ACCEPTED_MESSAGE = "Your application has been accepted."


@dataclass
class TransitionResult:
    """Outcome of a committed status change."""

    applicant: Applicant
    previous_status: ApplicantStatus | None
    emails: list[OutgoingEmail] = field(default_factory=list)
    email_sent: bool | None = None
    created: bool = False
    # Snapshot of the committed status; the applicant object is shared
    # through the identity map and later reloads overwrite it.
    status: ApplicantStatus | None = None

    def __post_init__(self) -> None:
        if self.status is None:
            self.status = self.applicant.status

    @property
    def status_changed(self) -> bool:
        return self.previous_status != self.status


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def can_transition(current: ApplicantStatus, target: ApplicantStatus) -> bool:
    return target in ApplicantStatus.valid_transitions().get(current, frozenset())


def check_transition(current: ApplicantStatus, target: ApplicantStatus) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        allowed = ApplicantStatus.valid_transitions().get(current, frozenset())
        raise InvalidTransitionError(
            f"Cannot transition from '{current.value}' to '{target.value}'. "
            f"Allowed: {sorted(s.value for s in allowed) if allowed else 'none'}."
        )


def require_status(applicant: Applicant, *expected: ApplicantStatus, action: str) -> None:
    if applicant.status not in expected:
        raise InvalidTransitionError(
            f"Cannot {action} applicant {applicant.code_id} in status "
            f"'{applicant.status.value}'. Expected: {sorted(s.value for s in expected)}."
        )


async def change_status(
    session: AsyncSession,
    applicant: Applicant,
    target: ApplicantStatus,
    *,
    changed_by: str | None = None,
    remarks: str | None = None,
) -> ApplicantStatus:
    """Move an applicant to ``target`` and append the history row. Returns the old status."""
    previous = applicant.status
    check_transition(previous, target)
    applicant.status = target
    session.add(
        StatusChange(
            applicant_id=applicant.id,
            from_status=previous,
            to_status=target,
            remarks=remarks,
            changed_by=changed_by,
        )
    )
    await session.flush()
    logger.info(
        "Applicant %s status %s -> %s (by %s)",
        applicant.code_id,
        previous.value,
        target.value,
        changed_by or "system",
    )
    return previous


async def notify_verified(session: AsyncSession, applicant: Applicant) -> None:
    """Side effects shared by every path that lands an applicant in Verified."""
    sink = NotificationSink(session)
    await sink.record(applicant.id, "accepted", ACCEPTED_MESSAGE)
    await sink.record(
        applicant.id,
        "new_solo_parent",
        f"{applicant.name} is a new solo parent in your barangay.",
        audience=NotificationAudience.BARANGAY_ADMIN,
        barangay=barangay_of(applicant),
    )


def status_email(applicant: Applicant, action: str, remarks: str | None = None) -> OutgoingEmail:
    return OutgoingEmail(
        to=applicant.email,
        template=EmailTemplate.STATUS,
        variables={"first_name": first_name(applicant), "action": action, "remarks": remarks},
    )


async def execute(
    session: AsyncSession,
    operation,
    *args,
    mailer: EmailSender | None = None,
    **kwargs,
) -> TransitionResult:
    """Run a transition with retry, then deliver its queued emails."""
    result = await run_with_retry(session, operation, *args, **kwargs)
    if result.emails:
        result.email_sent = await (mailer or get_email_sender()).send_all(result.emails)
    return result


async def _committed(
    session: AsyncSession,
    applicant: Applicant,
    previous: ApplicantStatus | None,
    emails: list[OutgoingEmail] | None = None,
    **extra,
) -> TransitionResult:
    applicant_id = applicant.id
    await session.commit()
    return TransitionResult(
        applicant=await reload_applicant(session, applicant_id),
        previous_status=previous,
        emails=emails or [],
        **extra,
    )


# ---------------------------------------------------------------------------
# Intake
# ---------------------------------------------------------------------------


async def _submit_application(
    session: AsyncSession, submission: ApplicationSubmission
) -> TransitionResult:
    await use_serializable(session)
    sink = NotificationSink(session)
    existing = await find_by_email(session, submission.email, lock=True)

    if existing is not None:
        if existing.status != ApplicantStatus.DECLINED:
            raise ConflictError("Email already registered")

        existing.name = submission.full_name
        if existing.profile is None:
            existing.profile = ApplicantProfile(first_name="", last_name="")
        apply_profile(existing.profile, submission)
        existing.family_members = build_family(submission)
        previous = await change_status(
            session, existing, ApplicantStatus.PENDING, remarks="Re-submitted application"
        )
        await sink.record(
            existing.id,
            "new_app",
            "New application was re-submitted",
            audience=NotificationAudience.SUPERADMIN,
            barangay=submission.barangay,
        )
        logger.info("Applicant %s re-submitted after decline", existing.code_id)
        return await _committed(session, existing, previous)

    applicant = Applicant(
        code_id=await generate_code_id(session),
        email=submission.email,
        name=submission.full_name,
        status=ApplicantStatus.PENDING,
        profile=apply_profile(ApplicantProfile(), submission),
        family_members=build_family(submission),
    )
    session.add(applicant)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("Email already registered") from exc

    session.add(
        StatusChange(
            applicant_id=applicant.id,
            from_status=None,
            to_status=ApplicantStatus.PENDING,
            remarks="Application submitted",
        )
    )
    await sink.record(
        applicant.id,
        "new_app",
        "New application was created",
        audience=NotificationAudience.SUPERADMIN,
        barangay=submission.barangay,
    )
    logger.info("Created applicant %s", applicant.code_id)
    return await _committed(session, applicant, None, created=True)


async def submit_application(
    session: AsyncSession, submission: ApplicationSubmission
) -> TransitionResult:
    """Register a new applicant, or re-open a declined one with the same email.

    A declined applicant keeps their code_id; their intake data and family
    list are replaced. Any other existing email is a ConflictError.
    """
    return await execute(session, _submit_application, submission)


# ---------------------------------------------------------------------------
# Staff review
# ---------------------------------------------------------------------------


async def _accept(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    sync_documents: bool,
) -> TransitionResult:
    applicant = await get_applicant(session, user, code_id, lock=True)
    require_status(
        applicant, ApplicantStatus.PENDING, ApplicantStatus.INCOMPLETE, action="accept"
    )
    civil_status = civil_status_of(applicant)
    required = required_documents(civil_status)

    if sync_documents:
        # Only documents already Submitted are promoted; Pending follow-ups still need review.
        await session.execute(
            update(ApplicantDocument)
            .where(
                ApplicantDocument.applicant_id == applicant.id,
                ApplicantDocument.kind.in_(required),
                ApplicantDocument.status == DocumentStatus.SUBMITTED,
            )
            .values(status=DocumentStatus.APPROVED)
        )

    sink = NotificationSink(session)
    if await is_fully_approved(session, applicant.id, civil_status):
        previous = await change_status(
            session, applicant, ApplicantStatus.VERIFIED, changed_by=user.user_id
        )
        await notify_verified(session, applicant)
        return await _committed(session, applicant, previous, [status_email(applicant, "Accept")])

    outstanding = await _outstanding_labels(session, applicant.id, required)
    previous = await change_status(
        session,
        applicant,
        ApplicantStatus.INCOMPLETE,
        changed_by=user.user_id,
        remarks=f"Outstanding: {', '.join(outstanding)}",
    )
    await sink.record(
        applicant.id,
        "incomplete",
        "Your application is incomplete. Still needed or awaiting review: "
        f"{', '.join(outstanding)}.",
    )
    return await _committed(session, applicant, previous)


async def _outstanding_labels(
    session: AsyncSession, applicant_id: int, required: list[DocumentKind]
) -> list[str]:
    result = await session.execute(
        select(ApplicantDocument.kind, ApplicantDocument.status).where(
            ApplicantDocument.applicant_id == applicant_id,
            ApplicantDocument.kind.in_(required),
        )
    )
    statuses = dict(result.all())
    return [
        document_label(kind)
        for kind in required
        if statuses.get(kind) != DocumentStatus.APPROVED
    ]


async def _decline(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    remarks: str,
) -> TransitionResult:
    applicant = await get_applicant(session, user, code_id, lock=True)
    require_status(applicant, *ApplicantStatus.active_statuses(), action="decline")
    previous = await change_status(
        session, applicant, ApplicantStatus.DECLINED, changed_by=user.user_id, remarks=remarks
    )
    await NotificationSink(session).record(
        applicant.id, "declined", f"Your application has been declined. Remarks: {remarks}"
    )
    return await _committed(
        session, applicant, previous, [status_email(applicant, "Decline", remarks)]
    )


async def review_application(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    *,
    action: str,
    remarks: str | None = None,
    sync_documents: bool = True,
    mailer: EmailSender | None = None,
) -> TransitionResult:
    """Staff Accept or Decline.

    Accept lands in Verified only when every required document is Approved
    (after optionally promoting Submitted ones); otherwise Incomplete.
    Decline needs non-empty remarks and works from any active status.
    """
    if action == "accept":
        return await execute(session, _accept, user, code_id, sync_documents, mailer=mailer)
    if action == "decline":
        if not remarks or not remarks.strip():
            raise ValidationError("Remarks are required to decline an application")
        return await execute(session, _decline, user, code_id, remarks.strip(), mailer=mailer)
    raise ValidationError(f"Unknown review action: {action!r}")


# ---------------------------------------------------------------------------
# Remarks
# ---------------------------------------------------------------------------


async def _issue_remarks(
    session: AsyncSession, user: UserContext, code_id: str, remarks: str
) -> TransitionResult:
    applicant = await get_applicant(session, user, code_id, lock=True)
    require_status(applicant, ApplicantStatus.VERIFIED, action="issue remarks for")
    previous = await change_status(
        session,
        applicant,
        ApplicantStatus.PENDING_REMARKS,
        changed_by=user.user_id,
        remarks=remarks,
    )
    session.add(
        ApplicantRemark(
            applicant_id=applicant.id,
            remarks=remarks,
            admin_id=user.user_id if user.role == UserRole.BARANGAY_ADMIN else None,
            superadmin_id=user.user_id if user.role == UserRole.SUPERADMIN else None,
        )
    )
    barangay = barangay_of(applicant)
    sink = NotificationSink(session)
    await sink.record(
        applicant.id,
        "remarks",
        f"From Barangay {barangay or 'N/A'}: {first_name(applicant)} has pending remarks.",
        audience=NotificationAudience.SUPERADMIN,
        barangay=barangay,
    )
    await sink.record(
        applicant.id,
        "revoke",
        f"Your Solo Parent ID is under review: {remarks} "
        f"Please settle these remarks within {settings.REMARKS_GRACE_DAYS} days.",
    )
    email = OutgoingEmail(
        to=applicant.email,
        template=EmailTemplate.REVOKE,
        variables={
            "first_name": first_name(applicant),
            "remarks": remarks,
            "grace_days": settings.REMARKS_GRACE_DAYS,
        },
    )
    return await _committed(session, applicant, previous, [email])


async def issue_remarks(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    remarks: str,
    *,
    mailer: EmailSender | None = None,
) -> TransitionResult:
    """Verified -> Pending Remarks, with a revoke notice and email."""
    if not remarks or not remarks.strip():
        raise ValidationError("Remarks must not be empty")
    return await execute(session, _issue_remarks, user, code_id, remarks.strip(), mailer=mailer)


async def _resolve_remarks(
    session: AsyncSession, user: UserContext, code_id: str, accepted: bool
) -> TransitionResult:
    applicant = await get_applicant(session, user, code_id, lock=True)
    require_status(applicant, ApplicantStatus.PENDING_REMARKS, action="resolve remarks for")
    target = ApplicantStatus.VERIFIED if accepted else ApplicantStatus.TERMINATED
    previous = await change_status(session, applicant, target, changed_by=user.user_id)
    await session.execute(
        update(ApplicantRemark)
        .where(ApplicantRemark.applicant_id == applicant.id, ApplicantRemark.is_read.is_(False))
        .values(is_read=True)
    )
    if accepted:
        await NotificationSink(session).record(
            applicant.id, "accepted", "Your account has been verified."
        )
    else:
        await NotificationSink(session).record(
            applicant.id, "terminated", "Your account has been terminated."
        )
    return await _committed(session, applicant, previous)


async def accept_remarks(
    session: AsyncSession, user: UserContext, code_id: str
) -> TransitionResult:
    return await execute(session, _resolve_remarks, user, code_id, True)


async def decline_remarks(
    session: AsyncSession, user: UserContext, code_id: str
) -> TransitionResult:
    return await execute(session, _resolve_remarks, user, code_id, False)


# ---------------------------------------------------------------------------
# Termination / re-verification
# ---------------------------------------------------------------------------


async def _set_terminated(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    terminate: bool,
    remarks: str | None,
) -> TransitionResult:
    applicant = await get_applicant(session, user, code_id, lock=True)
    barangay = barangay_of(applicant)
    sink = NotificationSink(session)

    if terminate:
        require_status(applicant, ApplicantStatus.VERIFIED, action="terminate")
        previous = await change_status(
            session, applicant, ApplicantStatus.TERMINATED, changed_by=user.user_id, remarks=remarks
        )
        await sink.record(applicant.id, "terminated", "Your account has been terminated.")
        await sink.record(
            applicant.id,
            "terminated",
            f"{applicant.name} from your barangay has been not cleared and is now "
            "disqualified as a solo parent after the review.",
            audience=NotificationAudience.BARANGAY_ADMIN,
            barangay=barangay,
        )
        template = EmailTemplate.TERMINATION
    else:
        require_status(applicant, ApplicantStatus.TERMINATED, action="re-verify")
        previous = await change_status(
            session, applicant, ApplicantStatus.VERIFIED, changed_by=user.user_id, remarks=remarks
        )
        await sink.record(applicant.id, "reactivated", "Your account has been reactivated.")
        await sink.record(
            applicant.id,
            "cleared",
            f"{applicant.name} from your barangay has been cleared and is again "
            "a verified solo parent.",
            audience=NotificationAudience.BARANGAY_ADMIN,
            barangay=barangay,
        )
        template = EmailTemplate.REVERIFICATION

    email = OutgoingEmail(
        to=applicant.email, template=template, variables={"first_name": first_name(applicant)}
    )
    return await _committed(session, applicant, previous, [email])


async def terminate(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    *,
    remarks: str | None = None,
    mailer: EmailSender | None = None,
) -> TransitionResult:
    """Verified -> Terminated."""
    return await execute(session, _set_terminated, user, code_id, True, remarks, mailer=mailer)


async def reverify(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    *,
    remarks: str | None = None,
    mailer: EmailSender | None = None,
) -> TransitionResult:
    """Terminated -> Verified."""
    return await execute(session, _set_terminated, user, code_id, False, remarks, mailer=mailer)


# ---------------------------------------------------------------------------
# Renewal
# ---------------------------------------------------------------------------


async def _start_renewal(session: AsyncSession, user: UserContext, code_id: str) -> TransitionResult:
    applicant = await get_applicant(session, user, code_id, lock=True)
    require_status(applicant, ApplicantStatus.VERIFIED, action="start renewal for")
    previous = await change_status(
        session, applicant, ApplicantStatus.RENEWAL, changed_by=user.user_id
    )
    await NotificationSink(session).record(
        applicant.id, "renewal", "Your ID has expired. Please submit your renewal application."
    )
    return await _committed(session, applicant, previous)


async def start_renewal(session: AsyncSession, user: UserContext, code_id: str) -> TransitionResult:
    """Verified -> Renewal when an ID expires."""
    return await execute(session, _start_renewal, user, code_id)


def infer_renewal_approval(decision: str | None, remarks: str | None) -> bool:
    """Explicit decision wins; otherwise remarks mentioning 'declined' mean decline."""
    if decision is not None:
        return decision == "approve"
    return "declined" not in (remarks or "").lower()


async def _decide_renewal(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    approve: bool,
    remarks: str | None,
) -> TransitionResult:
    await use_serializable(session)
    applicant = await get_applicant(session, user, code_id, lock=True)
    require_status(applicant, ApplicantStatus.RENEWAL, action="decide renewal for")
    certificate = (
        await session.execute(
            select(ApplicantDocument).where(
                ApplicantDocument.applicant_id == applicant.id,
                ApplicantDocument.kind == DocumentKind.BARANGAY_CERT,
            )
        )
    ).scalar_one_or_none()
    sink = NotificationSink(session)

    if approve:
        if certificate is None:
            raise ConflictError("No barangay certificate has been submitted for this renewal")
        certificate.status = DocumentStatus.APPROVED
        previous = await change_status(
            session, applicant, ApplicantStatus.VERIFIED, changed_by=user.user_id, remarks=remarks
        )
        await sink.record(
            applicant.id, "accepted", "Your renewal has been approved by a superadmin"
        )
        action = "Accept"
    else:
        if certificate is not None:
            await session.execute(
                delete(ApplicantDocument).where(ApplicantDocument.id == certificate.id)
            )
        previous = await change_status(
            session, applicant, ApplicantStatus.RENEWAL, changed_by=user.user_id, remarks=remarks
        )
        message = "Your renewal has been declined."
        if remarks:
            message = f"{message} {remarks}"
        await sink.record(applicant.id, "renewal_declined", message)
        action = "Decline"

    email = OutgoingEmail(
        to=applicant.email,
        template=EmailTemplate.RENEWAL,
        variables={"first_name": first_name(applicant), "action": action, "remarks": remarks},
    )
    return await _committed(session, applicant, previous, [email])


async def decide_renewal(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
    *,
    decision: str | None = None,
    remarks: str | None = None,
    mailer: EmailSender | None = None,
) -> TransitionResult:
    """Superadmin renewal decision.

    Approval marks the barangay certificate Approved and re-verifies.
    Decline deletes the certificate so a new one can be uploaded; the
    applicant stays in Renewal.
    """
    approve = infer_renewal_approval(decision, remarks)
    return await execute(
        session, _decide_renewal, user, code_id, approve, remarks, mailer=mailer
    )
