# This project was developed with assistance from AI tools.
"""Document completeness checking service.

Determines which documents an applicant's civil status requires, then
compares against stored documents. ``is_complete`` and ``is_fully_approved``
gate status transitions; ``check_completeness`` is the read-only summary
served to the UI.
"""

import logging

from db import ApplicantDocument
from db.enums import DocumentKind, DocumentStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from ..schemas.completeness import CompletenessResponse, DocumentRequirement
from .applicants import get_applicant
from .requirements import document_label, required_documents

logger = logging.getLogger(__name__)


async def _documents_by_kind(
    session: AsyncSession,
    applicant_id: int,
    kinds: list[DocumentKind],
) -> dict[DocumentKind, ApplicantDocument]:
    stmt = select(ApplicantDocument).where(
        ApplicantDocument.applicant_id == applicant_id,
        ApplicantDocument.kind.in_(kinds),
    )
    result = await session.execute(stmt)
    return {doc.kind: doc for doc in result.scalars().all()}


async def _all_required_in(
    session: AsyncSession,
    applicant_id: int,
    civil_status: str | None,
    wanted: DocumentStatus,
) -> bool:
    kinds = required_documents(civil_status)
    docs = await _documents_by_kind(session, applicant_id, kinds)
    for kind in kinds:
        doc = docs.get(kind)
        if doc is None or doc.status != wanted:
            logger.debug(
                "Applicant %s: %s is %s, not %s",
                applicant_id,
                kind.value,
                doc.status.value if doc else "missing",
                wanted.value,
            )
            return False
    return True


async def is_complete(session: AsyncSession, applicant_id: int, civil_status: str | None) -> bool:
    """True when every required kind is present with status Submitted."""
    return await _all_required_in(session, applicant_id, civil_status, DocumentStatus.SUBMITTED)


async def is_fully_approved(
    session: AsyncSession, applicant_id: int, civil_status: str | None
) -> bool:
    """True when every required kind is present with status Approved."""
    return await _all_required_in(session, applicant_id, civil_status, DocumentStatus.APPROVED)


async def check_completeness(
    session: AsyncSession,
    user: UserContext,
    code_id: str,
) -> CompletenessResponse:
    """Per-requirement summary for an applicant visible to the caller."""
    applicant = await get_applicant(session, user, code_id)
    civil_status = applicant.profile.civil_status if applicant.profile else None
    kinds = required_documents(civil_status)
    docs = await _documents_by_kind(session, applicant.id, kinds)

    requirements: list[DocumentRequirement] = []
    for kind in kinds:
        doc = docs.get(kind)
        requirements.append(
            DocumentRequirement(
                kind=kind,
                label=document_label(kind),
                is_provided=doc is not None,
                document_id=doc.id if doc else None,
                status=doc.status if doc else None,
            )
        )

    provided = [r for r in requirements if r.is_provided]
    return CompletenessResponse(
        code_id=applicant.code_id,
        civil_status=civil_status,
        applicant_status=applicant.status,
        is_complete=len(provided) == len(kinds)
        and all(r.status == DocumentStatus.SUBMITTED for r in provided),
        is_fully_approved=len(provided) == len(kinds)
        and all(r.status == DocumentStatus.APPROVED for r in provided),
        requirements=requirements,
        provided_count=len(provided),
        required_count=len(kinds),
    )
