# This project was developed with assistance from AI tools.
"""Staff status actions on an applicant."""

import logging

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.review import (
    ApplicationReviewRequest,
    NoteRequest,
    RemarksRequest,
    RenewalDecisionRequest,
    StatusChangeResponse,
)
from ..services import lifecycle
from ..services.lifecycle import TransitionResult

logger = logging.getLogger(__name__)

router = APIRouter()

_STAFF = (UserRole.BARANGAY_ADMIN, UserRole.SUPERADMIN)


def _to_response(result: TransitionResult) -> StatusChangeResponse:
    return StatusChangeResponse(
        code_id=result.applicant.code_id,
        previous_status=result.previous_status or result.status,
        status=result.status,
        email_sent=result.email_sent,
    )


@router.post(
    "/{code_id}/review",
    response_model=StatusChangeResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def review_application(
    code_id: str,
    body: ApplicationReviewRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> StatusChangeResponse:
    """Accept (Verified or Incomplete) or decline a pending application."""
    result = await lifecycle.review_application(
        session,
        user,
        code_id,
        action=body.action,
        remarks=body.remarks,
        sync_documents=body.sync_documents,
    )
    return _to_response(result)


@router.post(
    "/{code_id}/remarks",
    response_model=StatusChangeResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def issue_remarks(
    code_id: str,
    body: RemarksRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> StatusChangeResponse:
    result = await lifecycle.issue_remarks(session, user, code_id, body.remarks)
    return _to_response(result)


@router.post(
    "/{code_id}/remarks/accept",
    response_model=StatusChangeResponse,
    dependencies=[Depends(require_roles(UserRole.SUPERADMIN))],
)
async def accept_remarks(
    code_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> StatusChangeResponse:
    return _to_response(await lifecycle.accept_remarks(session, user, code_id))


@router.post(
    "/{code_id}/remarks/decline",
    response_model=StatusChangeResponse,
    dependencies=[Depends(require_roles(UserRole.SUPERADMIN))],
)
async def decline_remarks(
    code_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> StatusChangeResponse:
    return _to_response(await lifecycle.decline_remarks(session, user, code_id))


@router.post(
    "/{code_id}/terminate",
    response_model=StatusChangeResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def terminate(
    code_id: str,
    user: CurrentUser,
    body: NoteRequest | None = None,
    session: AsyncSession = Depends(get_db),
) -> StatusChangeResponse:
    result = await lifecycle.terminate(
        session, user, code_id, remarks=body.remarks if body else None
    )
    return _to_response(result)


@router.post(
    "/{code_id}/reverify",
    response_model=StatusChangeResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def reverify(
    code_id: str,
    user: CurrentUser,
    body: NoteRequest | None = None,
    session: AsyncSession = Depends(get_db),
) -> StatusChangeResponse:
    result = await lifecycle.reverify(
        session, user, code_id, remarks=body.remarks if body else None
    )
    return _to_response(result)


@router.post(
    "/{code_id}/renewal",
    response_model=StatusChangeResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def start_renewal(
    code_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> StatusChangeResponse:
    return _to_response(await lifecycle.start_renewal(session, user, code_id))


@router.post(
    "/{code_id}/renewal/decision",
    response_model=StatusChangeResponse,
    dependencies=[Depends(require_roles(UserRole.SUPERADMIN))],
)
async def decide_renewal(
    code_id: str,
    body: RenewalDecisionRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> StatusChangeResponse:
    result = await lifecycle.decide_renewal(
        session, user, code_id, decision=body.decision, remarks=body.remarks
    )
    return _to_response(result)
