# This project was developed with assistance from AI tools.
"""Applicant intake and lookup routes."""

from db import get_db
from db.enums import ApplicantStatus, UserRole
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.applicant import (
    ApplicantListResponse,
    ApplicantResponse,
    ApplicationSubmission,
    OpenRemarkListResponse,
    OpenRemarkResponse,
    SubmissionResponse,
)
from ..schemas.completeness import CompletenessResponse
from ..services import lifecycle
from ..services.applicants import barangay_of, get_applicant, list_applicants, list_open_remarks
from ..services.completeness import check_completeness

router = APIRouter()

ALL_ROLES = (UserRole.APPLICANT, UserRole.BARANGAY_ADMIN, UserRole.SUPERADMIN)
STAFF_ROLES = (UserRole.BARANGAY_ADMIN, UserRole.SUPERADMIN)


@router.post("/", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(
    body: ApplicationSubmission,
    session: AsyncSession = Depends(get_db),
) -> SubmissionResponse:
    """Submit all intake steps. A declined applicant may re-submit with the same email."""
    result = await lifecycle.submit_application(session, body)
    return SubmissionResponse(
        applicant=ApplicantResponse.model_validate(result.applicant),
        resubmitted=not result.created,
    )


@router.get(
    "/",
    response_model=ApplicantListResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def list_applications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    filter_status: ApplicantStatus | None = Query(default=None, alias="status"),
    barangay: str | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> ApplicantListResponse:
    """Staff work queue: applicants in scope, optionally filtered by status."""
    applicants, total = await list_applicants(
        session, user, status=filter_status, barangay=barangay, offset=offset, limit=limit
    )
    return ApplicantListResponse(
        data=[ApplicantResponse.model_validate(a) for a in applicants],
        pagination=Pagination.build(total=total, offset=offset, limit=limit),
    )


@router.get(
    "/remarks",
    response_model=OpenRemarkListResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def list_remarks(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> OpenRemarkListResponse:
    """Remarks still awaiting a decision."""
    rows, total = await list_open_remarks(session, user, offset=offset, limit=limit)
    return OpenRemarkListResponse(
        data=[
            OpenRemarkResponse(
                id=remark.id,
                code_id=applicant.code_id,
                name=applicant.name,
                barangay=barangay_of(applicant),
                status=applicant.status,
                remarks=remark.remarks,
                admin_id=remark.admin_id,
                superadmin_id=remark.superadmin_id,
                created_at=remark.created_at,
            )
            for remark, applicant in rows
        ],
        pagination=Pagination.build(total=total, offset=offset, limit=limit),
    )

@router.get(
    "/{code_id}",
    response_model=ApplicantResponse,
    dependencies=[Depends(require_roles(*ALL_ROLES))],
)
async def get_application(
    code_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicantResponse:
    applicant = await get_applicant(session, user, code_id)
    return ApplicantResponse.model_validate(applicant)


@router.get(
    "/{code_id}/completeness",
    response_model=CompletenessResponse,
    dependencies=[Depends(require_roles(*ALL_ROLES))],
)
async def get_completeness(
    code_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CompletenessResponse:
    """Required documents for the applicant's civil status and what has been provided."""
    return await check_completeness(session, user, code_id)
