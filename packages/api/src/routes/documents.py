# This project was developed with assistance from AI tools.
"""Document upload, listing, and staff review routes."""

import logging

from db import get_db
from db.enums import DocumentStatus, UserRole
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.document import (
    DocumentListResponse,
    DocumentResponse,
    DocumentReviewRequest,
    DocumentReviewResponse,
    DocumentUploadRequest,
    DocumentUploadResponse,
    FollowupItem,
    FollowupListResponse,
    RenewalCertificateRequest,
)
from ..services import documents as doc_service
from ..services.documents import DocumentOutcome

logger = logging.getLogger(__name__)

router = APIRouter()

_ALL_ROLES = (UserRole.APPLICANT, UserRole.BARANGAY_ADMIN, UserRole.SUPERADMIN)
_STAFF = (UserRole.BARANGAY_ADMIN, UserRole.SUPERADMIN)


def _upload_response(outcome: DocumentOutcome) -> DocumentUploadResponse:
    return DocumentUploadResponse(
        document=DocumentResponse.model_validate(outcome.document),
        created=outcome.created,
        applicant_status=outcome.status,
        status_changed=outcome.status_changed,
    )


@router.post(
    "/applications/{code_id}/documents",
    response_model=DocumentUploadResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def upload_application_document(
    code_id: str,
    body: DocumentUploadRequest,
    user: CurrentUser,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> DocumentUploadResponse:
    """Upload a required document during intake. May complete the application."""
    outcome = await doc_service.upload_application_document(
        session,
        user,
        code_id,
        body.kind,
        file_name=body.file_name,
        display_name=body.display_name,
    )
    response.status_code = status.HTTP_201_CREATED if outcome.created else status.HTTP_200_OK
    return _upload_response(outcome)


@router.post(
    "/applications/{code_id}/documents/follow-up",
    response_model=DocumentUploadResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def upload_followup_document(
    code_id: str,
    body: DocumentUploadRequest,
    user: CurrentUser,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> DocumentUploadResponse:
    """Upload a document requested after review. Awaits staff review."""
    outcome = await doc_service.upload_followup_document(
        session,
        user,
        code_id,
        body.kind,
        file_name=body.file_name,
        display_name=body.display_name,
    )
    response.status_code = status.HTTP_201_CREATED if outcome.created else status.HTTP_200_OK
    return _upload_response(outcome)


@router.post(
    "/applications/{code_id}/documents/renewal",
    response_model=DocumentUploadResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def upload_renewal_certificate(
    code_id: str,
    body: RenewalCertificateRequest,
    user: CurrentUser,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> DocumentUploadResponse:
    outcome = await doc_service.upload_renewal_certificate(
        session,
        user,
        code_id,
        file_name=body.file_name,
        display_name=body.display_name,
    )
    response.status_code = status.HTTP_201_CREATED if outcome.created else status.HTTP_200_OK
    return _upload_response(outcome)


@router.get(
    "/applications/{code_id}/documents",
    response_model=DocumentListResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def list_documents(
    code_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DocumentListResponse:
    documents = await doc_service.list_documents(session, user, code_id)
    items = [DocumentResponse.model_validate(doc) for doc in documents]
    return DocumentListResponse(data=items, count=len(items))


@router.delete(
    "/applications/{code_id}/documents/{kind}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def delete_document(
    code_id: str,
    kind: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> Response:
    await doc_service.delete_document(session, user, code_id, kind)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/documents/review",
    response_model=DocumentReviewResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def review_document(
    body: DocumentReviewRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DocumentReviewResponse:
    """Approve or reject one document. Approving the last one may verify the applicant."""
    outcome = await doc_service.review_document(
        session,
        user,
        body.code_id,
        body.kind,
        DocumentStatus(body.status),
        file_name=body.file_name,
        rejection_reason=body.rejection_reason,
    )
    return DocumentReviewResponse(
        document=DocumentResponse.model_validate(outcome.document),
        applicant_status=outcome.status,
        status_changed=outcome.status_changed,
    )


@router.get(
    "/documents/follow-ups",
    response_model=FollowupListResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def list_pending_followups(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> FollowupListResponse:
    """Follow-up documents awaiting review, oldest first."""
    rows, total = await doc_service.list_pending_followups(
        session, user, offset=offset, limit=limit
    )
    items = [
        FollowupItem(
            code_id=applicant.code_id,
            applicant_name=applicant.name,
            barangay=barangay,
            document=DocumentResponse.model_validate(doc),
        )
        for doc, applicant, barangay in rows
    ]
    return FollowupListResponse(
        data=items,
        pagination=Pagination.build(total=total, offset=offset, limit=limit),
    )
