# This project was developed with assistance from AI tools.
"""Notification inbox routes."""

from db import get_db
from db.enums import NotificationAudience, UserRole
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.notification import (
    MarkReadResponse,
    NotificationListResponse,
    NotificationResponse,
)
from ..services import notifications as notification_service

router = APIRouter(
    dependencies=[
        Depends(require_roles(UserRole.APPLICANT, UserRole.BARANGAY_ADMIN, UserRole.SUPERADMIN))
    ]
)


@router.get("/{applicant_id}", response_model=NotificationListResponse)
async def list_notifications(
    applicant_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    audience: NotificationAudience | None = None,
    unread_only: bool = Query(default=False),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> NotificationListResponse:
    """Notifications about an applicant. Applicants only see their own inbox."""
    items, total, unread = await notification_service.list_notifications(
        session,
        user,
        applicant_id,
        audience=audience,
        unread_only=unread_only,
        offset=offset,
        limit=limit,
    )
    return NotificationListResponse(
        data=[NotificationResponse.model_validate(n) for n in items],
        unread_count=unread,
        pagination=Pagination.build(total=total, offset=offset, limit=limit),
    )


@router.put("/{applicant_id}/read-all", response_model=MarkReadResponse)
async def mark_all_read(
    applicant_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> MarkReadResponse:
    updated = await notification_service.mark_all_read(session, user, applicant_id)
    return MarkReadResponse(updated=updated)


@router.put("/{applicant_id}/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    applicant_id: int,
    notification_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> NotificationResponse:
    notification = await notification_service.mark_read(
        session, user, applicant_id, notification_id
    )
    return NotificationResponse.model_validate(notification)
