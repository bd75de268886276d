# This project was developed with assistance from AI tools.
"""Notification records and the applicant/staff inbox.

Recording is a side effect of status changes and must never abort the
transaction that triggered it: each insert runs in its own SAVEPOINT and
failures are logged and dropped.
"""

import logging

from db import Applicant, Notification
from db.enums import NotificationAudience, UserRole
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from .errors import NotFoundError
from .scope import apply_data_scope

logger = logging.getLogger(__name__)

_ROLE_AUDIENCE = {
    UserRole.APPLICANT: NotificationAudience.APPLICANT,
    UserRole.BARANGAY_ADMIN: NotificationAudience.BARANGAY_ADMIN,
    UserRole.SUPERADMIN: NotificationAudience.SUPERADMIN,
}


class NotificationSink:
    """Best-effort notification writer bound to the caller's session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        target_id: int,
        kind: str,
        message: str,
        *,
        audience: NotificationAudience = NotificationAudience.APPLICANT,
        barangay: str | None = None,
    ) -> Notification | None:
        """Insert a notification unless an identical unread one exists.

        Returns the new row, or None when skipped or when the insert failed.
        """
        try:
            async with self.session.begin_nested():
                duplicate = await self.session.execute(
                    select(Notification.id)
                    .where(
                        Notification.target_id == target_id,
                        Notification.audience == audience,
                        Notification.kind == kind,
                        Notification.message == message,
                        Notification.is_read.is_(False),
                    )
                    .limit(1)
                )
                if duplicate.scalar_one_or_none() is not None:
                    logger.debug(
                        "Skipping duplicate unread %s notification for applicant %s",
                        kind,
                        target_id,
                    )
                    return None

                notification = Notification(
                    target_id=target_id,
                    audience=audience,
                    kind=kind,
                    message=message,
                    barangay=barangay,
                    is_read=False,
                )
                self.session.add(notification)
            return notification
        except SQLAlchemyError:
            logger.exception(
                "Failed to record %s notification for applicant %s", kind, target_id
            )
            return None


def audience_for(user: UserContext) -> NotificationAudience:
    return _ROLE_AUDIENCE[user.role]


async def _require_visible_applicant(
    session: AsyncSession, user: UserContext, applicant_id: int
) -> None:
    stmt = select(Applicant.id).where(Applicant.id == applicant_id)
    stmt = apply_data_scope(stmt, user.data_scope, user)
    if (await session.execute(stmt)).scalar_one_or_none() is None:
        raise NotFoundError("Applicant not found")


async def list_notifications(
    session: AsyncSession,
    user: UserContext,
    applicant_id: int,
    *,
    audience: NotificationAudience | None = None,
    unread_only: bool = False,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Notification], int, int]:
    """Return (page, total, unread_count) newest first.

    Only superadmins may read another audience's notifications.
    """
    await _require_visible_applicant(session, user, applicant_id)
    if user.role != UserRole.SUPERADMIN or audience is None:
        audience = audience_for(user)

    base = [Notification.target_id == applicant_id, Notification.audience == audience]
    if unread_only:
        base.append(Notification.is_read.is_(False))

    total = (
        await session.execute(select(func.count(Notification.id)).where(*base))
    ).scalar() or 0
    unread = (
        await session.execute(
            select(func.count(Notification.id)).where(
                Notification.target_id == applicant_id,
                Notification.audience == audience,
                Notification.is_read.is_(False),
            )
        )
    ).scalar() or 0

    stmt = (
        select(Notification)
        .where(*base)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all()), total, unread


async def mark_read(
    session: AsyncSession,
    user: UserContext,
    applicant_id: int,
    notification_id: int,
) -> Notification:
    await _require_visible_applicant(session, user, applicant_id)
    stmt = select(Notification).where(
        Notification.id == notification_id,
        Notification.target_id == applicant_id,
        Notification.audience == audience_for(user),
    )
    notification = (await session.execute(stmt)).scalar_one_or_none()
    if notification is None:
        raise NotFoundError("Notification not found")

    notification.is_read = True
    await session.commit()
    await session.refresh(notification)
    return notification


async def mark_all_read(session: AsyncSession, user: UserContext, applicant_id: int) -> int:
    """Mark every unread notification for the caller's audience read. Returns the count."""
    await _require_visible_applicant(session, user, applicant_id)
    result = await session.execute(
        update(Notification)
        .where(
            Notification.target_id == applicant_id,
            Notification.audience == audience_for(user),
            Notification.is_read.is_(False),
        )
        .values(is_read=True)
    )
    await session.commit()
    logger.info("Marked %d notifications read for applicant %s", result.rowcount, applicant_id)
    return result.rowcount
