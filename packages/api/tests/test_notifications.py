# This project was developed with assistance from AI tools.
"""Tests for the notification sink and inbox."""

import pytest
from db import Applicant, Notification
from db.enums import NotificationAudience
from sqlalchemy import func, select

from factories import make_submission
from personas import BARANGAY_ADMIN, OTHER_BARANGAY_ADMIN, SUPERADMIN, applicant_user
from src.services import lifecycle
from src.services.errors import NotFoundError
from src.services.notifications import (
    NotificationSink,
    list_notifications,
    mark_all_read,
    mark_read,
)


async def _applicant(session):
    return (await lifecycle.submit_application(session, make_submission())).applicant


async def _count(session, applicant_id) -> int:
    stmt = select(func.count(Notification.id)).where(Notification.target_id == applicant_id)
    return (await session.execute(stmt)).scalar()


# ---------------------------------------------------------------------------
# NotificationSink
# ---------------------------------------------------------------------------


async def test_identical_unread_notification_is_skipped(session):
    applicant = await _applicant(session)
    sink = NotificationSink(session)

    first = await sink.record(applicant.id, "renewal", "Please renew.")
    second = await sink.record(applicant.id, "renewal", "Please renew.")
    await session.commit()

    assert first is not None
    assert second is None
    # new_app + renewal
    assert await _count(session, applicant.id) == 2


async def test_read_notification_does_not_block_new_one(session):
    applicant = await _applicant(session)
    sink = NotificationSink(session)
    first = await sink.record(applicant.id, "renewal", "Please renew.")
    first.is_read = True
    await session.commit()

    again = await sink.record(applicant.id, "renewal", "Please renew.")
    await session.commit()

    assert again is not None
    assert await _count(session, applicant.id) == 3


async def test_failed_insert_does_not_abort_outer_transaction(session):
    applicant = await _applicant(session)
    row = await session.get(Applicant, applicant.id)
    row.name = "Maria R. Santos"
    await session.flush()
    sink = NotificationSink(session)

    failed = await sink.record(applicant.id, None, "kind is required")
    kept = await sink.record(applicant.id, "renewal", "Please renew.")
    await session.commit()

    assert failed is None
    assert kept is not None
    refreshed = await session.get(Applicant, applicant.id, populate_existing=True)
    assert refreshed.name == "Maria R. Santos"
    assert await _count(session, applicant.id) == 2


# ---------------------------------------------------------------------------
# Inbox
# ---------------------------------------------------------------------------


async def _with_inbox(session):
    applicant = await _applicant(session)
    sink = NotificationSink(session)
    for i in range(3):
        await sink.record(applicant.id, "document_approved", f"Document {i} accepted.")
    await sink.record(
        applicant.id,
        "remarks",
        "Pending remarks.",
        audience=NotificationAudience.BARANGAY_ADMIN,
        barangay="Poblacion",
    )
    await session.commit()
    return applicant


async def test_applicant_sees_only_own_audience(session):
    applicant = await _with_inbox(session)

    items, total, unread = await list_notifications(session, applicant_user(), applicant.id)

    assert total == 3
    assert unread == 3
    assert {n.audience for n in items} == {NotificationAudience.APPLICANT}


async def test_inbox_pagination(session):
    applicant = await _with_inbox(session)

    items, total, _ = await list_notifications(
        session, applicant_user(), applicant.id, offset=1, limit=1
    )

    assert total == 3
    assert len(items) == 1


async def test_barangay_admin_cannot_read_other_audience(session):
    applicant = await _with_inbox(session)

    items, total, _ = await list_notifications(
        session, BARANGAY_ADMIN, applicant.id, audience=NotificationAudience.SUPERADMIN
    )

    assert total == 1
    assert items[0].audience == NotificationAudience.BARANGAY_ADMIN


async def test_superadmin_may_choose_audience(session):
    applicant = await _with_inbox(session)

    items, total, _ = await list_notifications(
        session, SUPERADMIN, applicant.id, audience=NotificationAudience.APPLICANT
    )
    assert total == 3

    items, total, _ = await list_notifications(session, SUPERADMIN, applicant.id)
    assert [n.kind for n in items] == ["new_app"]


async def test_out_of_scope_inbox_is_not_found(session):
    applicant = await _with_inbox(session)

    with pytest.raises(NotFoundError):
        await list_notifications(session, OTHER_BARANGAY_ADMIN, applicant.id)
    with pytest.raises(NotFoundError):
        await list_notifications(session, applicant_user("rosa@example.com"), applicant.id)


async def test_mark_read_and_mark_all_read(session):
    applicant = await _with_inbox(session)
    me = applicant_user()
    items, _, _ = await list_notifications(session, me, applicant.id)

    marked = await mark_read(session, me, applicant.id, items[0].id)
    assert marked.is_read is True
    _, _, unread = await list_notifications(session, me, applicant.id)
    assert unread == 2

    assert await mark_all_read(session, me, applicant.id) == 2
    _, total, unread = await list_notifications(session, me, applicant.id, unread_only=True)
    assert total == 0
    assert unread == 0


async def test_mark_read_of_other_audience_is_not_found(session):
    applicant = await _with_inbox(session)
    staff_items, _, _ = await list_notifications(session, BARANGAY_ADMIN, applicant.id)

    with pytest.raises(NotFoundError):
        await mark_read(session, applicant_user(), applicant.id, staff_items[0].id)
