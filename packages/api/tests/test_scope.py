# This project was developed with assistance from AI tools.
"""Data scope filtering and settings ownership."""

from db import Applicant
from db.config import DatabaseSettings
from db.enums import UserRole
from sqlalchemy import select

from factories import make_submission
from personas import BARANGAY_ADMIN, OTHER_BARANGAY_ADMIN, SUPERADMIN, applicant_user
from src.core.config import Settings
from src.schemas.auth import DataScope, UserContext
from src.services import lifecycle
from src.services.scope import apply_data_scope


async def _names(session, user):
    stmt = apply_data_scope(select(Applicant.name).order_by(Applicant.name), user.data_scope, user)
    return (await session.execute(stmt)).scalars().all()


async def _register_two(session):
    await lifecycle.submit_application(session, make_submission())
    await lifecycle.submit_application(
        session,
        make_submission(email="rosa@example.com", first_name="Rosa", barangay="Bagbaguin"),
    )


async def test_superadmin_sees_every_barangay(session):
    await _register_two(session)
    assert await _names(session, SUPERADMIN) == ["Maria Reyes Santos", "Rosa Reyes Santos"]


async def test_barangay_admin_sees_own_barangay(session):
    await _register_two(session)
    assert await _names(session, BARANGAY_ADMIN) == ["Maria Reyes Santos"]
    assert await _names(session, OTHER_BARANGAY_ADMIN) == ["Rosa Reyes Santos"]


async def test_applicant_sees_own_record_by_email(session):
    await _register_two(session)
    assert await _names(session, applicant_user("Rosa@Example.com")) == ["Rosa Reyes Santos"]


async def test_unrecognized_scope_sees_nothing(session):
    await _register_two(session)
    admin_without_barangay = UserContext(
        user_id="brgy-unknown",
        role=UserRole.BARANGAY_ADMIN,
        email="unknown@santamaria.gov.ph",
        name="Unassigned Desk",
        data_scope=DataScope(),
    )
    assert await _names(session, admin_without_barangay) == []


def test_database_url_is_owned_by_db_settings():
    assert "DATABASE_URL" not in Settings.model_fields
    assert "DEBUG" not in Settings.model_fields
    assert "DATABASE_URL" in DatabaseSettings.model_fields
