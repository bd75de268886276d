# This project was developed with assistance from AI tools.
"""Shared fixtures: a throwaway SQLite registry per test, personas, and an app client.

Each test gets its own database file under ``tmp_path`` so concurrent
sessions can be opened against the same store. The FastAPI app from
``src.main`` is a module singleton; overrides are cleared after every test.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from db import Base, create_registry_engine, get_db, registry_sessionmaker
from httpx import ASGITransport, AsyncClient

from personas import BARANGAY_ADMIN, SUPERADMIN, applicant_user
from src.core.config import settings
from src.main import app as real_app
from src.middleware.auth import get_current_user
from src.schemas.auth import UserContext
from src.services.mailer import EmailSender

# ---------------------------------------------------------------------------
# Personas
# ---------------------------------------------------------------------------


@pytest.fixture
def superadmin() -> UserContext:
    return SUPERADMIN


@pytest.fixture
def barangay_admin() -> UserContext:
    return BARANGAY_ADMIN


@pytest.fixture
def applicant() -> UserContext:
    return applicant_user()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _fast_retries(monkeypatch):
    """Keep transient-failure retries from slowing the suite down."""
    monkeypatch.setattr(settings, "RETRY_BACKOFF_SECONDS", 0.05)
    monkeypatch.setattr(settings, "EMAIL_ENABLED", False)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_registry_engine(f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return registry_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mailer():
    """Email sender stand-in that records queued messages."""
    sender = MagicMock(spec=EmailSender)
    sender.send_all = AsyncMock(return_value=True)
    sender.send = AsyncMock(return_value=True)
    return sender


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_overrides():
    """Clear app dependency overrides after each test."""
    yield
    real_app.dependency_overrides.clear()


@pytest.fixture
def make_client(session_factory):
    """Factory fixture: bind the app to the test database as ``user``.

    ``user=None`` leaves authentication in place, for public routes and
    401 checks.
    """

    async def _override_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    def _make(user: UserContext | None = None) -> AsyncClient:
        real_app.dependency_overrides[get_db] = _override_db
        if user is not None:
            real_app.dependency_overrides[get_current_user] = lambda: user
        else:
            real_app.dependency_overrides.pop(get_current_user, None)
        return AsyncClient(transport=ASGITransport(app=real_app), base_url="http://test")

    return _make
