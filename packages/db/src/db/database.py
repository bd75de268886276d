# This project was developed with assistance from AI tools.
"""Registry engine, session factory, and FastAPI session dependencies.

Service operations commit their own unit of work (they are retried as a
whole on transient lock failures). ``get_db`` only guarantees that whatever
a request leaves uncommitted is rolled back and its row locks released.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from .config import db_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_registry_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Build an async engine with the registry's lock-wait limits applied.

    SQLite gets a busy timeout and no pooling, so every session opens its
    own connection to the file. PostgreSQL sessions get ``lock_timeout`` so
    a blocked ``SELECT .. FOR UPDATE`` fails fast instead of hanging.
    """
    if make_url(url).get_backend_name() == "sqlite":
        return create_async_engine(
            url,
            echo=echo,
            poolclass=NullPool,
            connect_args={"timeout": db_settings.SQLITE_BUSY_TIMEOUT},
        )
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        connect_args={"server_settings": {"lock_timeout": str(db_settings.DB_LOCK_TIMEOUT_MS)}},
    )


def registry_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit; routes serialize them afterwards.
    return async_sessionmaker(engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


engine = create_registry_engine(db_settings.DATABASE_URL, echo=db_settings.SQL_ECHO)

SessionLocal = registry_sessionmaker(engine)


class DatabaseService:
    """Engine lifecycle for the app: readiness probe and shutdown."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def health_check(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database health check failed", exc_info=True)
            return False

    async def close(self) -> None:
        await self.engine.dispose()


db_service = DatabaseService(engine=engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session.

    Rolls back if the handler raised, and discards any transaction the
    handler opened but did not commit (read-only lookups included).
    """
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        if session.in_transaction():
            await session.rollback()


async def get_db_service() -> DatabaseService:
    return db_service
