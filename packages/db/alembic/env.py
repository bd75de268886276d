# This project was developed with assistance from AI tools.
"""Alembic environment for the registry schema.

Online migrations use the same engine factory as the app, so the
PostgreSQL lock timeout and the SQLite busy timeout apply here too.
SQLite runs in batch mode because it cannot ALTER most constraints.
"""

import asyncio
from logging.config import fileConfig

from alembic import context

from db import models  # noqa: F401 -- register tables on Base.metadata
from db.config import db_settings
from db.database import Base, create_registry_engine

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or db_settings.DATABASE_URL


def run_migrations_offline() -> None:
    url = _database_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = create_registry_engine(_database_url())
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
