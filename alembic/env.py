"""Alembic environment for the raw-SQL migrations under versions/.

The database URL comes from settings; ``alembic -x dburl=...`` overrides it
for one-off runs against another database.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from config.settings import settings

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    url = context.get_x_argument(as_dictionary=True).get("dburl") or settings.DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL must be set to run migrations")
    return url


def _configure(**kwargs) -> None:  # type: ignore[no-untyped-def]
    # No ORM metadata: every revision is hand-written SQL
    context.configure(target_metadata=None, transaction_per_migration=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(connection=connection)


async def _run_online(url: str) -> None:
    engine = create_async_engine(url)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
else:
    asyncio.run(_run_online(_database_url()))
