"""Async SQLAlchemy engine/session factory.

Built once by ``build_services`` when DATABASE_URL is set; infrastructure
repositories receive the session factory and open one session per call.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.ff_common.errors import DatabaseError

logger = logging.getLogger("ff.db")


def create_engine(url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(
        url,
        echo=echo,
        pool_size=20,
        max_overflow=10,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@asynccontextmanager
async def translate_db_errors(operation: str) -> AsyncIterator[None]:
    """Re-raise any SQLAlchemy failure as DatabaseError (HTTP 500)."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Database error during %s: %s", operation, exc)
        raise DatabaseError() from exc
