"""
Global database session and engine management.

This module manages the global AsyncEngine and async_sessionmaker instances
that are used throughout the application for database access.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlmodel.ext.asyncio.session import AsyncSession

from citadel_pow.core.logging_config import get_logger
from citadel_pow.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

engine = create_engine(settings.database.url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Yields:
        AsyncSession: An asynchronous SQLModel session.
    """
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """
    Initialize the database.

    Alembic migrations own the schema. Tables are only created here when
    DB_AUTO_CREATE_TABLES is enabled, which is meant for local development.
    """
    if not settings.database.auto_create_tables:
        logger.info("DB_AUTO_CREATE_TABLES is disabled, schema is managed by Alembic")
        return
    await create_all(engine)
    logger.info("Database tables created")
