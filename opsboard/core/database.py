"""Database handle and request-scoped session dependency.

The engine is owned by an explicitly constructed ``Database`` object that the
application lifespan opens at startup and disposes at shutdown. Route handlers
never touch the engine directly; they receive a session from ``get_db``.
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from opsboard.config import Settings

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"

# Schema holding the reporter event log, canonical state and registry
OPS_SCHEMA = "ops"


class Database:
    """Connection pool plus session factory for one database."""

    def __init__(
        self,
        url: str,
        pool_size: int = 5,
        max_overflow: int = 0,
        command_timeout: int = 30,
    ):
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=False,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,  # Detects stale connections before use
            pool_recycle=300,
            pool_timeout=30,
            connect_args={"command_timeout": command_timeout},
        )
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.pg_pool_size,
            max_overflow=settings.pg_max_overflow,
            command_timeout=settings.pg_command_timeout,
        )

    async def create_all(self) -> None:
        """Create all tables (for development only - use Alembic in production)."""
        async with self.engine.begin() as conn:
            await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {OPS_SCHEMA}"))
            await conn.run_sync(SQLModel.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connection pool closed")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields a session from the application's database handle."""
    database: Database = request.app.state.db
    async with database.session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def is_unique_violation(exc: IntegrityError) -> bool:
    """Check whether an IntegrityError came from a unique constraint."""
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return code == UNIQUE_VIOLATION
