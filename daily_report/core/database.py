"""
Database access with SQLAlchemy async support.

Uses SQLite (aiosqlite) for development; any async SQLAlchemy URL works
(e.g. postgresql+asyncpg://...). One Database instance is created per
application by the app factory; there is no module-level engine.
"""

import logging
from typing import AsyncIterator

from sqlalchemy import event, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from daily_report.core.errors import ApiError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores FOREIGN KEY clauses unless told otherwise per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the async engine and the session factory."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo, future=True)

        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; used as a FastAPI dependency via get_db."""
        async with self.session_maker() as session:
            try:
                yield session
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create tables for all imported models."""
        # Register every model on Base.metadata
        import daily_report.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


# SQLSTATE for unique_violation on servers that report one
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the integrity error came from a unique constraint or index."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == UNIQUE_VIOLATION
    detail = str(orig).lower()
    return "unique constraint" in detail or "duplicate" in detail


def escape_like(value: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so `value` matches literally (use with escape=)."""
    return (
        value.replace(escape, escape * 2)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )


async def commit_unique(session: AsyncSession, message: str) -> None:
    """
    Commit, reporting a unique constraint violation as DUPLICATE_ENTRY.

    Handlers pre-check uniqueness before writing; this catches the race
    where a concurrent request wins between the check and the commit.
    Any other integrity failure (a foreign key to a row deleted meanwhile)
    is a CONFLICT.
    """
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            raise ApiError.duplicate(message)
        logger.warning("Commit rejected by integrity constraint: %s", exc.orig)
        raise ApiError.conflict("The request conflicts with the current state of related data")
