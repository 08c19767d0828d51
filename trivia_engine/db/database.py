from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from loguru import logger
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from trivia_engine.config import get_settings
from trivia_engine.core.errors import StorageError
from trivia_engine.db.models.base import Base


def _get_async_url(url: str) -> str:
    """Convert sync sqlite/postgres URLs to their async driver equivalents."""
    if url.startswith("sqlite:///") or url == "sqlite://":
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


class Database:
    """
    Async persistent store for trivia progress.

    Owns the engine and session factory. Every unit of work goes through
    session(), which commits on success, rolls back on any error and reports
    driver failures as StorageError.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = _get_async_url(url)
        parsed = make_url(self.url)
        if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
            Path(parsed.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

        self.engine: AsyncEngine = create_async_engine(self.url, echo=echo)
        self._session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def insert(self, model: Any):
        """Dialect-specific INSERT supporting ON CONFLICT upserts."""
        if self.dialect_name == "postgresql":
            return postgresql.insert(model)
        if self.dialect_name == "sqlite":
            return sqlite.insert(model)
        raise StorageError(f"Upserts are not supported on dialect {self.dialect_name!r}")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide an async transactional scope around a series of operations."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError(str(e)) from e
            except Exception:
                await session.rollback()
                raise

    async def init_db(self) -> None:
        """Create all tables (catalog and progress) if missing."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        logger.info("Database tables initialized at {}", self.url)

    async def dispose(self) -> None:
        await self.engine.dispose()


# ========================================
# Module-level default database
# ========================================

_database: Database | None = None


def get_database() -> Database:
    """Get or create the default database (lazy initialization)."""
    global _database
    if _database is None:
        settings = get_settings()
        _database = Database(settings.get_database_url(), echo=settings.database_echo)
    return _database


async def reset_database() -> None:
    """Dispose the default database so the next call rebuilds it from settings."""
    global _database
    if _database is not None:
        await _database.dispose()
        _database = None
