"""
Database handle and per-request session dependency.

CONNECTION STRATEGY
===================

One `Database` instance is built at startup and stored on `app.state`.
Requests reach it through the `get_db` dependency rather than a module-level
engine, so tests (and scripts) can hand in their own.

  - connect() is lazy and idempotent: the first caller creates the engine and
    verifies it with a round trip, later callers reuse it.
  - Concurrent first callers share one attempt (asyncio.Lock).
  - A failed attempt is disposed and NOT cached: the next request retries
    from scratch instead of replaying a stale failure.
"""

import asyncio
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import Settings
from app.core.exceptions import DatabaseConnectionError
from app.core.logging import get_logger

logger = get_logger(__name__)


class Database:
    def __init__(self, url: Optional[str], **engine_options):
        self.url = url
        self.engine_options = engine_options
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        options = {}
        if settings.DATABASE_URL.startswith("postgresql"):
            options = {
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
                "pool_timeout": settings.DB_POOL_TIMEOUT,
                "pool_recycle": settings.DB_POOL_RECYCLE,
                "pool_pre_ping": True,
            }
        return cls(settings.DATABASE_URL, **options)

    @property
    def connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> AsyncEngine:
        if self._engine is not None:
            return self._engine

        async with self._lock:
            if self._engine is not None:
                return self._engine

            if not self.url:
                logger.error("database_not_configured")
                raise DatabaseConnectionError("DATABASE_URL is not configured")

            try:
                engine = create_async_engine(self.url, **self.engine_options)
            except (SQLAlchemyError, ImportError, ValueError) as e:
                logger.error("database_engine_invalid", error=str(e))
                raise DatabaseConnectionError("Database configuration error") from e

            try:
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
            except (SQLAlchemyError, OSError) as e:
                await engine.dispose()
                logger.error("database_connection_failed", error=str(e))
                raise DatabaseConnectionError("Database is unreachable") from e

            self._engine = engine
            self._sessionmaker = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
            logger.info("database_connected", dialect=engine.dialect.name)
            return engine

    async def session(self) -> AsyncSession:
        await self.connect()
        return self._sessionmaker()

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            logger.info("database_disconnected")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session bound to the application's Database; roll back on error."""
    database: Database = request.app.state.database
    session = await database.session()
    async with session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
