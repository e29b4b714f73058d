"""
Little Application: Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   A `Database` object owns the async engine (with connection pooling)
       and the session factory. create_app() builds one from the Settings
       and stores it on `app.state.database`; the session dependency commits
       on success and rolls back on error.
Who:   Route handlers via FastAPI's dependency injection; tests directly.
When:  Engine is created with the app; sessions are created per-request.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (tests) get the driver's default pool and no sizing options.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from littleapp.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model inherits from this class to register with the shared
    metadata (used by Alembic and by Database.create_all()).
    """
    pass


class Database:
    """
    Owns the async engine and session factory for one application instance.

    Lifecycle:
        1. Constructed in create_app() from Settings (no connection yet)
        2. wait_until_ready() probes connectivity at startup (with retries)
        3. session() hands out a fresh AsyncSession per request
        4. dispose() closes pooled connections at shutdown
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: AsyncEngine = create_async_engine(
            settings.database_url,
            echo=settings.log_level == "DEBUG",
            **self._pool_options(settings),
        )
        # expire_on_commit=False: attributes stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @staticmethod
    def _pool_options(settings: Settings) -> dict:
        if settings.database_url.startswith("sqlite"):
            return {}
        return {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_pre_ping": settings.db_pool_pre_ping,
            "pool_recycle": 3600,
        }

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def ping(self) -> None:
        """Execute SELECT 1; raises on connectivity failure."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def wait_until_ready(self) -> None:
        """
        Probe the database until it answers or attempts run out.

        How:   tenacity retries ping() with exponential backoff, bounded by
               DB_CONNECT_ATTEMPTS. The last error is re-raised.
        When:  Application startup (lifespan).
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.settings.db_connect_attempts),
            wait=wait_exponential(multiplier=1, min=self.settings.db_connect_wait, max=30),
            retry=retry_if_exception_type(Exception),
            reraise=True,
        ):
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                if attempt_number > 1:
                    logger.warning("Database not reachable, retry %d", attempt_number)
                await self.ping()
        logger.info("Database connection established")

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata (dev/test)."""
        # Import models so they register with Base.metadata
        from littleapp import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        from littleapp import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Gracefully close all connections in the pool."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's Database
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
