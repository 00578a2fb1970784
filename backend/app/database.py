"""
CaseDesk Backend — Database Session Management
================================================

What:  Store handle (async engine + session factory), ORM base, FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   A `Database` object owns one async engine with connection pooling and
       hands out sessions. The application creates exactly one `Database`
       and keeps it on `app.state.database`; route handlers receive sessions
       through the `get_db_session` dependency, which resolves the handle from
       the running application instead of a module-level global.
Who:   Created by the app factory / lifespan; used by route handlers via Depends().
When:  Engine is created at startup (or by tests); sessions are created per-request.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:     Persistent connections for normal load
    max_overflow=10:  Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:    Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs skip pool sizing; in-memory SQLite uses a StaticPool so every
    session sees the same database.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to:
    1. Register with SQLAlchemy's metadata (used by Alembic for migrations)
    2. Share a single metadata object for consistent schema management
    """
    pass


def _engine_options(url: str, config: Settings) -> Dict[str, Any]:
    """Builds create_async_engine keyword arguments appropriate for the URL."""
    options: Dict[str, Any] = {"echo": config.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            options["poolclass"] = StaticPool
        return options

    options.update(
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_pre_ping=config.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


class Database:
    """
    Process-wide store handle: one engine, one session factory.

    Usage:
        database = Database("postgresql+asyncpg://...")
        async with database.session_factory() as session:
            ...
        await database.dispose()
    """

    def __init__(self, url: str, config: Optional[Settings] = None):
        config = config or default_settings
        self.engine: AsyncEngine = create_async_engine(url, **_engine_options(url, config))
        # expire_on_commit=False: returned ORM objects stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "Database":
        config = config or default_settings
        return cls(config.database_url, config)

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def create_all(self) -> None:
        """Creates every table registered on Base (tests and local SQLite runs)."""
        # Model modules must be imported so their tables are registered
        from app.models import case, custom_field  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Executes SELECT 1; returns False instead of raising when unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Closes all pooled connections (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Resolves the Database handle stored on the running application
        2. Creates a new session from its factory and yields it
        3. On error: rolls back so no partial writes survive
        4. Always: closes the session (returns connection to pool)

    Services commit their own writes, so nothing is committed here.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
