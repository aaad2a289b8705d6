"""
FreePaste — Relational Database Session Management
=====================================================

What:  Async SQLAlchemy engine factory, session factory, declarative Base and
       a transactional session scope.
How:   The engine is built explicitly from Settings by SqlPasteRepository.connect()
       during application startup and disposed on shutdown. Nothing connects
       at import time.
Who:   Used by SqlPasteRepository, Alembic, and the repository tests.

Connection Pooling Strategy:
    SQLite (default):  aiosqlite driver, SQLAlchemy's default pool for the URL.
    PostgreSQL:        pool_size / max_overflow from settings, pre-ping enabled,
                       connections recycled every hour.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from freepaste.config import Settings, settings as default_settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers models with a shared metadata object, which Alembic reads for
    --autogenerate and SqlPasteRepository uses for create_all.
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def create_engine(config: Optional[Settings] = None) -> AsyncEngine:
    """
    Build the async engine for the configured DATABASE_URL.

    Pool options are only passed to server databases; SQLite URLs use the
    pool SQLAlchemy selects for them (StaticPool for :memory:, a queue pool
    for files), which does not accept pool_size.
    """
    config = config or default_settings
    engine_kwargs = {
        "pool_pre_ping": config.db_pool_pre_ping,
        # Echo SQL queries in DEBUG mode for development visibility
        "echo": config.log_level == "DEBUG",
    }
    if not config.is_sqlite:
        engine_kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(config.database_url, **engine_kwargs)


# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit, so rows can
# be converted to PasteRecord outside the transaction
def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Scope ─────────────────────────────────────────────────────────
@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a transactional session for one repository operation.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the caller (the caller performs queries)
        3. On success: commits the transaction
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage:
        async with session_scope(self._session_factory) as session:
            session.add(row)
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
