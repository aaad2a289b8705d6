"""
FreePaste — Relational Paste Repository
=========================================

What:  PasteRepository backed by async SQLAlchemy (SQLite via aiosqlite by
       default, PostgreSQL via asyncpg).
How:   Each operation runs in its own transactional session_scope. Id
       uniqueness comes from the `pastes_pkey` primary key constraint; an
       IntegrityError naming it is translated to DuplicatePasteIdError.

Query plan:
    find_by_id          SELECT ... WHERE id = :id            → primary key
    update_content      UPDATE ... WHERE id = :id            → primary key, rowcount
    list_by_owner_token SELECT id, title, created_at
                        WHERE owner_token = :tok
                        ORDER BY created_at DESC             → idx_pastes_owner_token
"""

import logging
from typing import List, Optional

from sqlalchemy import desc, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from freepaste.config import Settings, settings as default_settings
from freepaste.database import Base, create_engine, create_session_factory, session_scope
from freepaste.exceptions import DuplicatePasteIdError, NotFoundError, StorageError
from freepaste.models.paste import Paste
from freepaste.repositories.base import PasteRepository, as_utc
from freepaste.schemas.paste import PasteRecord, PasteSummary

logger = logging.getLogger(__name__)

# Fragments of the driver message identifying a primary key collision on pastes.id
#   SQLite:     UNIQUE constraint failed: pastes.id
#   PostgreSQL: duplicate key value violates unique constraint "pastes_pkey"
_ID_COLLISION_MARKERS = ("pastes.id", "pastes_pkey")


def is_id_collision(exc: IntegrityError) -> bool:
    message = str(exc.orig) if exc.orig is not None else str(exc)
    return any(marker in message for marker in _ID_COLLISION_MARKERS)


class SqlPasteRepository(PasteRepository):
    """
    Relational adapter.

    Args:
        config: Settings used to build the engine (DATABASE_URL, pool options).
        engine: Pre-built engine, used by tests and Alembic tooling instead of config.
    """

    backend_name = "sql"

    def __init__(self, config: Optional[Settings] = None, engine: Optional[AsyncEngine] = None):
        self._config = config or default_settings
        self._engine = engine
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def connect(self) -> None:
        if self._engine is None:
            self._engine = create_engine(self._config)
        self._session_factory = create_session_factory(self._engine)

        if self._config.db_create_schema:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        logger.info("SQL paste repository connected (%s)", self._engine.url.render_as_string())

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("SQL paste repository closed")

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def find_by_id(self, paste_id: str) -> Optional[PasteRecord]:
        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(select(Paste).where(Paste.id == paste_id))
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching paste %s: %s", paste_id, str(e))
            raise StorageError(context={"paste_id": paste_id, "error_type": type(e).__name__})

        if row is None:
            return None
        return self._to_record(row)

    async def insert(self, record: PasteRecord) -> PasteRecord:
        row = Paste(
            id=record.id,
            title=record.title,
            content=record.content,
            owner_token=record.owner_token,
            created_at=record.created_at,
        )
        try:
            async with session_scope(self._session_factory) as session:
                session.add(row)
        except IntegrityError as e:
            if is_id_collision(e):
                raise DuplicatePasteIdError(record.id)
            logger.error("Integrity error inserting paste %s: %s", record.id, str(e.orig))
            raise StorageError(context={"paste_id": record.id, "error_type": "IntegrityError"})
        except SQLAlchemyError as e:
            logger.error("Database error inserting paste %s: %s", record.id, str(e))
            raise StorageError(context={"paste_id": record.id, "error_type": type(e).__name__})
        return record

    async def update_content(self, paste_id: str, title: str, content: str) -> None:
        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(
                    update(Paste)
                    .where(Paste.id == paste_id)
                    .values(title=title, content=content)
                )
                matched = result.rowcount
        except SQLAlchemyError as e:
            logger.error("Database error updating paste %s: %s", paste_id, str(e))
            raise StorageError(context={"paste_id": paste_id, "error_type": type(e).__name__})

        if matched == 0:
            raise NotFoundError(resource="paste", resource_id=paste_id)

    async def list_by_owner_token(self, token: str) -> List[PasteSummary]:
        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(
                    select(Paste.id, Paste.title, Paste.created_at)
                    .where(Paste.owner_token == token)
                    .order_by(desc(Paste.created_at))
                )
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing pastes: %s", str(e), exc_info=True)
            raise StorageError(context={"error_type": type(e).__name__})

        return [
            PasteSummary(id=row.id, title=row.title, created_at=as_utc(row.created_at))
            for row in rows
        ]

    @staticmethod
    def _to_record(row: Paste) -> PasteRecord:
        return PasteRecord(
            id=row.id,
            title=row.title,
            content=row.content,
            owner_token=row.owner_token,
            created_at=as_utc(row.created_at),
        )
