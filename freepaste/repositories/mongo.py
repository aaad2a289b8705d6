"""
FreePaste — Document-Store Paste Repository
=============================================

What:  PasteRepository backed by MongoDB through pymongo's asyncio client.
How:   Documents live in the `pastes` collection. A unique index on `id` is
       created at connect(); insert_one relies on it and translates the
       resulting DuplicateKeyError into DuplicatePasteIdError.

Document shape:
    {
        "id": "aZ3kP0qLm9",
        "title": "Untitled",
        "content": "...",
        "owner_token": "<64 hex chars>",
        "created_at": ISODate(...)
    }

Indexes:
    uniq_paste_id          {id: 1}, unique      → lookups + collision detection
    idx_owner_created      {owner_token: 1, created_at: -1}
                                                → profile listing, already sorted
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, AsyncMongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from freepaste.config import Settings, settings as default_settings
from freepaste.exceptions import DuplicatePasteIdError, NotFoundError, StorageError
from freepaste.repositories.base import PasteRepository, as_utc
from freepaste.schemas.paste import PasteRecord, PasteSummary

logger = logging.getLogger(__name__)

COLLECTION_NAME = "pastes"

# Never return Mongo's internal _id to callers
_RECORD_PROJECTION = {"_id": 0}
_SUMMARY_PROJECTION = {"_id": 0, "id": 1, "title": 1, "created_at": 1}


def is_id_collision(exc: DuplicateKeyError) -> bool:
    """True when the duplicate key error was raised by the index on `id`."""
    details = exc.details or {}
    key_pattern = details.get("keyPattern") or details.get("keyValue") or {}
    if key_pattern:
        return "id" in key_pattern
    return "uniq_paste_id" in str(exc)


class MongoPasteRepository(PasteRepository):
    """
    Document-store adapter.

    Args:
        config: Settings providing MONGO_URI, MONGO_DATABASE and timeouts.
        client: Pre-built client, used by tests instead of config.
    """

    backend_name = "mongo"

    def __init__(self, config: Optional[Settings] = None, client: Optional[AsyncMongoClient] = None):
        self._config = config or default_settings
        self._client = client
        self._collection = None

    async def connect(self) -> None:
        if self._client is None:
            # tz_aware: created_at comes back as an aware UTC datetime
            self._client = AsyncMongoClient(
                self._config.mongo_uri,
                tz_aware=True,
                serverSelectionTimeoutMS=self._config.mongo_timeout_ms,
            )
        database = self._client[self._config.mongo_database]
        self._collection = database[COLLECTION_NAME]

        try:
            await self._collection.create_index(
                [("id", ASCENDING)], name="uniq_paste_id", unique=True
            )
            await self._collection.create_index(
                [("owner_token", ASCENDING), ("created_at", DESCENDING)],
                name="idx_owner_created",
            )
        except PyMongoError as e:
            logger.error("Could not ensure Mongo indexes: %s", str(e))
            raise StorageError(
                message="Could not initialize the paste store.",
                context={"error_type": type(e).__name__},
            )

        logger.info(
            "Mongo paste repository connected (database=%s)", self._config.mongo_database
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            logger.info("Mongo paste repository closed")

    async def ping(self) -> bool:
        try:
            await self._client.admin.command("ping")
            return True
        except Exception as e:
            logger.warning("Mongo ping failed: %s", str(e))
            return False

    async def find_by_id(self, paste_id: str) -> Optional[PasteRecord]:
        try:
            document = await self._collection.find_one({"id": paste_id}, _RECORD_PROJECTION)
        except PyMongoError as e:
            logger.error("Mongo error fetching paste %s: %s", paste_id, str(e))
            raise StorageError(context={"paste_id": paste_id, "error_type": type(e).__name__})

        if document is None:
            return None
        return self._to_record(document)

    async def insert(self, record: PasteRecord) -> PasteRecord:
        # insert_one mutates its argument (adds _id); hand it a fresh dict
        document = record.model_dump()
        try:
            await self._collection.insert_one(document)
        except DuplicateKeyError as e:
            if is_id_collision(e):
                raise DuplicatePasteIdError(record.id)
            logger.error("Unexpected duplicate key inserting paste %s: %s", record.id, str(e))
            raise StorageError(context={"paste_id": record.id, "error_type": "DuplicateKeyError"})
        except PyMongoError as e:
            logger.error("Mongo error inserting paste %s: %s", record.id, str(e))
            raise StorageError(context={"paste_id": record.id, "error_type": type(e).__name__})
        return record

    async def update_content(self, paste_id: str, title: str, content: str) -> None:
        try:
            result = await self._collection.update_one(
                {"id": paste_id},
                {"$set": {"title": title, "content": content}},
            )
        except PyMongoError as e:
            logger.error("Mongo error updating paste %s: %s", paste_id, str(e))
            raise StorageError(context={"paste_id": paste_id, "error_type": type(e).__name__})

        if result.matched_count == 0:
            raise NotFoundError(resource="paste", resource_id=paste_id)

    async def list_by_owner_token(self, token: str) -> List[PasteSummary]:
        try:
            cursor = self._collection.find(
                {"owner_token": token}, _SUMMARY_PROJECTION
            ).sort("created_at", DESCENDING)
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Mongo error listing pastes: %s", str(e), exc_info=True)
            raise StorageError(context={"error_type": type(e).__name__})

        return [
            PasteSummary(
                id=doc["id"],
                title=doc.get("title", "Untitled"),
                created_at=as_utc(doc["created_at"]),
            )
            for doc in documents
        ]

    @staticmethod
    def _to_record(document: Dict[str, Any]) -> PasteRecord:
        return PasteRecord(
            id=document["id"],
            title=document.get("title", "Untitled"),
            content=document["content"],
            owner_token=document["owner_token"],
            created_at=as_utc(document["created_at"]),
        )
