"""
FreePaste — Abstract Paste Repository Interface
=================================================

What:  Abstract base class defining the persistence contract for pastes.
How:   Concrete adapters (SqlPasteRepository, MongoPasteRepository) inherit from
       PasteRepository and implement every abstract method.
Who:   Called by PasteService; constructed by build_repository() at startup.

Contract:
    - Uniqueness of `id` is enforced by the storage engine itself (primary key
      or unique index). insert() never pre-checks for an existing id.
    - A rejected duplicate id raises DuplicatePasteIdError and nothing else does.
    - Every other driver failure is wrapped in StorageError.
    - Returned datetimes are timezone-aware UTC.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from freepaste.schemas.paste import PasteRecord, PasteSummary


class PasteRepository(ABC):
    """
    Persistence adapter for Paste records.

    Lifecycle:
        connect() is awaited once during application startup and close()
        once during shutdown. Operations between the two are independent and
        safe to run concurrently.
    """

    #: Short backend name reported by /health
    backend_name: str = "unknown"

    @abstractmethod
    async def connect(self) -> None:
        """Open connections and ensure the schema or indexes exist."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release all connections held by the adapter."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """
        Lightweight connectivity check.

        Returns: True if the backing store answered, False otherwise. Never raises.
        """
        ...

    @abstractmethod
    async def find_by_id(self, paste_id: str) -> Optional[PasteRecord]:
        """
        Look up one paste by its public id.

        Returns:
            The record, or None when no paste has this id.

        Raises:
            StorageError: The query could not be executed.
        """
        ...

    @abstractmethod
    async def insert(self, record: PasteRecord) -> PasteRecord:
        """
        Store a new paste.

        Raises:
            DuplicatePasteIdError: The id is already taken (storage constraint).
            StorageError: Any other write failure.
        """
        ...

    @abstractmethod
    async def update_content(self, paste_id: str, title: str, content: str) -> None:
        """
        Overwrite title and content of an existing paste. Other fields are untouched.

        Raises:
            NotFoundError: No paste has this id.
            StorageError: The update could not be executed.
        """
        ...

    @abstractmethod
    async def list_by_owner_token(self, token: str) -> List[PasteSummary]:
        """
        List pastes created with `token`, newest first.

        Raises:
            StorageError: The query could not be executed.
        """
        ...


def as_utc(value: datetime) -> datetime:
    """
    Normalize a datetime read from storage to timezone-aware UTC.

    SQLite and tz-naive drivers hand back naive datetimes; every value this
    application writes is UTC, so naive values are tagged rather than shifted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
