# Repositories package init
"""
FreePaste — Persistence Adapters
==================================

What:  Interchangeable storage backends behind the PasteRepository interface.

Adapter Inventory:
    - PasteRepository (abstract): persistence contract used by PasteService
    - SqlPasteRepository: async SQLAlchemy (SQLite / PostgreSQL)
    - MongoPasteRepository: MongoDB via pymongo's async client

build_repository() picks one from STORAGE_BACKEND. The returned adapter is
not connected yet; the application lifespan awaits connect() and close().
"""

from typing import Optional

from freepaste.config import Settings, settings as default_settings
from freepaste.repositories.base import PasteRepository


def build_repository(config: Optional[Settings] = None) -> PasteRepository:
    config = config or default_settings
    if config.storage_backend == "mongo":
        from freepaste.repositories.mongo import MongoPasteRepository
        return MongoPasteRepository(config)

    from freepaste.repositories.sql import SqlPasteRepository
    return SqlPasteRepository(config)
