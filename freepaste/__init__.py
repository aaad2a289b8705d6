"""
FreePaste — Application Package Initializer
=============================================

What: Marks the `freepaste` directory as a Python package.
Who:  Imported by uvicorn (`freepaste.main:app`), Alembic, and pytest.

Architecture Note:
    The backend follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, id retry, ownership
    ├─────────────────────────────────────┤
    │     Repositories (Persistence)      │  ← SQL or Mongo adapter
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    The PasteService is written once against the PasteRepository interface;
    the storage backend is chosen by configuration at startup.
"""

__version__ = "1.0.0"
