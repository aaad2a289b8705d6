"""
FreePaste — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_settings: Settings pointing at a throwaway SQLite file
    ├── mock_repository: AsyncMock standing in for a PasteRepository
    ├── sample_record: a stored paste as repositories return it
    ├── sqlite_repository: connected SqlPasteRepository on tmp_path
    └── test_client: HTTPX AsyncClient driving the app with its lifespan
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any app imports
os.environ["ENVIRONMENT"] = "test"
os.environ["STORAGE_BACKEND"] = "sql"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./freepaste-test.db"
os.environ["PUBLIC_BASE_URL"] = ""
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from freepaste.config import Settings  # noqa: E402
from freepaste.repositories.base import PasteRepository  # noqa: E402
from freepaste.repositories.sql import SqlPasteRepository  # noqa: E402
from freepaste.schemas.paste import PasteRecord  # noqa: E402

OWNER_TOKEN = "a" * 64


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    """Settings bound to a SQLite file that disappears with tmp_path."""
    return Settings(
        environment="test",
        storage_backend="sql",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'pastes.db'}",
        log_level="WARNING",
    )


@pytest.fixture
def mock_repository():
    """
    Provides a mock PasteRepository.

    Usage:
        async def test_get(mock_repository):
            mock_repository.find_by_id.return_value = record
            result = await PasteService(mock_repository).get_paste("abcdefghij")
    """
    repository = AsyncMock(spec=PasteRepository)
    repository.backend_name = "mock"
    repository.find_by_id.return_value = None
    repository.list_by_owner_token.return_value = []
    repository.ping.return_value = True
    return repository


@pytest.fixture
def sample_record():
    return PasteRecord(
        id="aZ3kP0qLm9",
        title="Notes",
        content="hello world",
        owner_token=OWNER_TOKEN,
        created_at=datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc),
    )


@pytest_asyncio.fixture
async def sqlite_repository(test_settings):
    """A connected SQL adapter with the schema created; closed after the test."""
    repository = SqlPasteRepository(test_settings)
    await repository.connect()
    yield repository
    await repository.close()


@pytest_asyncio.fixture
async def test_client(test_settings):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport does not send lifespan events, so the app's lifespan is
    entered explicitly; that is what connects the repository and attaches
    PasteService to app.state.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from freepaste.main import create_app

    app = create_app(repository=SqlPasteRepository(test_settings))
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
