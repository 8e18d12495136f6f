"""Global test fixtures and utilities for sleep record service tests"""
import pytest
import httpx
from datetime import datetime, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from sleep_api.api.server import create_api_application
from sleep_api.db.memory_store import InMemorySleepStore
from sleep_api.db.store import SleepStore
from sleep_api.models.sleep import SleepRecord
from sleep_api.services.sleep_service import SleepRecordService


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def memory_store():
    """Fresh in-memory store per test"""
    return InMemorySleepStore()


@pytest.fixture
def mock_store():
    """Store double whose methods are AsyncMocks"""
    return AsyncMock(spec=SleepStore)


@pytest.fixture
def sleep_record_row():
    """Row as PostgresSleepStore reads it (dict_row)"""
    created = datetime(2024, 1, 1, 7, 0, 0, tzinfo=timezone.utc)
    return {
        "id": uuid4(),
        "user_id": 1,
        "hours": 8.0,
        "created_at": created,
        "updated_at": created,
    }


@pytest.fixture
def sleep_record_factory():
    """Factory for SleepRecord instances"""
    def _create(user_id=1, hours=8.0, created_at=None):
        created_at = created_at or datetime.now(timezone.utc)
        return SleepRecord(
            id=uuid4(),
            user_id=user_id,
            hours=hours,
            created_at=created_at,
            updated_at=created_at
        )

    return _create


@pytest.fixture
def mock_db_cursor():
    """Mock cursor with standard query results"""
    cursor = AsyncMock()
    cursor.fetchone = AsyncMock(return_value=None)
    cursor.fetchall = AsyncMock(return_value=[])
    cursor.execute = AsyncMock()
    return cursor


@pytest.fixture
def mock_db_connection(mock_db_cursor):
    """Mock connection whose cursor() is an async context manager"""
    cursor_cm = MagicMock()
    cursor_cm.__aenter__.return_value = mock_db_cursor
    cursor_cm.__aexit__.return_value = False

    conn = MagicMock()
    conn.cursor.return_value = cursor_cm
    conn.commit = AsyncMock()
    return conn


@pytest.fixture
def mock_database(mock_db_connection):
    """Mock Database whose connection() yields mock_db_connection"""
    conn_cm = MagicMock()
    conn_cm.__aenter__.return_value = mock_db_connection
    conn_cm.__aexit__.return_value = False

    database = MagicMock()
    database.connection.return_value = conn_cm
    return database


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def sleep_service(memory_store):
    """SleepRecordService over the in-memory store"""
    return SleepRecordService(memory_store)


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def app(memory_store):
    """Application wired to the in-memory store, limiter off"""
    return create_api_application(store=memory_store, rate_limit_enabled=False)


@pytest.fixture
async def api_client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client talking to the app in-process"""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver"
    ) as client:
        yield client


@pytest.fixture
def client_factory():
    """Build a client for an arbitrary app (failing stores, rate limits)"""
    def _create(app) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://testserver"
        )

    return _create
