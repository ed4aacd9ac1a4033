"""
Pytest configuration and fixtures for the test suite.

This module provides shared fixtures for unit and integration tests.
"""

import os
from typing import Any, AsyncGenerator, Dict, List, Sequence

import pytest
import pytest_asyncio
from faker import Faker
from httpx import ASGITransport, AsyncClient

# Set test environment before importing app modules
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_TO_FILE", "false")

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

fake = Faker()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (API)")
    config.addinivalue_line("markers", "db: Database tests")
    config.addinivalue_line("markers", "api: API endpoint tests")


# =============================================================================
# Test Data Generators
# =============================================================================

@pytest.fixture
def course_data() -> Dict[str, Any]:
    """Generate random course data in the public (camelCase) shape."""
    return {
        "courseCode": fake.unique.lexify("????", letters="ABCDEFGHIJKLMNOPQRSTUVWXYZ"),
        "courseName": fake.catch_phrase()[:100],
    }


def make_student_payload(course_code: str, **overrides: Any) -> Dict[str, Any]:
    """Valid student creation body for the given course."""
    payload = {
        "studentNumber": f"{course_code}{fake.unique.numerify('#####')}",
        "mykadNumber": f"0{fake.random_int(1, 9)}{fake.random_int(1, 12):02d}"
        f"{fake.random_int(1, 28):02d}{fake.numerify('######')}",
        "email": fake.unique.email(),
        "studentName": fake.name()[:100],
        "address": fake.address()[:255],
        "gender": fake.random_element(["Male", "Female"]),
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def student_payload():
    """Factory for valid student creation bodies."""
    return make_student_payload


# =============================================================================
# Query Source Fixtures
# =============================================================================

class FakeQuerySource:
    """In-memory query source that answers count and window queries."""

    def __init__(self, rows: Sequence[Dict[str, Any]]):
        self.rows = list(rows)
        self.calls: List[tuple] = []

    async def execute(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        self.calls.append((query, list(params)))
        if query.startswith("SELECT COUNT(*)"):
            return [{"total": len(self.rows)}]
        limit, offset = params[-2], params[-1]
        return self.rows[offset:offset + limit]


class FailingQuerySource:
    """Query source whose every execution raises ``error``."""

    def __init__(self, error: Exception):
        self.error = error
        self.calls = 0

    async def execute(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        self.calls += 1
        raise self.error


@pytest.fixture
def fake_rows():
    """Factory for ``n`` numbered rows."""

    def build(count: int) -> List[Dict[str, Any]]:
        return [{"course_id": i + 1, "course_code": f"C{i + 1}"} for i in range(count)]

    return build


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def database():
    """Fresh in-memory database with the schema created."""
    from monash_api.core.db_client import DatabaseManager

    manager = DatabaseManager(TEST_DATABASE_URL)
    await manager.create_tables()
    yield manager
    await manager.close()


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(database):
    """Create a test FastAPI application bound to the test database."""
    # Import here to ensure test environment is set
    from monash_api.main import create_app

    return create_app(database=database)


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest_asyncio.fixture
async def tolerant_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Client that returns 500 responses instead of re-raising server errors."""
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def api_prefix() -> str:
    from monash_api.core.config import settings

    return settings.API_V1_STR
