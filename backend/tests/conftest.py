"""
CaseDesk Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession for service unit tests (no DB)
    ├── database: Real Database handle on in-memory SQLite (aiosqlite)
    ├── db_session: AsyncSession bound to `database`
    ├── test_client: HTTPX AsyncClient talking to an app wired to `database`
    └── sample_case_payload: Valid camelCase body for POST /api/cases
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["CORS_ORIGINS"] = "http://localhost:3000"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import Database  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Mocked Persistence
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_case(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = case
            result = await case_service.get_case(mock_db_session, str(case.id))
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Real (in-memory) Persistence
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """A fresh in-memory SQLite store with all tables created."""
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient routed straight into the ASGI app (no server).

    The app is given the in-memory Database explicitly, so the lifespan
    never needs to run.
    """
    from app.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_case_payload():
    return {
        "caseNumber": "CS-1001",
        "subject": "Payroll run failed",
        "description": "Direct deposit batch rejected by the bank on Friday.",
        "department": "Payroll",
        "contactName": "Dana Reyes",
        "businessName": "Acme Bakery",
        "coid": "C-42",
        "mid": "M-7",
        "customFields": {"priority": "high"},
    }
