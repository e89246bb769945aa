'''
Pytest configuration for the FastAPI application.

This file sets up fixtures for:
1. Forcing the application into TEST_MODE before any code is imported.
2. Providing a fresh in-memory database and session for each test.
3. Providing an async HTTP client bound to the app for endpoint testing.
4. Providing instances of all service classes, pre-injected with the test session
   or with a mocked RecordQueries.
'''

import os

# Set before any application module reads the settings.
os.environ["TEST_MODE"] = "True"
os.environ.setdefault("DATABASE_URL_PROD", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_URL_TEST", "sqlite+aiosqlite:///:memory:")

import pytest
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# --- FastAPI & Testing Imports ---
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.pool import StaticPool

# --- Application Imports ---
from src.irshad_center_backend.main import app
from src.irshad_center_backend.common.config import settings
from src.irshad_center_backend.database.engine import get_db_session
from src.irshad_center_backend.database import models as db_models
from src.irshad_center_backend.database.queries import RecordQueries
from src.irshad_center_backend.services.validation_service import ValidationService
from src.irshad_center_backend.services.duplicate_service import DuplicateService
from src.irshad_center_backend.services.roster_service import RosterService
from src.irshad_center_backend.services.student_service import StudentService

from tests.database import factories


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Override the default 'anyio_backend' fixture.
    1. Forces the backend to 'asyncio' (aiosqlite does not run under trio).
    2. Promotes the scope to 'session' (solves 'ScopeMismatch').
    """
    return "asyncio"


# --- 1. Database Fixtures ---

@pytest.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    A private in-memory SQLite database per test.
    StaticPool keeps the single connection alive so every session sees the same tables.
    """
    assert settings.TEST_MODE is True, \
        "TEST_MODE was not set to True! Check your environment."

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(db_models.Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides a single session for service-level tests and wires the
    factories to it. Nothing is committed; the database dies with the test.
    """
    session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    session = session_factory()
    factories.test_db_session = session
    try:
        yield session
    finally:
        factories.test_db_session = None
        await session.rollback()
        await session.close()


# --- 2. HTTP Client Fixture (For Endpoint Tests) ---

@pytest.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    An AsyncClient talking to the app in-process. `get_db_session` is
    overridden so requests share the test's session, which lets tests seed
    data with the factories and inspect it afterwards.
    """
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


# --- 3. Mock Fixtures ---

@pytest.fixture(scope="function")
def mock_queries() -> RecordQueries:
    """
    A RecordQueries stand-in where every lookup finds nothing.
    Tests configure `return_value` on the lookups they care about.
    """
    mock = MagicMock(spec=RecordQueries)
    mock.get_person = AsyncMock(return_value=None)
    mock.get_program_profile = AsyncMock(return_value=None)
    mock.get_batch = AsyncMock(return_value=None)
    mock.get_teacher = AsyncMock(return_value=None)
    mock.get_teacher_by_person_id = AsyncMock(return_value=None)
    mock.find_person_by_contact = AsyncMock(return_value=None)
    mock.get_person_with_contacts = AsyncMock(return_value=None)
    mock.find_persons_by_name_fragment = AsyncMock(return_value=[])
    mock.find_contact_points_by_values = AsyncMock(return_value=[])
    mock.find_active_teacher_assignment = AsyncMock(return_value=None)
    mock.find_active_guardian_relationship = AsyncMock(return_value=None)
    mock.list_active_guardian_relationships = AsyncMock(return_value=[])
    mock.list_active_dependents_of = AsyncMock(return_value=[])
    mock.find_sibling_relationship = AsyncMock(return_value=None)
    mock.list_active_sibling_relationships = AsyncMock(return_value=[])
    mock.list_related_sibling_ids = AsyncMock(return_value=set())
    mock.get_subscription = AsyncMock(return_value=None)
    mock.list_active_billing_assignments = AsyncMock(return_value=[])
    mock.get_student = AsyncMock(return_value=None)
    mock.list_students_with_subscription = AsyncMock(return_value=[])
    return mock


# --- 4. SERVICE FIXTURES ---

@pytest.fixture(scope="function")
def validation_service_mocked(mock_queries: RecordQueries) -> ValidationService:
    """ValidationService over mocked lookups, for rule-ordering tests."""
    return ValidationService(queries=mock_queries)

@pytest.fixture(scope="function")
def record_queries(db_session: AsyncSession) -> RecordQueries:
    return RecordQueries(db=db_session)

@pytest.fixture(scope="function")
def validation_service(record_queries: RecordQueries) -> ValidationService:
    return ValidationService(queries=record_queries)

@pytest.fixture(scope="function")
def duplicate_service(db_session: AsyncSession, record_queries: RecordQueries) -> DuplicateService:
    return DuplicateService(db=db_session, queries=record_queries)

@pytest.fixture(scope="function")
def roster_service(
    db_session: AsyncSession,
    record_queries: RecordQueries,
    validation_service: ValidationService
) -> RosterService:
    return RosterService(
        db=db_session,
        queries=record_queries,
        validation_service=validation_service
    )

@pytest.fixture(scope="function")
def student_service(record_queries: RecordQueries) -> StudentService:
    return StudentService(queries=record_queries)
