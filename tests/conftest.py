import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Load environment variables from .env file
load_dotenv()

# Test database URL - MUST be different from production.
# Defaults to a throwaway SQLite file so the suite runs without a server.
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./carelink_test.db")

os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("LOG_FORMAT", "console")

from app.core.exceptions import AppException  # noqa: E402
from app.core.redis_client import CacheManager  # noqa: E402
from app.database import get_db  # noqa: E402
from app.dependencies import get_cache_manager  # noqa: E402
from app.main import app  # noqa: E402
from app.models import all_metadata  # noqa: E402
from app.models.appointments import appointments  # noqa: E402
from app.models.doctors import doctors  # noqa: E402

metadata = all_metadata()

# Ensure we're using asyncpg driver for async operations
if TEST_DATABASE_URL.startswith("postgresql://"):
    TEST_DATABASE_URL = TEST_DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")

# Use NullPool to avoid event loop issues between tests
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,  # Set to True for SQL debugging
    poolclass=NullPool,
)

# Create test session factory
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

FIXED_NOW = datetime(2026, 1, 15, 9, 30, tzinfo=UTC)


def fixed_clock() -> datetime:
    """Deterministic clock for statistics timestamps."""
    return FIXED_NOW


class RecordingReporter:
    """Error reporter that keeps every report for assertions."""

    def __init__(self) -> None:
        self.reports: list[dict[str, Any]] = []

    def report(
        self,
        event: str,
        error: AppException,
        cause: BaseException | None = None,
        **context: Any,
    ) -> None:
        self.reports.append({"event": event, "error": error, "cause": cause, **context})


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    # Drop tables after test
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)


@pytest_asyncio.fixture
async def second_session(db_session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Independent session on the same database, for interleaved writers."""
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
def session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return TestSessionLocal


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client with no Redis behind it."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    def override_get_cache_manager() -> CacheManager | None:
        return None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache_manager] = override_get_cache_manager

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def reporter() -> RecordingReporter:
    """Collects hook failure reports."""
    return RecordingReporter()


@pytest.fixture
def sample_doctor_data() -> dict:
    """Sample doctor profile payload."""
    return {
        "user_id": str(uuid4()),
        "gender": "female",
        "specialization": "Cardiology",
        "qualifications": "MBBS, MD (Cardiology)",
        "experience_years": 10,
        "city": "Pune",
        "address": "12 MG Road",
        "consultation_fee": 500,
        "availability_slots": [
            {"day": "Monday", "start_time": "10:00", "end_time": "13:00"},
        ],
    }


@pytest.fixture
async def test_doctor(db_session: AsyncSession) -> dict:
    """Insert a doctor with zeroed statistics."""
    doctor_id = uuid4()
    values = {
        "id": doctor_id,
        "user_id": uuid4(),
        "gender": "male",
        "specialization": "Dermatology",
        "qualifications": "MBBS, DVD",
        "experience_years": 7,
        "city": "Mumbai",
        "consultation_fee": Decimal("500.00"),
    }
    await db_session.execute(insert(doctors).values(**values))
    await db_session.commit()
    return values


@pytest.fixture
async def test_appointment(db_session: AsyncSession, test_doctor: dict) -> dict:
    """Insert an appointment with the doctor charging 500."""
    appointment_id = uuid4()
    values = {
        "id": appointment_id,
        "patient_id": uuid4(),
        "doctor_id": test_doctor["id"],
        "appointment_at": FIXED_NOW,
        "time_slot": "10:00 AM - 10:30 AM",
        "reason_for_visit": "Skin rash",
        "consultation_fee": Decimal("500.00"),
    }
    await db_session.execute(insert(appointments).values(**values))
    await db_session.commit()
    return values


@pytest.fixture
def clock():
    """Clock that always returns FIXED_NOW."""
    return fixed_clock


@pytest.fixture
def fetch_doctor(db_session: AsyncSession):
    """Read a doctor row straight from the table."""

    async def _fetch(doctor_id):
        result = await db_session.execute(select(doctors).where(doctors.c.id == doctor_id))
        return result.fetchone()

    return _fetch


@pytest.fixture
def fixed_now() -> datetime:
    """The instant every statistics write is stamped with under ``clock``."""
    return FIXED_NOW
