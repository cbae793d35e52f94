"""Shared test fixtures — async DB, client, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Configure settings before any import touches pydantic-settings
os.environ.setdefault("APPROVAL_POLICY", "role_matched")
os.environ.setdefault("RATE_LIMIT_DEFAULT", "10000/minute")
os.environ.setdefault("LOG_LEVEL", "warning")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leavegov.common.constants import LeaveStatus, LeaveType
from leavegov.database import Base, get_db
from leavegov.main import create_app

# Import ALL model modules so metadata knows every table
import leavegov.balances.models  # noqa: F401
import leavegov.common.audit  # noqa: F401
import leavegov.directory.models  # noqa: F401
import leavegov.leave.models  # noqa: F401
import leavegov.routing.models  # noqa: F401

from leavegov.directory.models import Employee
from leavegov.leave.models import LeaveRequest

# ── SQLite compat: compile PG-specific types to TEXT ────────────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from leavegov.common.rate_limit import limiter

    storage = getattr(limiter, "_storage", None)
    if storage is not None:
        storage.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Date helpers ────────────────────────────────────────────────────

def current_year_monday() -> date:
    """First Monday of February this year — safely inside the current leave year."""
    d = date(date.today().year, 2, 1)
    return d + timedelta(days=(7 - d.weekday()) % 7)


def employed_years_ago(years: float) -> date:
    return date.today() - timedelta(days=round(years * 365.25))


# ── Model factories ─────────────────────────────────────────────────

_created_seq = 0


def _make_employee(
    *,
    name: str = "Test User",
    email: Optional[str] = None,
    department: Optional[str] = "Engineering",
    designation: Optional[str] = "Software Engineer",
    employment_date: Optional[date] = None,
    is_active: bool = True,
) -> dict:
    # Strictly increasing created_at keeps directory ordering deterministic
    global _created_seq
    _created_seq += 1
    return dict(
        id=uuid.uuid4(),
        name=name,
        email=email or f"{uuid.uuid4().hex[:8]}@example.com",
        department=department,
        designation=designation,
        employment_date=employment_date or employed_years_ago(2.27),
        is_active=is_active,
        created_at=datetime(2020, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=_created_seq),
    )


def _make_leave_request(
    employee_id: uuid.UUID,
    *,
    leave_type: LeaveType = LeaveType.annual,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: LeaveStatus = LeaveStatus.pending,
    reason: str = "Family trip",
    submitted_at: Optional[datetime] = None,
) -> dict:
    start = start_date or current_year_monday()
    return dict(
        id=uuid.uuid4(),
        employee_id=employee_id,
        leave_type=leave_type,
        start_date=start,
        end_date=end_date or start,
        status=status,
        reason=reason,
        submitted_at=submitted_at or datetime.now(timezone.utc),
    )


async def seed_employee(db: AsyncSession, **kwargs) -> Employee:
    emp = Employee(**_make_employee(**kwargs))
    db.add(emp)
    await db.flush()
    return emp


async def seed_leave_request(
    db: AsyncSession,
    employee_id: uuid.UUID,
    **kwargs,
) -> LeaveRequest:
    req = LeaveRequest(**_make_leave_request(employee_id, **kwargs))
    db.add(req)
    await db.flush()
    return req


@pytest.fixture
async def test_employee(db) -> Employee:
    """An Engineering employee with roughly 2.27 years of service."""
    return await seed_employee(db, name="Asha Rao")
