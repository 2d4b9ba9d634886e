"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (auth, transactions, profiles, dashboard).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.

Seed helpers commit: the HTTP app and the record store open their own
sessions on the shared in-memory connection, and a session returning the
connection to the pool rolls back anything left uncommitted.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import hashlib
import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from barbertrack.auth.service import hash_password
from barbertrack.common.constants import UserRole
from barbertrack.config import settings
from barbertrack.database import Base, get_db
from barbertrack.main import create_app
from barbertrack.store.record_store import SqlRecordStore, get_record_store

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import barbertrack.auth.models  # noqa: F401
import barbertrack.common.audit  # noqa: F401
import barbertrack.profiles.models  # noqa: F401
import barbertrack.service_types.models  # noqa: F401
import barbertrack.transactions.models  # noqa: F401

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

DEFAULT_PASSWORD = "clippers-and-combs"
_DEFAULT_PASSWORD_HASH = hash_password(DEFAULT_PASSWORD)


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
    from barbertrack.common.rate_limit import limiter

    limiter.reset()
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


def _override_get_record_store() -> SqlRecordStore:
    return SqlRecordStore(TestSessionFactory)


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependencies overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_record_store] = _override_get_record_store
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


@pytest.fixture
def store() -> SqlRecordStore:
    return SqlRecordStore(TestSessionFactory)


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_profile(
    *,
    email: Optional[str] = None,
    full_name: str = "Test Barber",
    role: UserRole = UserRole.employee,
    shop_name: Optional[str] = None,
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        email=email or f"barber.{uuid.uuid4().hex[:8]}@sharpcuts.io",
        password_hash=_DEFAULT_PASSWORD_HASH,
        full_name=full_name,
        role=role,
        shop_name=shop_name,
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


def _make_service_type(
    *,
    name: str = "Haircut",
    display_order: int = 1,
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        display_order=display_order,
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
    )


def _make_transaction(
    *,
    employee_id: uuid.UUID,
    service_type_id: uuid.UUID,
    performed_at: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> dict:
    now = datetime.now(timezone.utc)
    return dict(
        id=uuid.uuid4(),
        employee_id=employee_id,
        service_type_id=service_type_id,
        performed_at=performed_at or now,
        notes=notes,
        created_at=now,
        updated_at=now,
    )


async def _add(db: AsyncSession, model: type, data: dict) -> dict:
    """Insert one row from a factory dict and commit."""
    db.add(model(**data))
    await db.commit()
    return data


async def _add_all(db: AsyncSession, model: type, rows: list[dict]) -> list[dict]:
    db.add_all([model(**data) for data in rows])
    await db.commit()
    return rows


@pytest.fixture
async def admin(db) -> dict:
    """An active shop administrator."""
    from barbertrack.profiles.models import Profile

    return await _add(
        db,
        Profile,
        _make_profile(
            email="owner@sharpcuts.io",
            full_name="Shop Owner",
            role=UserRole.admin,
            shop_name="Sharp Cuts",
        ),
    )


@pytest.fixture
async def employee(db) -> dict:
    """An active employee."""
    from barbertrack.profiles.models import Profile

    return await _add(
        db, Profile, _make_profile(email="alex@sharpcuts.io", full_name="Alex Barber"),
    )


@pytest.fixture
async def service_types(db) -> dict[str, dict]:
    """The default catalogue, keyed by name."""
    from barbertrack.service_types.models import ServiceType

    rows = [
        _make_service_type(name="Haircut", display_order=1),
        _make_service_type(name="Shave", display_order=2),
        _make_service_type(name="Beard Trim", display_order=3),
        _make_service_type(name="Hair Wash", display_order=4),
    ]
    await _add_all(db, ServiceType, rows)
    return {row["name"]: row for row in rows}


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    profile_id: uuid.UUID,
    role: UserRole = UserRole.employee,
    expired: bool = False,
) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload = {
        "sub": str(profile_id),
        "role": role.value,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


async def _persist_session(db: AsyncSession, profile_id: uuid.UUID, token: str) -> None:
    """Create a UserSession row matching the token so auth passes."""
    from barbertrack.auth.models import UserSession

    db.add(
        UserSession(
            id=uuid.uuid4(),
            profile_id=profile_id,
            token_hash=hashlib.sha256(token.encode()).hexdigest(),
            expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
            is_revoked=False,
            created_at=datetime.now(timezone.utc),
        )
    )
    await db.commit()


async def _auth_headers(db: AsyncSession, profile: dict) -> dict[str, str]:
    """Bearer headers for *profile* with a valid session persisted in the DB."""
    token = create_access_token(profile["id"], role=profile["role"])
    await _persist_session(db, profile["id"], token)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_headers(db, admin) -> dict[str, str]:
    return await _auth_headers(db, admin)


@pytest.fixture
async def employee_headers(db, employee) -> dict[str, str]:
    return await _auth_headers(db, employee)
