"""
Test configuration for pytest
"""

import os

# Test environment variables; must be set before salon_os is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["ROOT_DOMAIN"] = "app.example"
os.environ["ENCRYPTION_KEY"] = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
os.environ["ENCRYPTION_IV"] = "0f0e0d0c0b0a09080706050403020100"
os.environ["BLIND_INDEX_SECRET"] = "test-blind-index-secret"
os.environ["PLATFORM_API_KEY"] = "test-platform-key"

import uuid
from typing import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.requests import Request

import salon_os.models  # noqa: F401
from salon_os.core.auth import create_access_token, hash_password
from salon_os.core.config import get_settings
from salon_os.core.database import get_session
from salon_os.core.day_closing import ClosingDateCache, DayClosingGuard
from salon_os.core.permissions import get_permissions_for_role
from salon_os.core.tenancy import VerifiedTenant, require_tenant
from salon_os.main import app
from salon_os.models.tenant import Tenant
from salon_os.models.user import User, UserRole
from salon_os.services.day_closing import SqlClosingLedger, get_day_closing_guard

settings = get_settings()

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture
async def engine():
    """Fresh in-memory database per test"""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Database session for arranging and checking test data"""
    async with session_maker() as session:
        yield session


@pytest.fixture
def guard(session_maker) -> DayClosingGuard:
    return DayClosingGuard(SqlClosingLedger(session_factory=session_maker), ClosingDateCache())


@pytest.fixture
async def client(session_maker, guard) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the glamour salon's host"""
    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_day_closing_guard] = lambda: guard
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://glamour.app.example") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _create_salon(session: AsyncSession, name: str, subdomain: str, role: UserRole = UserRole.ADMIN):
    tenant = Tenant(name=name, subdomain=subdomain)
    session.add(tenant)
    await session.flush()
    user = User(
        tenant_id=tenant.id,
        email=f"owner@{subdomain}-salon.com",
        name=f"{name} Owner",
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(tenant)
    await session.refresh(user)
    return tenant, user


@pytest.fixture
async def glamour(db):
    """Tenant "glamour" and its admin"""
    return await _create_salon(db, "Glamour Studio", "glamour")


@pytest.fixture
async def other_salon(db):
    """A second tenant used to check isolation"""
    return await _create_salon(db, "Other Salon", "other-salon")


def _token_for(tenant: Tenant, user: User, role: str = None) -> str:
    role = role or user.role.value
    return create_access_token(
        user_id=user.id,
        tenant_id=tenant.id,
        subdomain=tenant.subdomain,
        role=role,
        permissions=[p.value for p in get_permissions_for_role(role)],
    )


def _auth_headers(tenant: Tenant, user: User, role: str = None) -> dict:
    return {"Authorization": f"Bearer {_token_for(tenant, user, role)}"}


@pytest.fixture
def token_for():
    """Session token for a user, with the permissions of its role (or of ``role``)"""
    return _token_for


@pytest.fixture
def auth_headers():
    return _auth_headers


@pytest.fixture
def make_verified_tenant() -> Callable[[uuid.UUID], VerifiedTenant]:
    """Issue a VerifiedTenant the way a request would, for service-level tests"""
    def _make(tenant_id: uuid.UUID) -> VerifiedTenant:
        scope = {
            "type": "http",
            "method": "GET",
            "path": "/",
            "headers": [(settings.TENANT_HEADER.encode("latin-1"), str(tenant_id).encode("latin-1"))],
            "state": {},
        }
        return require_tenant(Request(scope))
    return _make


@pytest.fixture
def password() -> str:
    """Plain-text password of every user created by the salon fixtures"""
    return TEST_PASSWORD
