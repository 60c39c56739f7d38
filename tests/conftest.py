"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import uuid4

# Test settings must be in place before anything imports core.config
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["SUPER_ADMIN_EMAIL"] = "root@example.com"
os.environ["EMAIL_DEV_MODE"] = "true"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.role import Role
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import AuthenticatedPrincipal
from infrastructure.database.models import Base, ContactEmailModel, ContactModel, UserModel


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_SECRET = "test-secret-key"


class FakeClock:
    """Settable clock handed to services in place of ``datetime.utcnow``."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 3, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        # One shared connection so every session sees the same in-memory database
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(secret_key=TEST_SECRET, algorithm="HS256")


@pytest.fixture
def admin_principal() -> AuthenticatedPrincipal:
    """An admin caller. Persisted by ``admin_user`` when a test needs the row."""
    return AuthenticatedPrincipal(
        user_id=uuid4(),
        email="admin@example.com",
        role=Role.ADMIN,
        profile_completed=True,
    )


@pytest.fixture
def customer_principal() -> AuthenticatedPrincipal:
    return AuthenticatedPrincipal(
        user_id=uuid4(),
        email="customer@example.com",
        role=Role.CUSTOMER,
    )


@pytest.fixture
async def admin_user(
    session_factory: async_sessionmaker[AsyncSession],
    admin_principal: AuthenticatedPrincipal,
) -> AuthenticatedPrincipal:
    """Insert the admin principal as a real user row."""
    async with session_factory() as session:
        contact = ContactModel(
            id=uuid4(),
            phones=[],
            emails=[ContactEmailModel(email=admin_principal.email)],
        )
        session.add(contact)
        session.add(
            UserModel(
                id=admin_principal.user_id,
                email=admin_principal.email,
                password_hash="not-a-real-hash",
                name="Admin",
                role=admin_principal.role.value,
                contact_id=contact.id,
                email_verified=True,
                profile_completed=True,
            )
        )
        await session.commit()
    return admin_principal


def bearer(auth_provider: JWTAuthProvider, principal: AuthenticatedPrincipal) -> dict[str, str]:
    """Authorization headers for a principal."""
    token = auth_provider.create_token(principal, timedelta(hours=1))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no overrides)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
