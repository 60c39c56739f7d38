"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.role import Role
from infrastructure.auth.provider import AuthenticatedPrincipal


class FakeUnitOfWork:
    """Fake Unit of Work with all 5 repository mocks for unit testing."""

    def __init__(self) -> None:
        self.invitations = AsyncMock()
        self.users = AsyncMock()
        self.contacts = AsyncMock()
        self.verification_codes = AsyncMock()
        self.notifications = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, exc_type: Any, *args: Any) -> None:
        if exc_type:
            self.rolled_back = True


class FakeEmailDispatcher:
    """Records every email instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_with: Exception | None = None

    async def _record(self, operation: str, *args: Any) -> None:
        if self.fail_with:
            raise self.fail_with
        self.sent.append((operation, args))

    async def send_invitation_email(self, email, name, role, token, message=None):  # type: ignore[no-untyped-def]
        await self._record("invitation", email, name, role, token, message)

    async def send_registration_request_acknowledgement(self, email, name):  # type: ignore[no-untyped-def]
        await self._record("acknowledgement", email, name)

    async def notify_support_about_registration_attempt(self, email, name):  # type: ignore[no-untyped-def]
        await self._record("support", email, name)

    async def send_verification_code(self, email, name, code, type):  # type: ignore[no-untyped-def]
        await self._record("verification_code", email, name, code, type)

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.sent]


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def dispatcher() -> FakeEmailDispatcher:
    return FakeEmailDispatcher()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()


@pytest.fixture
def admin(user_id: UUID) -> AuthenticatedPrincipal:
    """An admin-tier caller."""
    return AuthenticatedPrincipal(user_id=user_id, email="admin@example.com", role=Role.ADMIN)


@pytest.fixture
def customer() -> AuthenticatedPrincipal:
    """A caller with no admin capabilities."""
    return AuthenticatedPrincipal(user_id=uuid4(), email="c@example.com", role=Role.CUSTOMER)
