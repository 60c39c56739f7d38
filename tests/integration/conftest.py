"""Fixtures wiring the API to an in-memory database for integration tests."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from domain.services.credential_service import CredentialService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from tests.conftest import FakeClock
from tests.unit.conftest import FakeEmailDispatcher


@dataclass
class Gatekeeper:
    """Handles on everything a test needs besides the HTTP client."""

    client: AsyncClient
    clock: FakeClock
    dispatcher: FakeEmailDispatcher
    session_factory: async_sessionmaker[AsyncSession]
    credentials: CredentialService
    strict_email_match: bool = True

    def last_invitation_token(self) -> str:
        tokens = [args[3] for operation, args in self.dispatcher.sent if operation == "invitation"]
        assert tokens, "no invitation email was sent"
        return tokens[-1]

    def last_code(self) -> str:
        codes = [
            args[2] for operation, args in self.dispatcher.sent if operation == "verification_code"
        ]
        assert codes, "no verification code was sent"
        return codes[-1]


@pytest.fixture
async def gatekeeper(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
) -> AsyncGenerator[Gatekeeper, None]:
    """Create a test client with every service bound to the test database."""
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import (
        get_invitation_service,
        get_registration_service,
        get_verification_service,
    )
    from domain.services.invitation_service import InvitationService
    from domain.services.notification_service import NotificationService
    from domain.services.registration_service import RegistrationService
    from domain.services.verification_service import VerificationService
    from infrastructure.auth.password_hasher import BcryptPasswordHasher
    from infrastructure.database.session import get_async_session
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    app = create_app()

    # Wall-clock start so lazily computed statuses in responses agree with the services
    clock = FakeClock(datetime.utcnow().replace(microsecond=0))
    dispatcher = FakeEmailDispatcher()

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    notifications = NotificationService(test_uow_factory)
    invitations = InvitationService(
        test_uow_factory, dispatcher, notification_service=notifications, clock=clock
    )

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        gk = Gatekeeper(
            client=c,
            clock=clock,
            dispatcher=dispatcher,
            session_factory=session_factory,
            credentials=CredentialService(auth_provider, BcryptPasswordHasher(rounds=4)),
        )

        app.dependency_overrides[get_auth_provider] = lambda: auth_provider
        app.dependency_overrides[get_async_session] = override_get_async_session
        app.dependency_overrides[get_invitation_service] = lambda: invitations
        app.dependency_overrides[get_registration_service] = lambda: RegistrationService(
            test_uow_factory,
            invitation_service=invitations,
            credential_service=gk.credentials,
            email_dispatcher=dispatcher,
            notification_service=notifications,
            clock=clock,
            super_admin_email="root@example.com",
            strict_email_match=gk.strict_email_match,
        )
        app.dependency_overrides[get_verification_service] = lambda: VerificationService(
            test_uow_factory, gk.credentials, dispatcher, clock=clock
        )

        yield gk

    app.dependency_overrides.clear()
