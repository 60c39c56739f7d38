"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from api.dependencies.auth import get_auth_provider
from domain.services.credential_service import CredentialService
from domain.services.invitation_service import InvitationService
from domain.services.notification_service import NotificationService
from domain.services.registration_service import RegistrationService
from domain.services.verification_service import VerificationService
from infrastructure.auth.password_hasher import BcryptPasswordHasher
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.email.resend_dispatcher import ResendEmailDispatcher


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_email_dispatcher() -> ResendEmailDispatcher:
    """Get Email dispatcher instance."""
    return ResendEmailDispatcher()


@lru_cache
def get_notification_service() -> NotificationService:
    """Get Notification service instance."""
    return NotificationService(get_uow_factory())


@lru_cache
def get_credential_service() -> CredentialService:
    """Get Credential service instance."""
    return CredentialService(get_auth_provider(), BcryptPasswordHasher())


@lru_cache
def get_invitation_service() -> InvitationService:
    """Get Invitation service instance."""
    return InvitationService(
        get_uow_factory(),
        get_email_dispatcher(),
        notification_service=get_notification_service(),
    )


@lru_cache
def get_registration_service() -> RegistrationService:
    """Get Registration service instance."""
    return RegistrationService(
        get_uow_factory(),
        invitation_service=get_invitation_service(),
        credential_service=get_credential_service(),
        email_dispatcher=get_email_dispatcher(),
        notification_service=get_notification_service(),
    )


@lru_cache
def get_verification_service() -> VerificationService:
    """Get Verification service instance."""
    return VerificationService(
        get_uow_factory(),
        credential_service=get_credential_service(),
        email_dispatcher=get_email_dispatcher(),
    )
