"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.invitation_repository import IInvitationRepository
from domain.repositories.notification_repository import INotificationRepository
from domain.repositories.user_repository import IContactRepository, IUserRepository
from domain.repositories.verification_repository import IVerificationCodeRepository


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    invitations: IInvitationRepository
    users: IUserRepository
    contacts: IContactRepository
    verification_codes: IVerificationCodeRepository
    notifications: INotificationRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
