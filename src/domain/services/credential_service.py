"""Account and session token issuance."""

from datetime import datetime, timedelta
from typing import Protocol

import structlog

from core.config import settings
from domain.entities.role import Capability, Role, has_capability
from domain.entities.user import Contact, User
from domain.repositories.unit_of_work import IUnitOfWork
from infrastructure.auth.provider import AuthenticatedPrincipal, IAuthProvider

logger = structlog.get_logger()


class IPasswordHasher(Protocol):
    """One-way password hashing."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, password_hash: str) -> bool: ...


class CredentialService:
    """Creates accounts and signs the session tokens handed back to them."""

    def __init__(
        self,
        auth_provider: IAuthProvider,
        password_hasher: IPasswordHasher,
        registration_ttl_hours: int | None = None,
        verification_ttl_hours: int | None = None,
    ) -> None:
        self._auth = auth_provider
        self._hasher = password_hasher
        self._registration_ttl = timedelta(
            hours=registration_ttl_hours or settings.registration_token_ttl_hours
        )
        self._verification_ttl = timedelta(
            hours=verification_ttl_hours or settings.verification_token_ttl_hours
        )

    async def create_account(
        self,
        uow: IUnitOfWork,
        email: str,
        password: str,
        name: str | None,
        role: Role,
        now: datetime,
    ) -> User:
        """Create a user (and its contact) inside the caller's transaction.

        An existing contact holding ``email`` with no user attached is reused;
        otherwise a new contact is created for it. The user row is flushed but
        not committed.

        Args:
            uow: The active Unit of Work (caller manages commit).
            email: Normalized account email.
            password: Plain-text password; only its bcrypt hash is stored.
            name: Optional display name.
            role: Role decided by registration; never changed afterwards.
            now: Creation timestamp.

        Returns:
            The persisted User.
        """
        contact = await uow.contacts.get_unattached_by_email(email)
        if contact:
            logger.info("contact_reused", contact_id=str(contact.id))
        else:
            contact = await uow.contacts.create(Contact(emails=[email], created_at=now))

        user = User(
            email=email,
            password_hash=self._hasher.hash(password),
            name=name,
            role=role,
            contact_id=contact.id,
            # Possession of the invitation link, or the reserved address, stands in for verification
            email_verified=True,
            is_two_factor_enabled=False,
            profile_completed=has_capability(role, Capability.SKIP_PROFILE_COMPLETION),
            created_at=now,
            updated_at=now,
        )
        created = await uow.users.create(user)
        logger.info("user_created", user_id=str(created.id), role=role.value)
        return created  # type: ignore[no-any-return]

    def issue_registration_token(self, user: User) -> str:
        """Session token returned right after registration."""
        return self._auth.create_token(self.principal_for(user), self._registration_ttl)

    def issue_verification_token(self, user: User) -> str:
        """Session token returned after a verification code is accepted."""
        return self._auth.create_token(self.principal_for(user), self._verification_ttl)

    @staticmethod
    def principal_for(user: User) -> AuthenticatedPrincipal:
        return AuthenticatedPrincipal(
            user_id=user.id,
            email=user.email,
            role=user.role,
            profile_completed=user.profile_completed,
        )
