"""User and contact repository protocols."""

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from domain.entities.role import Role
from domain.entities.user import Contact, User


class IUserRepository(Protocol):
    """Repository interface for User entities."""

    async def create(self, user: User) -> User:
        """Create a new user. Raises IntegrityError on duplicate email or contact."""
        ...

    async def get_by_id(self, id: UUID) -> User | None:
        """Get a user by primary key."""
        ...

    async def exists_for_email(self, email: str) -> bool:
        """True if a user owns ``email`` directly or through its contact."""
        ...

    async def mark_email_verified(self, id: UUID) -> None:
        """Set email_verified on a user."""
        ...

    async def get_ids_by_roles(self, roles: Iterable[Role]) -> list[UUID]:
        """IDs of all users holding one of ``roles``."""
        ...


class IContactRepository(Protocol):
    """Repository interface for Contact entities."""

    async def create(self, contact: Contact) -> Contact:
        """Create a contact and its email rows."""
        ...

    async def get_unattached_by_email(self, email: str) -> Contact | None:
        """Contact holding ``email`` that no user is linked to yet."""
        ...
