"""Invitation repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.invitation import Invitation


class IInvitationRepository(Protocol):
    """Repository interface for Invitation entities."""

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation.

        Raises IntegrityError when another pending invitation already holds
        the email or the token hash.
        """
        ...

    async def get_by_id(self, id: UUID) -> Invitation | None:
        """Get an invitation by its primary key."""
        ...

    async def get_by_token_hash(self, token_hash: str) -> Invitation | None:
        """Get an invitation by its hashed token."""
        ...

    async def list_all(self) -> list[Invitation]:
        """Get all invitations, newest first."""
        ...

    async def get_pending_for_email(self, email: str, now: datetime) -> Invitation | None:
        """Get the pending, non-expired invitation for an email address."""
        ...

    async def accept(self, token_hash: str, now: datetime) -> Invitation | None:
        """Atomically move the pending, unexpired invitation for ``token_hash`` to accepted.

        Returns None when no row matched the guard.
        """
        ...

    async def revoke(self, id: UUID) -> Invitation | None:
        """Atomically move a pending invitation to revoked. None if not pending."""
        ...

    async def update(self, invitation: Invitation) -> Invitation:
        """Persist editable fields (email, name, role, message, token_hash, expires_at)."""
        ...

    async def expire_stale_for_email(self, email: str, now: datetime) -> int:
        """Mark pending-but-expired invitations for an email as expired."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete an invitation."""
        ...
