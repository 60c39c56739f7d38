"""Invitation domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from uuid import UUID, uuid4

from domain.entities.role import Role


class InvitationStatus(StrEnum):
    """Status of a registration invitation."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    REVOKED = "revoked"


# Default invitation expiry: 24 hours
INVITATION_EXPIRY_HOURS = 24


@dataclass
class Invitation:
    """Domain entity for a registration invitation.

    Only the SHA-256 of the invitation token is stored; the raw token exists
    in the invitation email and nowhere else.
    """

    email: str
    role: Role
    token_hash: str
    id: UUID = field(default_factory=uuid4)
    name: str | None = None
    message: str | None = None
    sender_id: UUID | None = None
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: datetime = field(default_factory=datetime.utcnow)
    expires_at: datetime = field(
        default_factory=lambda: datetime.utcnow() + timedelta(hours=INVITATION_EXPIRY_HOURS)
    )
    accepted_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the invitation has expired, whatever its stored status."""
        return (now or datetime.utcnow()) > self.expires_at

    def is_pending(self, now: datetime | None = None) -> bool:
        """Check if the invitation is still pending and not expired."""
        return self.status == InvitationStatus.PENDING and not self.is_expired(now)

    def effective_status(self, now: datetime | None = None) -> InvitationStatus:
        """Stored status with lazy expiry applied."""
        if self.status == InvitationStatus.PENDING and self.is_expired(now):
            return InvitationStatus.EXPIRED
        return self.status
