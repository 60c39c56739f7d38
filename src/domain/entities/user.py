"""User and contact domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from domain.entities.role import Role


@dataclass
class Contact:
    """Shared identity anchor. May exist before any user is attached."""

    id: UUID = field(default_factory=uuid4)
    emails: list[str] = field(default_factory=list)
    phones: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class User:
    """Domain entity for an account."""

    email: str
    password_hash: str
    role: Role
    contact_id: UUID
    id: UUID = field(default_factory=uuid4)
    name: str | None = None
    email_verified: bool = False
    is_two_factor_enabled: bool = False
    profile_completed: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at
