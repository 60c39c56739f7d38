"""Verification code domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class VerificationType(StrEnum):
    """Purpose a verification code was issued for."""

    EMAIL_VERIFICATION = "EMAIL_VERIFICATION"
    LOGIN = "LOGIN"


@dataclass
class VerificationCode:
    """Short-lived, single-use code bound to a user and a purpose."""

    user_id: UUID
    code: str
    type: VerificationType
    expires_at: datetime
    id: UUID = field(default_factory=uuid4)
    used_at: datetime | None = None
    failed_attempts: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_consumed(self) -> bool:
        return self.used_at is not None
