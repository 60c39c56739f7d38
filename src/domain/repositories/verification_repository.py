"""Verification code repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.verification import VerificationCode, VerificationType


class IVerificationCodeRepository(Protocol):
    """Repository interface for VerificationCode entities."""

    async def create(self, code: VerificationCode) -> VerificationCode:
        """Store a newly issued code."""
        ...

    async def consume(
        self,
        user_id: UUID,
        code: str,
        type: VerificationType,
        now: datetime,
        max_failed_attempts: int,
    ) -> VerificationCode | None:
        """Atomically mark a matching live code as used.

        A live code is unused, unexpired and below the failed-attempt limit.
        Returns None when nothing matched.
        """
        ...

    async def was_used(self, user_id: UUID, code: str, type: VerificationType) -> bool:
        """Whether ``code`` was already consumed or superseded for this user."""
        ...

    async def supersede_live(self, user_id: UUID, type: VerificationType, now: datetime) -> int:
        """Retire every live code of ``type``. Returns how many were retired."""
        ...

    async def record_failed_attempt(
        self, user_id: UUID, type: VerificationType, now: datetime
    ) -> None:
        """Increment failed_attempts on every live code of ``type``."""
        ...

    async def count_issued_since(
        self, user_id: UUID, type: VerificationType, since: datetime
    ) -> int:
        """Number of codes issued to a user for ``type`` since ``since``."""
        ...
