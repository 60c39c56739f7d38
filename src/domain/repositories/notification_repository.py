"""Notification repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.notification import Notification, NotificationRecipient


class INotificationRepository(Protocol):
    """Repository interface for admin notifications."""

    async def create(self, notification: Notification) -> Notification:
        """Create a notification event."""
        ...

    async def create_recipients_batch(self, recipients: list[NotificationRecipient]) -> None:
        """Fan a notification out to its recipients."""
        ...

    async def get_for_recipient(self, recipient_id: UUID, limit: int = 50) -> list[Notification]:
        """Notifications delivered to a user, newest first."""
        ...
