"""Admin notification service."""

from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import UUID

import structlog

from domain.entities.notification import Notification, NotificationRecipient
from domain.entities.role import Capability, roles_with
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class NotificationService:
    """Fans admin-facing events out to every admin-tier user."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    # --- In-transaction notification creation ---

    async def notify_admins(
        self,
        uow: IUnitOfWork,
        type_name: str,
        entity_type: str,
        entity_id: UUID | None = None,
        actor_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Notification | None:
        """Create an admin notification within an existing UoW transaction.

        Args:
            uow: The active Unit of Work (caller manages commit).
            type_name: The notification type name (use NotificationTypes constants).
            entity_type: The type of entity affected.
            entity_id: The ID of the entity affected, if it was persisted.
            actor_id: The user who performed the action, excluded from recipients.
            metadata: Optional denormalized data (email, role, actor name).

        Returns:
            The created Notification, or None if there is nobody to notify.
        """
        roles = roles_with(Capability.RECEIVE_ADMIN_NOTIFICATIONS)
        recipient_ids = set(await uow.users.get_ids_by_roles(roles))
        if actor_id is not None:
            recipient_ids.discard(actor_id)

        if not recipient_ids:
            logger.debug("admin_notification_skipped", type_name=type_name)
            return None

        created = await uow.notifications.create(
            Notification(
                type_name=type_name,
                entity_type=entity_type,
                entity_id=entity_id,
                actor_id=actor_id,
                metadata=metadata or {},
                created_at=datetime.utcnow(),
            )
        )
        await uow.notifications.create_recipients_batch(
            [
                NotificationRecipient(notification_id=created.id, recipient_id=uid)
                for uid in recipient_ids
            ]
        )
        return created

    # --- Standalone ---

    async def notify_admins_now(
        self,
        type_name: str,
        entity_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> Notification | None:
        """Create and commit an admin notification in its own transaction."""
        async with self._uow_factory() as uow:
            created = await self.notify_admins(uow, type_name, entity_type, metadata=metadata)
            await uow.commit()
            return created

    async def get_for_recipient(self, recipient_id: UUID, limit: int = 50) -> list[Notification]:
        """Notifications delivered to a user, newest first."""
        async with self._uow_factory() as uow:
            return await uow.notifications.get_for_recipient(recipient_id, limit)  # type: ignore[no-any-return]
