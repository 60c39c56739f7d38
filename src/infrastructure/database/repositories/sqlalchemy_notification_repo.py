"""SQLAlchemy implementation of Notification repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.notification import Notification, NotificationRecipient
from infrastructure.database.models import NotificationModel, NotificationRecipientModel


class SQLAlchemyNotificationRepository:
    """SQLAlchemy implementation of INotificationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, notification: Notification) -> Notification:
        """Create a notification event."""
        model = NotificationModel(
            id=notification.id,
            type_name=notification.type_name,
            entity_type=notification.entity_type,
            entity_id=notification.entity_id,
            actor_id=notification.actor_id,
            metadata_=notification.metadata,
            created_at=notification.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def create_recipients_batch(self, recipients: list[NotificationRecipient]) -> None:
        """Fan a notification out to its recipients."""
        self._session.add_all(
            [
                NotificationRecipientModel(
                    id=r.id,
                    notification_id=r.notification_id,
                    recipient_id=r.recipient_id,
                    is_read=r.is_read,
                    read_at=r.read_at,
                )
                for r in recipients
            ]
        )
        await self._session.flush()

    async def get_for_recipient(self, recipient_id: UUID, limit: int = 50) -> list[Notification]:
        """Notifications delivered to a user, newest first."""
        stmt = (
            select(NotificationModel)
            .join(
                NotificationRecipientModel,
                NotificationRecipientModel.notification_id == NotificationModel.id,
            )
            .where(NotificationRecipientModel.recipient_id == recipient_id)
            .order_by(NotificationModel.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    def _to_entity(self, model: NotificationModel) -> Notification:
        """Convert ORM model to domain entity."""
        return Notification(
            id=model.id,
            type_name=model.type_name,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            actor_id=model.actor_id,
            metadata=model.metadata_,
            created_at=model.created_at,
        )
