"""SQLAlchemy implementation of Invitation repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.invitation import Invitation, InvitationStatus
from domain.entities.role import Role
from infrastructure.database.models import InvitationModel


class SQLAlchemyInvitationRepository:
    """SQLAlchemy implementation of IInvitationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        model = self._to_model(invitation)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_by_id(self, id: UUID) -> Invitation | None:
        """Get an invitation by its primary key."""
        model = await self._session.get(InvitationModel, id)
        return self._to_entity(model) if model else None

    async def get_by_token_hash(self, token_hash: str) -> Invitation | None:
        """Get an invitation by its hashed token."""
        stmt = select(InvitationModel).where(InvitationModel.token_hash == token_hash)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_all(self) -> list[Invitation]:
        """Get all invitations, newest first."""
        stmt = select(InvitationModel).order_by(InvitationModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_pending_for_email(self, email: str, now: datetime) -> Invitation | None:
        """Get the pending, non-expired invitation for an email address."""
        stmt = select(InvitationModel).where(
            InvitationModel.email == email,
            InvitationModel.status == InvitationStatus.PENDING.value,
            InvitationModel.expires_at > now,
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    async def accept(self, token_hash: str, now: datetime) -> Invitation | None:
        """Atomically move the pending, unexpired invitation for ``token_hash`` to accepted."""
        stmt = (
            update(InvitationModel)
            .where(
                InvitationModel.token_hash == token_hash,
                InvitationModel.status == InvitationStatus.PENDING.value,
                InvitationModel.expires_at > now,
            )
            .values(status=InvitationStatus.ACCEPTED.value, accepted_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None
        return await self._fetch_fresh(InvitationModel.token_hash == token_hash)

    async def revoke(self, id: UUID) -> Invitation | None:
        """Atomically move a pending invitation to revoked."""
        stmt = (
            update(InvitationModel)
            .where(
                InvitationModel.id == id,
                InvitationModel.status == InvitationStatus.PENDING.value,
            )
            .values(status=InvitationStatus.REVOKED.value)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None
        return await self._fetch_fresh(InvitationModel.id == id)

    async def update(self, invitation: Invitation) -> Invitation:
        """Persist editable fields of a pending invitation."""
        model = await self._session.get(InvitationModel, invitation.id)
        if not model:
            raise ValueError(f"Invitation {invitation.id} not found")

        model.email = invitation.email
        model.name = invitation.name
        model.role = invitation.role.value
        model.message = invitation.message
        model.token_hash = invitation.token_hash
        model.expires_at = invitation.expires_at

        await self._session.flush()
        return self._to_entity(model)

    async def expire_stale_for_email(self, email: str, now: datetime) -> int:
        """Mark pending-but-expired invitations for an email as expired."""
        stmt = (
            update(InvitationModel)
            .where(
                InvitationModel.email == email,
                InvitationModel.status == InvitationStatus.PENDING.value,
                InvitationModel.expires_at <= now,
            )
            .values(status=InvitationStatus.EXPIRED.value)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    async def delete(self, id: UUID) -> bool:
        """Delete an invitation."""
        model = await self._session.get(InvitationModel, id)
        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def _fetch_fresh(self, *criteria) -> Invitation | None:  # type: ignore[no-untyped-def]
        stmt = (
            select(InvitationModel)
            .where(*criteria)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    def _to_entity(self, model: InvitationModel) -> Invitation:
        """Convert ORM model to domain entity."""
        return Invitation(
            id=model.id,
            email=model.email,
            name=model.name,
            role=Role(model.role),
            token_hash=model.token_hash,
            status=InvitationStatus(model.status),
            message=model.message,
            sender_id=model.sender_id,
            created_at=model.created_at,
            expires_at=model.expires_at,
            accepted_at=model.accepted_at,
        )

    def _to_model(self, entity: Invitation) -> InvitationModel:
        """Convert domain entity to ORM model."""
        return InvitationModel(
            id=entity.id,
            email=entity.email,
            name=entity.name,
            role=entity.role.value,
            token_hash=entity.token_hash,
            status=entity.status.value,
            message=entity.message,
            sender_id=entity.sender_id,
            created_at=entity.created_at,
            expires_at=entity.expires_at,
            accepted_at=entity.accepted_at,
        )
