"""SQLAlchemy implementation of VerificationCode repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.verification import VerificationCode, VerificationType
from infrastructure.database.models import VerificationCodeModel


class SQLAlchemyVerificationCodeRepository:
    """SQLAlchemy implementation of IVerificationCodeRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, code: VerificationCode) -> VerificationCode:
        """Store a newly issued code."""
        model = self._to_model(code)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def consume(
        self,
        user_id: UUID,
        code: str,
        type: VerificationType,
        now: datetime,
        max_failed_attempts: int,
    ) -> VerificationCode | None:
        """Atomically mark a matching live code as used."""
        live = (
            select(VerificationCodeModel.id)
            .where(
                VerificationCodeModel.user_id == user_id,
                VerificationCodeModel.code == code,
                VerificationCodeModel.type == type.value,
                VerificationCodeModel.used_at.is_(None),
                VerificationCodeModel.expires_at > now,
                VerificationCodeModel.failed_attempts < max_failed_attempts,
            )
            .order_by(VerificationCodeModel.created_at.desc())
            .limit(1)
        )
        code_id = (await self._session.execute(live)).scalar_one_or_none()
        if code_id is None:
            return None

        stmt = (
            update(VerificationCodeModel)
            .where(
                VerificationCodeModel.id == code_id,
                # Re-checked here so a concurrent consumer or failure loses the race
                VerificationCodeModel.used_at.is_(None),
                VerificationCodeModel.failed_attempts < max_failed_attempts,
            )
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None

        fetch = (
            select(VerificationCodeModel)
            .where(VerificationCodeModel.id == code_id)
            .execution_options(populate_existing=True)
        )
        model = (await self._session.execute(fetch)).scalar_one()
        return self._to_entity(model)

    async def was_used(self, user_id: UUID, code: str, type: VerificationType) -> bool:
        """Whether ``code`` was already consumed or superseded for this user."""
        stmt = select(VerificationCodeModel.id).where(
            VerificationCodeModel.user_id == user_id,
            VerificationCodeModel.code == code,
            VerificationCodeModel.type == type.value,
            VerificationCodeModel.used_at.is_not(None),
        )
        result = await self._session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def supersede_live(self, user_id: UUID, type: VerificationType, now: datetime) -> int:
        """Retire every live code of ``type`` so only the next one issued works."""
        stmt = (
            update(VerificationCodeModel)
            .where(
                VerificationCodeModel.user_id == user_id,
                VerificationCodeModel.type == type.value,
                VerificationCodeModel.used_at.is_(None),
                VerificationCodeModel.expires_at > now,
            )
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    async def record_failed_attempt(
        self, user_id: UUID, type: VerificationType, now: datetime
    ) -> None:
        """Increment failed_attempts on every live code of ``type``."""
        stmt = (
            update(VerificationCodeModel)
            .where(
                VerificationCodeModel.user_id == user_id,
                VerificationCodeModel.type == type.value,
                VerificationCodeModel.used_at.is_(None),
                VerificationCodeModel.expires_at > now,
            )
            .values(failed_attempts=VerificationCodeModel.failed_attempts + 1)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)
        await self._session.flush()

    async def count_issued_since(
        self, user_id: UUID, type: VerificationType, since: datetime
    ) -> int:
        """Number of codes issued to a user for ``type`` since ``since``."""
        stmt = select(func.count(VerificationCodeModel.id)).where(
            VerificationCodeModel.user_id == user_id,
            VerificationCodeModel.type == type.value,
            VerificationCodeModel.created_at > since,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar() or 0)

    def _to_entity(self, model: VerificationCodeModel) -> VerificationCode:
        """Convert ORM model to domain entity."""
        return VerificationCode(
            id=model.id,
            user_id=model.user_id,
            code=model.code,
            type=VerificationType(model.type),
            expires_at=model.expires_at,
            used_at=model.used_at,
            failed_attempts=model.failed_attempts,
            created_at=model.created_at,
        )

    def _to_model(self, entity: VerificationCode) -> VerificationCodeModel:
        """Convert domain entity to ORM model."""
        return VerificationCodeModel(
            id=entity.id,
            user_id=entity.user_id,
            code=entity.code,
            type=entity.type.value,
            expires_at=entity.expires_at,
            used_at=entity.used_at,
            failed_attempts=entity.failed_attempts,
            created_at=entity.created_at,
        )
