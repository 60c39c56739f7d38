"""Verification gate: one-time codes exchanged for session tokens."""

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

import structlog

from core.config import settings
from core.exceptions import (
    EmailDeliveryError,
    InvalidVerificationCodeError,
    TooManyVerificationRequestsError,
    UserNotFoundError,
)
from domain.entities.user import User
from domain.entities.verification import VerificationCode, VerificationType
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.credential_service import CredentialService
from domain.services.email_dispatcher import IEmailDispatcher

logger = structlog.get_logger()

CODE_DIGITS = 6


@dataclass
class VerificationResult:
    user: User
    token: str


class VerificationService:
    """Issues, consumes and throttles verification codes."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        credential_service: CredentialService,
        email_dispatcher: IEmailDispatcher,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._credentials = credential_service
        self._email = email_dispatcher
        self._clock = clock

    async def verify_email(self, user_id: UUID, code: str) -> VerificationResult:
        """Confirm a user's email address.

        Already-verified users get a fresh token without the code being
        consumed. Replaying a code they already used still fails.

        Raises:
            UserNotFoundError: If the user does not exist.
            InvalidVerificationCodeError: If the code is wrong, expired, used
                or locked after too many failures.
        """
        now = self._clock()
        code_type = VerificationType.EMAIL_VERIFICATION
        async with self._uow_factory() as uow:
            user = await self._get_user(uow, user_id)
            if user.email_verified:
                if await uow.verification_codes.was_used(user_id, code, code_type):
                    logger.warning("verification_code_replayed", user_id=str(user_id))
                    raise InvalidVerificationCodeError()
                logger.info("email_already_verified", user_id=str(user_id))
                return VerificationResult(user, self._credentials.issue_verification_token(user))

            await self._consume(uow, user_id, code, code_type, now)
            await uow.users.mark_email_verified(user_id)
            user.email_verified = True
            token = self._credentials.issue_verification_token(user)
            await uow.commit()

        logger.info("email_verified", user_id=str(user_id))
        return VerificationResult(user, token)

    async def verify_two_factor(self, user_id: UUID, code: str) -> VerificationResult:
        """Complete a two-factor login. Never touches ``email_verified``."""
        now = self._clock()
        async with self._uow_factory() as uow:
            user = await self._get_user(uow, user_id)
            await self._consume(uow, user_id, code, VerificationType.LOGIN, now)
            token = self._credentials.issue_verification_token(user)
            await uow.commit()

        logger.info("two_factor_verified", user_id=str(user_id))
        return VerificationResult(user, token)

    async def issue_code(
        self, user_id: UUID, type: VerificationType, throttle: bool = False
    ) -> VerificationCode:
        """Generate a code, store it and mail it to the user.

        Any older live code of the same type stops working.

        Raises:
            UserNotFoundError: If the user does not exist.
            TooManyVerificationRequestsError: If ``throttle`` is set and too
                many codes of this type were issued within the window.
        """
        now = self._clock()
        async with self._uow_factory() as uow:
            user = await self._get_user(uow, user_id)
            if throttle:
                await self._check_resend_limit(uow, user_id, type, now)
            issued = await self._store_code(uow, user_id, type, now)
            await uow.commit()

        await self._deliver(user, issued)
        return issued

    async def resend_code(self, user_id: UUID, type: VerificationType) -> VerificationCode:
        """Issue a new code unless the user hit the resend limit."""
        return await self.issue_code(user_id, type, throttle=True)

    async def _check_resend_limit(
        self, uow: IUnitOfWork, user_id: UUID, type: VerificationType, now: datetime
    ) -> None:
        window = settings.verification_window_minutes
        recent = await uow.verification_codes.count_issued_since(
            user_id, type, now - timedelta(minutes=window)
        )
        if recent >= settings.verification_resend_limit:
            logger.warning(
                "verification_resend_throttled",
                user_id=str(user_id),
                type=type.value,
                recent=recent,
            )
            raise TooManyVerificationRequestsError(window)

    async def _get_user(self, uow: IUnitOfWork, user_id: UUID) -> User:
        user = await uow.users.get_by_id(user_id)
        if not user:
            raise UserNotFoundError(str(user_id))
        return user  # type: ignore[no-any-return]

    async def _consume(
        self,
        uow: IUnitOfWork,
        user_id: UUID,
        code: str,
        type: VerificationType,
        now: datetime,
    ) -> VerificationCode:
        consumed = await uow.verification_codes.consume(
            user_id,
            code,
            type,
            now,
            settings.verification_max_failed_attempts,
        )
        if consumed:
            return consumed  # type: ignore[no-any-return]

        # The failure counter is the only write on this path
        await uow.verification_codes.record_failed_attempt(user_id, type, now)
        await uow.commit()
        logger.warning("verification_code_rejected", user_id=str(user_id), type=type.value)
        raise InvalidVerificationCodeError()

    async def _store_code(
        self,
        uow: IUnitOfWork,
        user_id: UUID,
        type: VerificationType,
        now: datetime,
    ) -> VerificationCode:
        ttl = (
            settings.email_code_ttl_minutes
            if type == VerificationType.EMAIL_VERIFICATION
            else settings.login_code_ttl_minutes
        )
        code = VerificationCode(
            user_id=user_id,
            code=generate_code(),
            type=type,
            expires_at=now + timedelta(minutes=ttl),
            created_at=now,
        )
        # Only the newest code is live, so the failure counter cannot be sidestepped
        await uow.verification_codes.supersede_live(user_id, type, now)
        created = await uow.verification_codes.create(code)
        logger.info(
            "verification_code_issued",
            user_id=str(user_id),
            type=type.value,
            expires_at=created.expires_at.isoformat(),
        )
        return created  # type: ignore[no-any-return]

    async def _deliver(self, user: User, issued: VerificationCode) -> None:
        try:
            await self._email.send_verification_code(user.email, user.name, issued.code, issued.type)
        except EmailDeliveryError as exc:
            logger.error(
                "verification_code_email_failed",
                user_id=str(user.id),
                type=issued.type.value,
                error=exc.message,
            )


def generate_code() -> str:
    """Uniformly random, zero-padded numeric code."""
    return f"{secrets.randbelow(10**CODE_DIGITS):0{CODE_DIGITS}d}"
