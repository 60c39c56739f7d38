"""Registration resolver: decides how (and whether) an account gets created."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError

from core.config import settings
from core.exceptions import (
    EmailAlreadyRegisteredError,
    EmailDeliveryError,
    InvitationEmailMismatchError,
)
from domain.entities.invitation import Invitation
from domain.entities.notification import NotificationTypes
from domain.entities.role import Role
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.credential_service import CredentialService
from domain.services.email_dispatcher import IEmailDispatcher
from domain.services.invitation_service import InvitationService, normalize_email
from domain.services.notification_service import NotificationService

logger = structlog.get_logger()


class RegistrationStatus(StrEnum):
    CREATED = "created"
    PENDING_APPROVAL = "pending_approval"


class RegistrationPath(StrEnum):
    """Which branch of the resolver produced the account."""

    SUPER_ADMIN_BOOTSTRAP = "super_admin_bootstrap"
    INVITATION_TOKEN = "invitation_token"
    MATCHED_INVITATION = "matched_invitation"
    ACKNOWLEDGEMENT_ONLY = "acknowledgement_only"


@dataclass
class RegistrationResult:
    """Outcome of a registration request.

    ``user`` and ``token`` are only set when status is CREATED.
    """

    status: RegistrationStatus
    path: RegistrationPath
    user: User | None = None
    token: str | None = None


class RegistrationService:
    """Resolves a registration request through a strict priority chain.

    1. An account already owns the email: conflict.
    2. Reserved super-admin address without a token: SUPER_ADMIN.
    3. Invitation token supplied: redeem it and adopt its role.
    4. Pending invitation exists for the email: redeem it and adopt its role.
    5. Otherwise acknowledge the request without creating anything.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        invitation_service: InvitationService,
        credential_service: CredentialService,
        email_dispatcher: IEmailDispatcher,
        notification_service: Optional["NotificationService"] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
        super_admin_email: str | None = None,
        strict_email_match: bool | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._invitations = invitation_service
        self._credentials = credential_service
        self._email = email_dispatcher
        self._notification = notification_service
        self._clock = clock
        reserved = settings.super_admin_email if super_admin_email is None else super_admin_email
        self._super_admin_email = normalize_email(reserved) if reserved else ""
        self._strict_email_match = (
            settings.strict_invitation_email_match
            if strict_email_match is None
            else strict_email_match
        )

    async def register(
        self,
        email: str,
        password: str,
        name: str | None = None,
        token: str | None = None,
    ) -> RegistrationResult:
        """Register a new account.

        Args:
            email: Requested account email.
            password: Plain-text password.
            name: Optional display name.
            token: Raw invitation token from the invitation link, if any.

        Returns:
            RegistrationResult with status CREATED (user and session token set)
            or PENDING_APPROVAL (nothing persisted).

        Raises:
            EmailAlreadyRegisteredError: If an account already owns the email.
            InvalidInvitationError / InvitationExpiredError: If the token does
                not grant a redeemable invitation.
            InvitationEmailMismatchError: If the token was issued for another
                email and strict matching is on.
            ConfigurationError: If no signing secret is configured. Nothing
                is persisted in that case.
        """
        email = normalize_email(email)
        now = self._clock()

        async with self._uow_factory() as uow:
            if await uow.users.exists_for_email(email):
                logger.warning("registration_rejected_duplicate", email=email)
                raise EmailAlreadyRegisteredError(email)

            invitation: Invitation | None = None
            if not token and self._super_admin_email and email == self._super_admin_email:
                path = RegistrationPath.SUPER_ADMIN_BOOTSTRAP
                role = Role.SUPER_ADMIN
            elif token:
                invitation = await self._invitations.find_redeemable(uow, token, now)
                self._check_invitation_email(invitation, email)
                path = RegistrationPath.INVITATION_TOKEN
                role = invitation.role
            else:
                invitation = await self._invitations.find_pending_for_email(uow, email, now)
                if invitation is None:
                    path = RegistrationPath.ACKNOWLEDGEMENT_ONLY
                else:
                    path = RegistrationPath.MATCHED_INVITATION
                    role = invitation.role

            user = session_token = None
            if path != RegistrationPath.ACKNOWLEDGEMENT_ONLY:
                user = await self._create_account(uow, email, password, name, role, invitation, now)
                # Signed before commit so a signing failure leaves nothing behind
                session_token = self._credentials.issue_registration_token(user)
                await uow.commit()

        if user is None:
            await self._acknowledge(email, name)
            return RegistrationResult(
                status=RegistrationStatus.PENDING_APPROVAL,
                path=RegistrationPath.ACKNOWLEDGEMENT_ONLY,
            )

        logger.info(
            "registration_completed",
            user_id=str(user.id),
            role=user.role.value,
            path=path.value,
        )
        return RegistrationResult(
            status=RegistrationStatus.CREATED,
            path=path,
            user=user,
            token=session_token,
        )

    async def _create_account(
        self,
        uow: IUnitOfWork,
        email: str,
        password: str,
        name: str | None,
        role: Role,
        invitation: Invitation | None,
        now: datetime,
    ) -> User:
        try:
            user = await self._credentials.create_account(uow, email, password, name, role, now)
        except IntegrityError as exc:
            await uow.rollback()
            # A concurrent registration took the email first
            raise EmailAlreadyRegisteredError(email) from exc

        # Claimed only once the user row exists; a lost claim aborts the whole transaction
        if invitation is not None:
            accepted = await self._invitations.accept_matched(uow, invitation, now)
            if self._notification:
                await self._notification.notify_admins(
                    uow=uow,
                    type_name=NotificationTypes.INVITATION_ACCEPTED,
                    entity_type="invitation",
                    entity_id=accepted.id,
                    actor_id=user.id,
                    metadata={
                        "email": email,
                        "invited_email": accepted.email,
                        "role": role.value,
                    },
                )
        return user

    def _check_invitation_email(self, invitation: Invitation, email: str) -> None:
        if invitation.email == email:
            return
        if self._strict_email_match:
            logger.warning(
                "registration_rejected_email_mismatch",
                invitation_id=str(invitation.id),
                invited_email=invitation.email,
                email=email,
            )
            raise InvitationEmailMismatchError()
        logger.warning(
            "registration_email_mismatch_allowed",
            invitation_id=str(invitation.id),
            invited_email=invitation.email,
            email=email,
        )

    async def _acknowledge(self, email: str, name: str | None) -> None:
        logger.info("registration_pending_approval", email=email)
        try:
            await self._email.send_registration_request_acknowledgement(email, name)
        except EmailDeliveryError as exc:
            logger.error("registration_acknowledgement_failed", email=email, error=exc.message)
        try:
            await self._email.notify_support_about_registration_attempt(email, name)
        except EmailDeliveryError as exc:
            logger.error("registration_support_notification_failed", email=email, error=exc.message)

        if self._notification:
            await self._notification.notify_admins_now(
                type_name=NotificationTypes.REGISTRATION_REQUESTED,
                entity_type="registration",
                metadata={"email": email, "name": name},
            )
