"""Invitation service layer with business logic."""

import hashlib
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from core.config import settings
from core.exceptions import (
    AuthorizationError,
    DuplicateInvitationError,
    EmailAlreadyRegisteredError,
    EmailDeliveryError,
    InvalidInvitationError,
    InvitationExpiredError,
    InvitationNotFoundError,
    InvitationNotPendingError,
)
from domain.entities.invitation import Invitation, InvitationStatus
from domain.entities.notification import NotificationTypes
from domain.entities.role import Capability, Role, has_capability
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.email_dispatcher import IEmailDispatcher
from domain.services.notification_service import NotificationService
from infrastructure.auth.provider import AuthenticatedPrincipal

logger = structlog.get_logger()

# 32 random bytes, hex encoded
TOKEN_BYTES = 32


@dataclass
class BulkDeleteResult:
    """Outcome of a bulk invitation delete."""

    deleted: int = 0
    failed_ids: list[UUID] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_ids)


class InvitationService:
    """Service layer for the invitation ledger."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        email_dispatcher: IEmailDispatcher,
        notification_service: Optional["NotificationService"] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
        expiry_hours: int | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._email = email_dispatcher
        self._notification = notification_service
        self._clock = clock
        self._expiry = timedelta(hours=expiry_hours or settings.invitation_expiry_hours)

    async def list_invitations(self, principal: AuthenticatedPrincipal) -> list[Invitation]:
        """Get all invitations, newest first. Requires MANAGE_INVITATIONS."""
        self._require_capability(principal)
        async with self._uow_factory() as uow:
            return await uow.invitations.list_all()  # type: ignore[no-any-return]

    async def create_invitation(
        self,
        principal: AuthenticatedPrincipal,
        email: str,
        role: Role,
        name: str | None = None,
        message: str | None = None,
    ) -> tuple[Invitation, str]:
        """Create an invitation and mail its token to the invitee.

        Args:
            principal: The caller (must hold MANAGE_INVITATIONS).
            email: The email address to invite.
            role: The role the invitee receives on registration.
            name: Optional invitee display name.
            message: Optional personal note included in the email.

        Returns:
            Tuple of (Invitation, raw_token). The raw token is never stored.

        Raises:
            AuthorizationError: If the caller cannot manage invitations.
            EmailAlreadyRegisteredError: If an account exists for the email.
            DuplicateInvitationError: If an active invitation exists for the email.
        """
        self._require_capability(principal)
        email = normalize_email(email)
        now = self._clock()

        async with self._uow_factory() as uow:
            await self._ensure_email_invitable(uow, email, now)

            raw_token, token_hash = self._new_token()
            invitation = Invitation(
                email=email,
                name=name,
                role=role,
                token_hash=token_hash,
                message=message,
                sender_id=principal.user_id,
                created_at=now,
                expires_at=now + self._expiry,
            )

            try:
                created = await uow.invitations.create(invitation)
                if self._notification:
                    await self._notification.notify_admins(
                        uow=uow,
                        type_name=NotificationTypes.INVITATION_SENT,
                        entity_type="invitation",
                        entity_id=created.id,
                        actor_id=principal.user_id,
                        metadata={
                            "email": email,
                            "role": role.value,
                            "sender_email": principal.email,
                        },
                    )
                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                # A concurrent request won the partial unique index on pending email
                raise DuplicateInvitationError(email) from exc

        logger.info(
            "invitation_created",
            invitation_id=str(created.id),
            email=email,
            role=role.value,
            expires_at=created.expires_at.isoformat(),
        )
        await self._send_invitation(created, raw_token)
        return created, raw_token

    async def update_invitation(
        self,
        principal: AuthenticatedPrincipal,
        invitation_id: UUID,
        email: str | None = None,
        name: str | None = None,
        role: Role | None = None,
        message: str | None = None,
        resend: bool = False,
    ) -> tuple[Invitation, bool]:
        """Edit a pending invitation and optionally resend it.

        ``None`` arguments leave the field unchanged. Resending rotates the
        token and pushes ``expires_at`` out by a full expiry period.

        Returns:
            Tuple of (Invitation, changed). ``changed`` is False when nothing
            was written.

        Raises:
            InvitationNotFoundError: If the invitation does not exist.
            InvitationNotPendingError: If the invitation is not pending.
            EmailAlreadyRegisteredError / DuplicateInvitationError: If the new
                email is taken.
        """
        self._require_capability(principal)
        now = self._clock()

        async with self._uow_factory() as uow:
            invitation = await uow.invitations.get_by_id(invitation_id)
            if not invitation:
                raise InvitationNotFoundError(str(invitation_id))
            if invitation.status != InvitationStatus.PENDING:
                raise InvitationNotPendingError(str(invitation_id), invitation.status.value)

            changed = False
            if email is not None and normalize_email(email) != invitation.email:
                new_email = normalize_email(email)
                await self._ensure_email_invitable(uow, new_email, now)
                invitation.email = new_email
                changed = True
            if name is not None and name != invitation.name:
                invitation.name = name
                changed = True
            if role is not None and role != invitation.role:
                invitation.role = role
                changed = True
            if message is not None and message != invitation.message:
                invitation.message = message
                changed = True

            if not changed and not resend:
                return invitation, False

            raw_token: str | None = None
            if resend:
                raw_token, invitation.token_hash = self._new_token()
                invitation.expires_at = now + self._expiry

            try:
                updated = await uow.invitations.update(invitation)
                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                raise DuplicateInvitationError(invitation.email) from exc

        logger.info(
            "invitation_updated",
            invitation_id=str(invitation_id),
            fields_changed=changed,
            resent=resend,
        )
        if raw_token:
            await self._send_invitation(updated, raw_token)
        return updated, True

    async def revoke_invitation(
        self,
        principal: AuthenticatedPrincipal,
        invitation_id: UUID,
    ) -> Invitation:
        """Revoke a pending invitation.

        Raises:
            InvitationNotFoundError: If the invitation does not exist.
            InvitationNotPendingError: If the invitation is no longer pending.
        """
        self._require_capability(principal)
        async with self._uow_factory() as uow:
            revoked = await uow.invitations.revoke(invitation_id)
            if not revoked:
                existing = await uow.invitations.get_by_id(invitation_id)
                if not existing:
                    raise InvitationNotFoundError(str(invitation_id))
                raise InvitationNotPendingError(str(invitation_id), existing.status.value)
            await uow.commit()

        logger.info("invitation_revoked", invitation_id=str(invitation_id))
        return revoked  # type: ignore[no-any-return]

    async def delete_invitation(
        self,
        principal: AuthenticatedPrincipal,
        invitation_id: UUID,
    ) -> None:
        """Delete an invitation in any status."""
        self._require_capability(principal)
        async with self._uow_factory() as uow:
            deleted = await uow.invitations.delete(invitation_id)
            if not deleted:
                raise InvitationNotFoundError(str(invitation_id))
            await uow.commit()

        logger.info("invitation_deleted", invitation_id=str(invitation_id))

    async def delete_invitations(
        self,
        principal: AuthenticatedPrincipal,
        invitation_ids: list[UUID],
    ) -> BulkDeleteResult:
        """Delete several invitations, reporting which ones were missing."""
        self._require_capability(principal)
        result = BulkDeleteResult()
        async with self._uow_factory() as uow:
            for invitation_id in invitation_ids:
                if await uow.invitations.delete(invitation_id):
                    result.deleted += 1
                else:
                    result.failed_ids.append(invitation_id)
            await uow.commit()

        logger.info(
            "invitations_bulk_deleted",
            deleted=result.deleted,
            failed=result.failed,
        )
        return result

    # --- Redemption (run inside the caller's transaction) ---

    async def find_redeemable(self, uow: IUnitOfWork, token: str, now: datetime) -> Invitation:
        """Look up the invitation a raw token grants.

        Raises:
            InvalidInvitationError: If the token is unknown or no longer pending.
            InvitationExpiredError: If the invitation is pending but past expiry.
        """
        invitation = await uow.invitations.get_by_token_hash(hash_token(token))
        if not invitation or invitation.status != InvitationStatus.PENDING:
            raise InvalidInvitationError()
        if invitation.is_expired(now):
            raise InvitationExpiredError()
        return invitation

    async def find_pending_for_email(
        self, uow: IUnitOfWork, email: str, now: datetime
    ) -> Invitation | None:
        """The pending, unexpired invitation for an email, if any."""
        return await uow.invitations.get_pending_for_email(normalize_email(email), now)  # type: ignore[no-any-return]

    async def accept(self, uow: IUnitOfWork, token: str, now: datetime) -> Invitation:
        """Redeem a raw invitation token with one conditional update."""
        return await self._accept_hash(uow, hash_token(token), now)

    async def accept_matched(
        self, uow: IUnitOfWork, invitation: Invitation, now: datetime
    ) -> Invitation:
        """Redeem an invitation found by email match rather than by token."""
        return await self._accept_hash(uow, invitation.token_hash, now)

    async def _accept_hash(self, uow: IUnitOfWork, token_hash: str, now: datetime) -> Invitation:
        accepted = await uow.invitations.accept(token_hash, now)
        if not accepted:
            # Lost a race with another redemption, a revoke, or the clock
            raise InvalidInvitationError()
        logger.info("invitation_accepted", invitation_id=str(accepted.id))
        return accepted  # type: ignore[no-any-return]

    # --- Internal helpers ---

    async def _ensure_email_invitable(self, uow: IUnitOfWork, email: str, now: datetime) -> None:
        if await uow.users.exists_for_email(email):
            logger.warning("invitation_rejected_user_exists", email=email)
            raise EmailAlreadyRegisteredError(email)

        existing = await uow.invitations.get_pending_for_email(email, now)
        if existing:
            logger.warning("invitation_rejected_active_exists", email=email)
            raise DuplicateInvitationError(email)

        # Stale pending rows would still hold the partial unique index
        await uow.invitations.expire_stale_for_email(email, now)

    async def _send_invitation(self, invitation: Invitation, raw_token: str) -> None:
        try:
            await self._email.send_invitation_email(
                invitation.email,
                invitation.name,
                invitation.role,
                raw_token,
                invitation.message,
            )
        except EmailDeliveryError as exc:
            logger.error(
                "invitation_email_failed",
                invitation_id=str(invitation.id),
                email=invitation.email,
                error=exc.message,
            )

    @staticmethod
    def _require_capability(principal: AuthenticatedPrincipal) -> None:
        if not has_capability(principal.role, Capability.MANAGE_INVITATIONS):
            logger.warning(
                "invitation_access_denied",
                user_id=str(principal.user_id),
                role=principal.role.value,
            )
            raise AuthorizationError("Only administrators can manage invitations")

    @staticmethod
    def _new_token() -> tuple[str, str]:
        raw_token = secrets.token_hex(TOKEN_BYTES)
        return raw_token, hash_token(raw_token)


def hash_token(token: str) -> str:
    """Hash a raw invitation token using SHA-256."""
    return hashlib.sha256(token.encode()).hexdigest()


def normalize_email(email: str) -> str:
    return email.strip().lower()
