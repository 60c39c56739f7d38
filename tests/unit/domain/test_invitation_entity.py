"""Unit tests for the Invitation entity."""

from datetime import datetime, timedelta

from domain.entities.invitation import Invitation, InvitationStatus
from domain.entities.role import Role

CREATED = datetime(2026, 3, 1, 12, 0, 0)


def _invitation(status: InvitationStatus = InvitationStatus.PENDING) -> Invitation:
    return Invitation(
        email="a@example.com",
        role=Role.ADMIN_STAFF,
        token_hash="0" * 64,
        status=status,
        created_at=CREATED,
        expires_at=CREATED + timedelta(hours=24),
    )


def test_pending_before_expiry() -> None:
    invitation = _invitation()

    assert invitation.is_pending(CREATED + timedelta(hours=23))
    assert invitation.effective_status(CREATED + timedelta(hours=23)) == InvitationStatus.PENDING


def test_stored_pending_is_expired_after_deadline() -> None:
    invitation = _invitation()
    later = CREATED + timedelta(hours=25)

    assert invitation.is_expired(later)
    assert not invitation.is_pending(later)
    assert invitation.effective_status(later) == InvitationStatus.EXPIRED
    assert invitation.status == InvitationStatus.PENDING


def test_terminal_status_is_not_rewritten_by_expiry() -> None:
    invitation = _invitation(InvitationStatus.ACCEPTED)

    assert invitation.effective_status(CREATED + timedelta(hours=25)) == InvitationStatus.ACCEPTED
