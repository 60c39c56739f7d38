"""Admin notification domain entities and type constants."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

# --- Notification Type Constants ---
# Format: {entity_type}.{action}


class NotificationTypes:
    """Notification type constants using dot-notation."""

    INVITATION_SENT = "invitation.sent"
    INVITATION_ACCEPTED = "invitation.accepted"
    REGISTRATION_REQUESTED = "registration.requested"


@dataclass
class Notification:
    """Domain entity for a notification event."""

    type_name: str
    entity_type: str
    id: UUID = field(default_factory=uuid4)
    entity_id: UUID | None = None
    actor_id: UUID | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class NotificationRecipient:
    """Domain entity for a per-user notification delivery record."""

    notification_id: UUID
    recipient_id: UUID
    id: UUID = field(default_factory=uuid4)
    is_read: bool = False
    read_at: datetime | None = None
