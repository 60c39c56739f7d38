"""Email dispatcher protocol consumed by the domain services."""

from typing import Protocol

from domain.entities.role import Role
from domain.entities.verification import VerificationType


class IEmailDispatcher(Protocol):
    """Outbound email collaborator.

    Every method raises ``EmailDeliveryError`` when the provider cannot be
    reached or rejects the message.
    """

    async def send_invitation_email(
        self,
        email: str,
        name: str | None,
        role: Role,
        token: str,
        message: str | None = None,
    ) -> None:
        ...

    async def send_registration_request_acknowledgement(self, email: str, name: str | None) -> None:
        ...

    async def notify_support_about_registration_attempt(self, email: str, name: str | None) -> None:
        ...

    async def send_verification_code(
        self,
        email: str,
        name: str | None,
        code: str,
        type: VerificationType,
    ) -> None:
        ...
