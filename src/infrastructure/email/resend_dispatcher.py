"""Email dispatcher backed by the Resend HTTP API."""

from typing import Any

import httpx
import structlog

from core.config import settings
from core.exceptions import EmailDeliveryError
from domain.entities.role import Role
from domain.entities.verification import VerificationType
from infrastructure.email import templates
from infrastructure.email.templates import RenderedEmail

logger = structlog.get_logger()


class ResendEmailDispatcher:
    """Sends transactional email through Resend.

    In dev mode nothing leaves the process; the message is logged instead.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        sender: str | None = None,
        support_email: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        dev_mode: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.resend_api_key
        self._api_url = api_url or settings.resend_api_url
        self._sender = sender or settings.email_from
        self._support_email = support_email or settings.support_email
        self._base_url = (base_url or settings.app_base_url).rstrip("/")
        self._timeout = timeout or settings.email_timeout_seconds
        self._dev_mode = settings.email_dev_mode if dev_mode is None else dev_mode
        self._transport = transport

    def invitation_link(self, token: str) -> str:
        return f"{self._base_url}/register?token={token}"

    async def send_invitation_email(
        self,
        email: str,
        name: str | None,
        role: Role,
        token: str,
        message: str | None = None,
    ) -> None:
        rendered = templates.invitation(name, role, self.invitation_link(token), email, message)
        await self._send(email, rendered, operation="send_invitation_email")

    async def send_registration_request_acknowledgement(self, email: str, name: str | None) -> None:
        rendered = templates.registration_acknowledgement(name)
        await self._send(email, rendered, operation="send_registration_request_acknowledgement")

    async def notify_support_about_registration_attempt(self, email: str, name: str | None) -> None:
        rendered = templates.support_registration_notification(email, name)
        await self._send(
            self._support_email,
            rendered,
            operation="notify_support_about_registration_attempt",
        )

    async def send_verification_code(
        self,
        email: str,
        name: str | None,
        code: str,
        type: VerificationType,
    ) -> None:
        if type == VerificationType.EMAIL_VERIFICATION:
            rendered = templates.email_verification_code(name, code)
        else:
            rendered = templates.two_factor_code(name, code)
        await self._send(email, rendered, operation="send_verification_code")

    async def _send(self, to: str, rendered: RenderedEmail, operation: str) -> None:
        if self._dev_mode:
            logger.info(
                "email_dev_mode_skipped",
                to=to,
                subject=rendered.subject,
                operation=operation,
            )
            return

        if not self._api_key:
            raise EmailDeliveryError(operation, "RESEND_API_KEY is not set")

        body: dict[str, Any] = {
            "from": self._sender,
            "to": [to],
            "subject": rendered.subject,
            "html": rendered.html,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._api_url,
                    json=body,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(operation, str(exc) or type(exc).__name__) from exc

        message_id = "unknown"
        if response.headers.get("content-type", "").startswith("application/json"):
            message_id = response.json().get("id", "unknown")

        logger.info(
            "email_sent",
            to=to,
            subject=rendered.subject,
            operation=operation,
            message_id=message_id,
        )
