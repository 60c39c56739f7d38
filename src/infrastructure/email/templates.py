"""Subjects and HTML bodies for outgoing emails."""

from dataclasses import dataclass
from html import escape

from domain.entities.role import Role

ROLE_LABELS: dict[Role, str] = {
    Role.SUPER_ADMIN: "Super Administrator",
    Role.ADMIN: "Administrator",
    Role.ADMIN_STAFF: "Administrative Staff",
    Role.CUSTOMER: "Customer",
    Role.ENERGY_RENTER: "Energy Renter",
    Role.USER: "User",
}


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


def invitation(name: str | None, role: Role, link: str, email: str, message: str | None) -> RenderedEmail:
    note = f"<blockquote>{escape(message)}</blockquote>" if message else ""
    return RenderedEmail(
        subject="You have been invited",
        html=(
            f"<p>Hello {escape(name or 'there')},</p>"
            f"<p>You have been invited to join as <strong>{ROLE_LABELS[role]}</strong>.</p>"
            f"{note}"
            f'<p><a href="{escape(link)}">Create your account</a></p>'
            f"<p>This invitation is addressed to {escape(email)} and expires in 24 hours.</p>"
        ),
    )


def registration_acknowledgement(name: str | None) -> RenderedEmail:
    return RenderedEmail(
        subject="We received your registration request",
        html=(
            f"<p>Hello {escape(name or 'there')},</p>"
            "<p>Thanks for your interest. Accounts are created by invitation only; "
            "our team will review your request and get back to you shortly.</p>"
        ),
    )


def support_registration_notification(email: str, name: str | None) -> RenderedEmail:
    return RenderedEmail(
        subject="New registration attempt without invitation",
        html=(
            "<p>A registration attempt without an invitation was received:</p>"
            f"<p><strong>Email:</strong> {escape(email)}</p>"
            f"<p><strong>Name:</strong> {escape(name or 'not provided')}</p>"
        ),
    )


def email_verification_code(name: str | None, code: str) -> RenderedEmail:
    return RenderedEmail(
        subject="Confirm your email address",
        html=(
            f"<p>Hello {escape(name or 'there')},</p>"
            f"<p>Your email verification code is <strong>{code}</strong>.</p>"
        ),
    )


def two_factor_code(name: str | None, code: str) -> RenderedEmail:
    return RenderedEmail(
        subject="Your sign-in code",
        html=(
            f"<p>Hello {escape(name or 'there')},</p>"
            f"<p>Use <strong>{code}</strong> to finish signing in.</p>"
        ),
    )
