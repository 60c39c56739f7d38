"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Not found errors (404)
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INVITATION = "INVALID_INVITATION"
    INVITATION_EXPIRED = "INVITATION_EXPIRED"
    INVITATION_NOT_PENDING = "INVITATION_NOT_PENDING"
    INVITATION_EMAIL_MISMATCH = "INVITATION_EMAIL_MISMATCH"
    INVALID_VERIFICATION_CODE = "INVALID_VERIFICATION_CODE"

    # Conflict errors (409)
    EMAIL_ALREADY_REGISTERED = "EMAIL_ALREADY_REGISTERED"
    DUPLICATE_INVITATION = "DUPLICATE_INVITATION"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TOO_MANY_VERIFICATION_REQUESTS = "TOO_MANY_VERIFICATION_REQUESTS"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    """Request payload failed a business-level validation rule."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
            details=details,
        )


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class ConfigurationError(AppException):
    """Required server configuration is missing. Never recovered at runtime."""

    def __init__(self, setting: str) -> None:
        super().__init__(
            error_code=ErrorCode.CONFIGURATION_ERROR,
            message=f"Server is misconfigured: {setting} is not set",
            status_code=500,
            details={"setting": setting},
        )


class UserNotFoundError(AppException):
    """User not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message="User not found",
            status_code=404,
            details={"user_id": user_id},
        )


class EmailAlreadyRegisteredError(AppException):
    """An account already exists for this email."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.EMAIL_ALREADY_REGISTERED,
            message="An account with this email already exists",
            status_code=409,
            details={"email": email},
        )


class InvitationNotFoundError(AppException):
    """Invitation not found."""

    def __init__(self, invitation_id: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_NOT_FOUND,
            message="Invitation not found",
            status_code=404,
            details={"invitation_id": invitation_id} if invitation_id else None,
        )


class InvalidInvitationError(AppException):
    """Invitation token does not match a redeemable invitation."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_INVITATION,
            message="Invalid or expired invitation token",
            status_code=400,
        )


class InvitationExpiredError(AppException):
    """Invitation has expired."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_EXPIRED,
            message="This invitation has expired",
            status_code=400,
        )


class InvitationNotPendingError(AppException):
    """Operation requires a pending invitation."""

    def __init__(self, invitation_id: str, status: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_NOT_PENDING,
            message=f"Only pending invitations can be changed (current status: {status})",
            status_code=400,
            details={"invitation_id": invitation_id, "status": status},
        )


class DuplicateInvitationError(AppException):
    """A pending invitation already exists for this email."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_INVITATION,
            message="An active invitation already exists for this email",
            status_code=409,
            details={"email": email},
        )


class InvitationEmailMismatchError(AppException):
    """The registering email does not match the invitation email."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_EMAIL_MISMATCH,
            message="This invitation was issued for a different email address",
            status_code=400,
        )


class InvalidVerificationCodeError(AppException):
    """Verification code is wrong, expired, already used or locked."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_VERIFICATION_CODE,
            message="Invalid or expired verification code",
            status_code=400,
        )


class TooManyVerificationRequestsError(AppException):
    """Too many verification codes requested in the throttle window."""

    def __init__(self, window_minutes: int) -> None:
        super().__init__(
            error_code=ErrorCode.TOO_MANY_VERIFICATION_REQUESTS,
            message="Too many codes requested recently. Please wait a few minutes and try again.",
            status_code=429,
            details={"window_minutes": window_minutes},
        )


class EmailDeliveryError(AppException):
    """Transient failure talking to the email provider.

    Services catch and log this; it never fails the parent operation.
    """

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            error_code=ErrorCode.EMAIL_DELIVERY_FAILED,
            message=f"Failed to deliver email ({operation}): {reason}",
            status_code=502,
            details={"operation": operation},
        )
