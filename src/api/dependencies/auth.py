"""Authentication dependencies for FastAPI."""

from collections.abc import Awaitable, Callable
from typing import Annotated

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.exceptions import AuthenticationError, AuthorizationError, ErrorCode
from domain.entities.role import Capability, has_capability
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import AuthenticatedPrincipal

logger = structlog.get_logger()

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)

# Singleton auth provider
_auth_provider: JWTAuthProvider | None = None


def get_auth_provider() -> JWTAuthProvider:
    """Get or create the auth provider singleton."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = JWTAuthProvider()
    return _auth_provider


async def get_current_principal(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
) -> AuthenticatedPrincipal:
    """
    Dependency to get the authenticated caller.

    Raises:
        AuthenticationError: If no token provided or token is invalid
    """
    if not credentials:
        raise AuthenticationError(
            message="Authorization header required",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    principal = await auth_provider.validate_token(credentials.credentials)

    if not principal:
        raise AuthenticationError(
            message="Invalid or expired token",
            error_code=ErrorCode.INVALID_TOKEN,
        )

    structlog.contextvars.bind_contextvars(user_id=str(principal.user_id))
    return principal


def require_capability(
    capability: Capability,
) -> Callable[..., Awaitable[AuthenticatedPrincipal]]:
    """Build a dependency that only lets through principals holding ``capability``."""

    async def dependency(
        principal: Annotated[AuthenticatedPrincipal, Depends(get_current_principal)],
    ) -> AuthenticatedPrincipal:
        if not has_capability(principal.role, capability):
            logger.warning(
                "capability_denied",
                capability=capability.value,
                role=principal.role.value,
            )
            raise AuthorizationError("You do not have permission to perform this action")
        return principal

    return dependency


# Type aliases for convenience in route handlers
CurrentPrincipal = Annotated[AuthenticatedPrincipal, Depends(get_current_principal)]
InvitationManager = Annotated[
    AuthenticatedPrincipal,
    Depends(require_capability(Capability.MANAGE_INVITATIONS)),
]
