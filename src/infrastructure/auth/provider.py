"""Authentication provider protocol."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Protocol
from uuid import UUID

from domain.entities.role import Role


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """Caller identity, built once per request from the session token."""

    user_id: UUID
    email: str
    role: Role
    profile_completed: bool = False


class IAuthProvider(Protocol):
    """Protocol for authentication providers."""

    async def validate_token(self, token: str) -> Optional[AuthenticatedPrincipal]:
        """
        Validate an authentication token.

        Args:
            token: The bearer token to validate

        Returns:
            AuthenticatedPrincipal if valid, None if invalid
        """
        ...

    def create_token(self, principal: AuthenticatedPrincipal, ttl: timedelta) -> str:
        """
        Create a signed session token for a principal.

        Args:
            principal: The identity to embed
            ttl: How long the token stays valid

        Returns:
            The generated token string
        """
        ...
