"""JWT session token provider.

Tokens are HS256-signed with ``settings.jwt_secret_key``. Payload structure:
    {
        "sub": "user-uuid",
        "email": "user@example.com",
        "role": "ADMIN",
        "profile_completed": true,
        "iat": 1234567800,
        "exp": 1234567890
    }
"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

import structlog
from jose import JWTError, jwt

from core.config import settings
from core.exceptions import ConfigurationError
from domain.entities.role import Role
from infrastructure.auth.provider import AuthenticatedPrincipal

logger = structlog.get_logger()


class JWTAuthProvider:
    """JWT-based authentication provider.

    Refuses to sign or validate anything when no secret is configured.
    """

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
    ) -> None:
        self._secret_key = settings.jwt_secret_key if secret_key is None else secret_key
        self._algorithm = algorithm or settings.jwt_algorithm

    def _require_secret(self) -> str:
        if not self._secret_key:
            logger.error("jwt_secret_missing", setting="JWT_SECRET_KEY")
            raise ConfigurationError("JWT_SECRET_KEY")
        return self._secret_key

    async def validate_token(self, token: str) -> Optional[AuthenticatedPrincipal]:
        """
        Validate a JWT and extract the principal.

        Args:
            token: The JWT to validate

        Returns:
            AuthenticatedPrincipal if valid, None if invalid or expired
        """
        secret = self._require_secret()
        try:
            payload = jwt.decode(token, secret, algorithms=[self._algorithm])
        except JWTError:
            return None

        user_id = payload.get("sub")
        email = payload.get("email")
        role = payload.get("role")

        if not user_id or not email or not role:
            return None

        try:
            return AuthenticatedPrincipal(
                user_id=UUID(user_id),
                email=email,
                role=Role(role),
                profile_completed=bool(payload.get("profile_completed", False)),
            )
        except ValueError:
            return None

    def create_token(self, principal: AuthenticatedPrincipal, ttl: timedelta) -> str:
        """
        Create a signed session token.

        Args:
            principal: The identity to embed
            ttl: Token lifetime

        Returns:
            The generated JWT string
        """
        secret = self._require_secret()
        now = datetime.utcnow()

        payload: dict = {
            "sub": str(principal.user_id),
            "email": principal.email,
            "role": principal.role.value,
            "profile_completed": principal.profile_completed,
            "iat": now,
            "exp": now + ttl,
        }

        return jwt.encode(payload, secret, algorithm=self._algorithm)
