"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Gatekeeper API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/gatekeeper",
        description="PostgreSQL connection URL with asyncpg driver",
    )
    database_pool_timeout: float = Field(
        default=10.0,
        description="Seconds to wait for a pooled connection before failing",
    )

    # JWT session tokens
    jwt_secret_key: str = Field(
        default="",
        description="Secret key for HS256 session tokens. Required; there is no fallback key.",
    )
    jwt_algorithm: str = Field(default="HS256")
    registration_token_ttl_hours: int = Field(default=168)
    verification_token_ttl_hours: int = Field(default=24)

    # Registration policy
    super_admin_email: str = Field(
        default="",
        description="Reserved address allowed to bootstrap the SUPER_ADMIN account",
    )
    strict_invitation_email_match: bool = Field(
        default=True,
        description="Reject invitation redemption when the registering email differs",
    )
    password_hash_rounds: int = Field(default=12, ge=4, le=31)

    # Invitations
    invitation_expiry_hours: int = Field(default=24)

    # Verification codes
    email_code_ttl_minutes: int = Field(default=30)
    login_code_ttl_minutes: int = Field(default=10)
    verification_resend_limit: int = Field(default=3)
    verification_window_minutes: int = Field(default=5)
    verification_max_failed_attempts: int = Field(default=5)

    # Email delivery (Resend HTTP API)
    resend_api_key: str = Field(default="")
    resend_api_url: str = Field(default="https://api.resend.com/emails")
    email_from: str = Field(default="onboarding@resend.dev")
    support_email: str = Field(default="support@example.com")
    app_base_url: str = Field(default="http://localhost:3000")
    email_timeout_seconds: float = Field(default=10.0)
    email_dev_mode: bool = Field(
        default=True,
        description="Log outgoing emails instead of calling the provider",
    )

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Hosting providers supply a standard ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
