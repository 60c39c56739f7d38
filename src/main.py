"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import settings
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.database.session import engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    if not settings.jwt_secret_key:
        logger.critical("jwt_secret_missing", setting="JWT_SECRET_KEY")
        raise ConfigurationError("JWT_SECRET_KEY")
    if not settings.email_dev_mode and not settings.resend_api_key:
        logger.error("email_api_key_missing", setting="RESEND_API_KEY")
    logger.info(
        "application_started",
        environment=settings.app_env,
        strict_invitation_email_match=settings.strict_invitation_email_match,
        email_dev_mode=settings.email_dev_mode,
    )
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Invitation & Registration Authorization\n\n"
            "Gatekeeper decides who may create an account and with which role.\n\n"
            "### Features\n"
            "- **Invitations**: Time-bound, single-use invitation tokens delivered by email\n"
            "- **Registration**: Super-admin bootstrap, invitation redemption, "
            "or an acknowledgement-only request\n"
            "- **Verification**: One-time email and two-factor codes exchanged for session tokens\n\n"
            "### Authentication\n"
            "Invitation management requires an admin-tier JWT in the Authorization header:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n\n"
            "### Rate Limits\n"
            "- Registration and code resend: 5 requests/minute\n"
            "- Verification and invitation writes: 10 requests/minute\n"
            "- GET endpoints: 30 requests/minute"
        ),
        version="1.0.0",
        debug=settings.debug,
        contact={
            "name": "Gatekeeper Support",
            "email": settings.support_email,
        },
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "auth",
                "description": "Registration and verification",
            },
            {
                "name": "invitations",
                "description": "Invitation management (admin tier only)",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
