"""Registration and verification API routes."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response

from api.v1.dependencies import get_registration_service, get_verification_service
from api.v1.schemas.auth import (
    PendingApprovalResponse,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    ResendVerificationResponse,
    UserResponse,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from core.rate_limit import limiter
from domain.services.registration_service import RegistrationService, RegistrationStatus
from domain.services.verification_service import VerificationService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an account",
    responses={
        201: {"description": "Account created; session token returned"},
        202: {
            "model": PendingApprovalResponse,
            "description": "No invitation found; request acknowledged, no account created",
        },
        400: {"description": "Validation failed, or invitation invalid, expired or mismatched"},
        409: {"description": "An account already exists for this email"},
    },
)
@limiter.limit("5/minute")  # type: ignore[untyped-decorator]
async def register(
    request: Request,
    body: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> Response | RegisterResponse:
    """
    Register a new account.

    The account role is decided by the server: the reserved super-admin
    address, an invitation token, or a pending invitation for the email.
    Anyone else gets a `202 pending_approval` and no account.
    """
    result = await service.register(
        email=body.email,
        password=body.password,
        name=body.name,
        token=body.token,
    )

    if result.status == RegistrationStatus.PENDING_APPROVAL:
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content=PendingApprovalResponse().model_dump(),
        )

    return RegisterResponse(
        user=UserResponse.model_validate(result.user),
        token=result.token,
    )


@router.post(
    "/verify-email",
    response_model=VerifyCodeResponse,
    summary="Verify email address",
    responses={
        200: {"description": "Email verified (or already verified); session token returned"},
        400: {"description": "Invalid, expired or already used code"},
        404: {"description": "User not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def verify_email(
    request: Request,
    body: VerifyCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerifyCodeResponse:
    """Consume an email verification code. Idempotent once the email is verified."""
    result = await service.verify_email(body.user_id, body.code)
    return VerifyCodeResponse(token=result.token)


@router.post(
    "/verify-two-factor",
    response_model=VerifyCodeResponse,
    summary="Verify two-factor login code",
    responses={
        200: {"description": "Code accepted; session token returned"},
        400: {"description": "Invalid, expired or already used code"},
        404: {"description": "User not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def verify_two_factor(
    request: Request,
    body: VerifyCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerifyCodeResponse:
    """Consume a login code and return a session token."""
    result = await service.verify_two_factor(body.user_id, body.code)
    return VerifyCodeResponse(token=result.token)


@router.post(
    "/resend-verification",
    response_model=ResendVerificationResponse,
    summary="Send a new verification code",
    responses={
        200: {"description": "A new code was emailed"},
        404: {"description": "User not found"},
        429: {"description": "Too many codes requested recently"},
    },
)
@limiter.limit("5/minute")  # type: ignore[untyped-decorator]
async def resend_verification(
    request: Request,
    body: ResendVerificationRequest,
    service: VerificationService = Depends(get_verification_service),
) -> ResendVerificationResponse:
    """Issue a fresh code of the requested type and email it to the user."""
    issued = await service.resend_code(body.user_id, body.type)
    return ResendVerificationResponse(expires_at=issued.expires_at)
