"""Pydantic schemas for registration and verification API."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.v1.schemas.common import normalize_email_field
from domain.entities.role import Role
from domain.entities.verification import VerificationType


class RegisterRequest(BaseModel):
    """Schema for registering a new account."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=1, max_length=100)
    token: str | None = Field(
        None,
        max_length=128,
        description="Invitation token from the invitation link",
    )

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email_field(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    @field_validator("token")
    @classmethod
    def blank_token_is_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class UserResponse(BaseModel):
    """Schema for a user. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str | None = None
    role: Role
    email_verified: bool
    is_two_factor_enabled: bool
    profile_completed: bool
    created_at: datetime


class RegisterResponse(BaseModel):
    """Schema for a created account."""

    user: UserResponse
    token: str


class PendingApprovalResponse(BaseModel):
    """Schema for a registration accepted without creating an account."""

    status: Literal["pending_approval"] = "pending_approval"
    message: str = (
        "Your registration request was received. "
        "An administrator will contact you once it has been reviewed."
    )


class VerifyCodeRequest(BaseModel):
    """Schema for submitting a verification code."""

    user_id: UUID
    code: str = Field(..., min_length=4, max_length=12)

    @field_validator("code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        return v.strip()


class VerifyCodeResponse(BaseModel):
    """Schema for a successful verification."""

    verified: bool = True
    token: str


class ResendVerificationRequest(BaseModel):
    """Schema for requesting a fresh verification code."""

    user_id: UUID
    type: VerificationType = VerificationType.EMAIL_VERIFICATION


class ResendVerificationResponse(BaseModel):
    """Schema for a re-issued code. The code itself goes out by email only."""

    sent: bool = True
    expires_at: datetime
