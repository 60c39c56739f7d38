"""Pydantic schemas for Invitation API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.v1.schemas.common import normalize_email_field
from domain.entities.role import Role


class CreateInvitationRequest(BaseModel):
    """Schema for creating an invitation."""

    email: str = Field(..., min_length=3, max_length=255)
    role: Role
    name: str | None = Field(None, max_length=100)
    message: str | None = Field(None, max_length=2000)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email_field(v)


class UpdateInvitationRequest(BaseModel):
    """Schema for editing or resending a pending invitation.

    Omitted fields are left unchanged.
    """

    email: str | None = Field(None, min_length=3, max_length=255)
    role: Role | None = None
    name: str | None = Field(None, max_length=100)
    message: str | None = Field(None, max_length=2000)
    resend: bool = False

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        return normalize_email_field(v) if v is not None else None


class InvitationResponse(BaseModel):
    """Schema for Invitation response. The token never leaves the server."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "email": "user@example.com",
                "name": "Jane Doe",
                "role": "ADMIN_STAFF",
                "status": "pending",
                "message": "Welcome aboard",
                "sender_id": "789e4567-e89b-12d3-a456-426614174000",
                "created_at": "2026-02-01T10:00:00",
                "expires_at": "2026-02-02T10:00:00",
            }
        },
    )

    id: UUID
    email: str
    name: str | None = None
    role: Role
    status: str
    message: str | None = None
    sender_id: UUID | None = None
    created_at: datetime
    expires_at: datetime
    accepted_at: datetime | None = None


class InvitationListResponse(BaseModel):
    """Schema for list of Invitations response."""

    data: list[InvitationResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class InvitationDataResponse(BaseModel):
    """Schema for a single invitation wrapped in a data envelope."""

    data: InvitationResponse
    message: str | None = None


class BulkDeleteResponse(BaseModel):
    """Schema for invitation delete results."""

    deleted: int
    failed: int
    failed_ids: list[UUID] = Field(default_factory=list)
