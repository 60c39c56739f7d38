"""Invitation API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import InvitationManager
from api.v1.dependencies import get_invitation_service
from api.v1.schemas.invitation import (
    BulkDeleteResponse,
    CreateInvitationRequest,
    InvitationDataResponse,
    InvitationListResponse,
    InvitationResponse,
    UpdateInvitationRequest,
)
from core.exceptions import ValidationError
from core.rate_limit import limiter
from domain.entities.invitation import Invitation
from domain.services.invitation_service import InvitationService

router = APIRouter(prefix="/invitations", tags=["invitations"])


def _to_response(invitation: Invitation) -> InvitationResponse:
    """Convert an Invitation entity to a response. Lazy expiry is applied here."""
    return InvitationResponse(
        id=invitation.id,
        email=invitation.email,
        name=invitation.name,
        role=invitation.role,
        status=invitation.effective_status().value,
        message=invitation.message,
        sender_id=invitation.sender_id,
        created_at=invitation.created_at,
        expires_at=invitation.expires_at,
        accepted_at=invitation.accepted_at,
    )


@router.get(
    "",
    response_model=InvitationListResponse,
    summary="List invitations",
    responses={
        200: {"description": "All invitations, newest first"},
        403: {"description": "Insufficient permissions (admin tier only)"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_invitations(
    request: Request,
    principal: InvitationManager,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationListResponse:
    """List every invitation. Tokens are never included."""
    invitations = await service.list_invitations(principal)
    data = [_to_response(inv) for inv in invitations]
    return InvitationListResponse(data=data, meta={"total": len(data)})


@router.post(
    "",
    response_model=InvitationDataResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create invitation",
    responses={
        201: {"description": "Invitation created and emailed"},
        403: {"description": "Insufficient permissions (admin tier only)"},
        409: {"description": "Account or active invitation already exists for this email"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_invitation(
    request: Request,
    body: CreateInvitationRequest,
    principal: InvitationManager,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationDataResponse:
    """
    Invite someone to register with a given role.

    The invitation token is delivered by email only and is not part of the response.
    """
    invitation, _ = await service.create_invitation(
        principal,
        email=body.email,
        role=body.role,
        name=body.name,
        message=body.message,
    )
    return InvitationDataResponse(
        data=_to_response(invitation),
        message="Invitation sent",
    )


@router.put(
    "/{invitation_id}",
    response_model=InvitationDataResponse,
    summary="Edit or resend invitation",
    responses={
        200: {"description": "Invitation updated (and resent if requested)"},
        400: {"description": "Invitation is not pending"},
        403: {"description": "Insufficient permissions (admin tier only)"},
        404: {"description": "Invitation not found"},
        409: {"description": "New email already registered or invited"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_invitation(
    request: Request,
    invitation_id: UUID,
    body: UpdateInvitationRequest,
    principal: InvitationManager,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationDataResponse:
    """Edit a pending invitation. `resend: true` rotates the token and emails it again."""
    invitation, changed = await service.update_invitation(
        principal,
        invitation_id,
        email=body.email,
        name=body.name,
        role=body.role,
        message=body.message,
        resend=body.resend,
    )
    if body.resend:
        message = "Invitation resent"
    elif changed:
        message = "Invitation updated"
    else:
        message = "No changes"
    return InvitationDataResponse(data=_to_response(invitation), message=message)


@router.patch(
    "/{invitation_id}/revoke",
    response_model=InvitationDataResponse,
    summary="Revoke invitation",
    responses={
        200: {"description": "Invitation revoked"},
        400: {"description": "Invitation is not pending"},
        403: {"description": "Insufficient permissions (admin tier only)"},
        404: {"description": "Invitation not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def revoke_invitation(
    request: Request,
    invitation_id: UUID,
    principal: InvitationManager,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationDataResponse:
    """Revoke a pending invitation so its token can no longer be redeemed."""
    invitation = await service.revoke_invitation(principal, invitation_id)
    return InvitationDataResponse(data=_to_response(invitation), message="Invitation revoked")


@router.delete(
    "",
    response_model=BulkDeleteResponse,
    summary="Delete invitations",
    responses={
        200: {"description": "Delete results"},
        400: {"description": "Neither id nor ids given, or an ID is malformed"},
        403: {"description": "Insufficient permissions (admin tier only)"},
        404: {"description": "Single invitation not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_invitations(
    request: Request,
    principal: InvitationManager,
    service: InvitationService = Depends(get_invitation_service),
    id: UUID | None = Query(None, description="Delete a single invitation"),
    ids: str | None = Query(None, description="Comma-separated invitation IDs to delete"),
) -> BulkDeleteResponse:
    """Delete one invitation (`?id=`) or several (`?ids=a,b`) in any status."""
    if id is not None:
        await service.delete_invitation(principal, id)
        return BulkDeleteResponse(deleted=1, failed=0)

    invitation_ids = _parse_ids(ids)
    result = await service.delete_invitations(principal, invitation_ids)
    return BulkDeleteResponse(
        deleted=result.deleted,
        failed=result.failed,
        failed_ids=result.failed_ids,
    )


def _parse_ids(raw: str | None) -> list[UUID]:
    parts = [part.strip() for part in (raw or "").split(",") if part.strip()]
    if not parts:
        raise ValidationError("Provide an invitation id or a comma-separated list of ids")
    try:
        return [UUID(part) for part in parts]
    except ValueError as exc:
        raise ValidationError("Invalid invitation id", details={"ids": raw}) from exc
