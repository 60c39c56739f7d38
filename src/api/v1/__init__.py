"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.auth import router as auth_router
from api.v1.routes.invitations import router as invitations_router
from api.v1.schemas.common import ErrorResponse

# Every error shares one body shape; route-level entries add the descriptions
router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
)
router.include_router(auth_router)
router.include_router(invitations_router)
