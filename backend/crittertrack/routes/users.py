"""
CritterTrack Backend — Current User Routes
==========================================

GET  /api/user      the caller's own record
POST /api/profile   partial profile update, returns the updated record
"""

from fastapi import APIRouter, Depends

from crittertrack.dependencies import get_account_service, get_identity
from crittertrack.schemas.common import ErrorResponse
from crittertrack.schemas.user import UpdateProfileRequest, UserResponse
from crittertrack.services.account_service import AccountService
from crittertrack.services.auth_gate import Identity

router = APIRouter(prefix="/api", tags=["Users"])


@router.get(
    "/user",
    response_model=UserResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "User no longer exists", "model": ErrorResponse},
    },
    summary="Get the authenticated user",
)
async def get_current_user(
    identity: Identity = Depends(get_identity),
    accounts: AccountService = Depends(get_account_service),
) -> UserResponse:
    user = await accounts.get_current_user(identity)
    return UserResponse.model_validate(user)


@router.post(
    "/profile",
    response_model=UserResponse,
    responses={
        400: {"description": "Invalid profile data", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "User no longer exists", "model": ErrorResponse},
    },
    summary="Update the authenticated user's profile",
    description="Only the fields present (and non-null) in the body are changed.",
)
async def update_profile(
    body: UpdateProfileRequest,
    identity: Identity = Depends(get_identity),
    accounts: AccountService = Depends(get_account_service),
) -> UserResponse:
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    user = await accounts.update_profile(identity, fields)
    return UserResponse.model_validate(user)
