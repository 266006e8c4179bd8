"""
CritterTrack Backend — Registration & Login Routes
==================================================

POST /api/register   create an account, returns {token, userId} (201)
POST /api/login      exchange credentials for {token, userId}

Both are unauthenticated. Neither response says whether an email exists,
except the 409 on registration, which is unavoidable.
"""

import logging

from fastapi import APIRouter, Depends, status

from crittertrack.dependencies import get_account_service
from crittertrack.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from crittertrack.schemas.common import ErrorResponse
from crittertrack.services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid email or password", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a new account",
)
async def register(
    body: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
) -> AuthResponse:
    result = await accounts.register(
        email=body.email,
        password=body.password,
        personal_name=body.personal_name,
        breeder_name=body.breeder_name,
        is_breeder_profile=body.is_breeder_profile,
    )
    return AuthResponse(token=result.token, user_id=result.user_id)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"description": "Malformed request body", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Log in with email and password",
)
async def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> AuthResponse:
    result = await accounts.login(body.email, body.password)
    return AuthResponse(token=result.token, user_id=result.user_id)
