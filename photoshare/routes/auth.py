"""
Photoshare Backend - Authentication Routes
===========================================

What:  Account registration and login.
Who:   Any client; these are the only routes that hand out bearer tokens.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from photoshare.schemas.common import ErrorResponse
from photoshare.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=UserResponse,
    responses={
        400: {"description": "Missing or empty field", "model": ErrorResponse},
        409: {"description": "Username or email already registered", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """Register a new user. The response never includes the password hash."""
    user = await user_service.register(
        db=db,
        username=body.username,
        email=body.email,
        password=body.password,
    )
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Missing or empty field", "model": ErrorResponse},
        401: {"description": "Invalid login credentials", "model": ErrorResponse},
    },
    summary="Exchange credentials for a bearer token",
    description="`emailOrUsername` is matched against both usernames and emails.",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    token, user = await user_service.login(
        db=db,
        identifier=body.email_or_username,
        password=body.password,
    )
    return LoginResponse(token=token, user=UserResponse.model_validate(user))
