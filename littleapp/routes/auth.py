"""
Little Application: Auth Route Handlers
==========================================

What:  Register, login, logout, the current user, and self-service
       updates of name/email and password under /api/v1/auth.
How:   Register, login and updatepassword return `{success, token}` and also
       set the token as an httponly `token` cookie. Protected routes accept
       either `Authorization: Bearer <token>` or that cookie.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from littleapp.config import Settings, get_settings
from littleapp.database import get_db_session
from littleapp.deps import TOKEN_COOKIE, get_current_user
from littleapp.models.user import User
from littleapp.schemas.common import DataResponse, ErrorResponse
from littleapp.schemas.user import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
    UserResponse,
)
from littleapp.services.auth_service import auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])

_AUTH_REQUIRED = {401: {"description": "Missing or invalid token", "model": ErrorResponse}}


def _token_response(response: Response, token: str, settings: Settings) -> TokenResponse:
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=settings.jwt_expire_minutes * 60,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
    )
    return TokenResponse(token=token)


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    responses={400: {"description": "Invalid body or email taken", "model": ErrorResponse}},
    summary="Register a user",
)
async def register(
    body: RegisterRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    token = await auth_service.register(db, body, settings)
    return _token_response(response, token, settings)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in and receive a token",
)
async def login(
    body: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    token = await auth_service.login(db, body, settings)
    return _token_response(response, token, settings)


@router.get(
    "/logout",
    response_model=DataResponse[dict],
    summary="Clear the token cookie",
)
async def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE)
    return DataResponse(data={})


@router.get(
    "/me",
    response_model=DataResponse[UserResponse],
    responses=_AUTH_REQUIRED,
    summary="The current user",
)
async def me(user: User = Depends(get_current_user)):
    return DataResponse(data=UserResponse.model_validate(user))


@router.put(
    "/updatedetails",
    response_model=DataResponse[UserResponse],
    responses={**_AUTH_REQUIRED, 400: {"description": "Invalid body or email taken", "model": ErrorResponse}},
    summary="Update the current user's name or email",
)
async def update_details(
    body: UpdateDetailsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    updated = await auth_service.update_details(db, user, body)
    return DataResponse(data=UserResponse.model_validate(updated))


@router.put(
    "/updatepassword",
    response_model=TokenResponse,
    responses=_AUTH_REQUIRED,
    summary="Change the current user's password",
)
async def update_password(
    body: UpdatePasswordRequest,
    response: Response,
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    token = await auth_service.update_password(db, user, body, settings)
    return _token_response(response, token, settings)
