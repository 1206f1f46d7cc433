import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.config import Settings
from todo_api.dependencies import get_current_user_id, get_db, get_settings
from todo_api.logger import get_logger
from todo_api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    RefreshTokenRequest,
    RefreshTokenResponse,
    RegisterRequest,
    RegisterResponse,
    UserOut,
)
from todo_api.schemas.response import Response, created, ok
from todo_api.services.auth_service import AuthService
from todo_api.utils.errors import AppError

router = APIRouter()
service = AuthService()
log = get_logger(__name__)


@router.post("/login", response_model=Response[LoginResponse], summary="User login")
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        data = await service.login(db, settings, body.username, body.password)
    except AppError as exc:
        log.warning(
            "Login request failed",
            operation="Login",
            status_code=exc.status_code,
            message=exc.message,
            username=body.username,
        )
        raise
    return ok("Success to login", data)


@router.post("/register", response_model=Response[RegisterResponse], status_code=201, summary="User registration")
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    try:
        data = await service.register(db, body.username, body.password)
    except AppError as exc:
        log.warning(
            "Register request failed",
            operation="Register",
            status_code=exc.status_code,
            message=exc.message,
            username=body.username,
        )
        raise
    return created("Success to register", data)


@router.post("/logout", response_model=Response[None], status_code=201, summary="User logout")
async def logout(
    body: LogoutRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.logout(db, user_id, body.refresh_token)
    except AppError as exc:
        log.warning(
            "Logout request failed",
            operation="Logout",
            status_code=exc.status_code,
            message=exc.message,
            user_id=str(user_id),
        )
        raise
    return created("Success to logout")


@router.post(
    "/refresh-token",
    response_model=Response[RefreshTokenResponse],
    status_code=201,
    summary="Exchange a refresh token for a new token pair",
)
async def refresh_token(
    body: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        data = await service.refresh(db, settings, body.refresh_token)
    except AppError as exc:
        log.warning(
            "Refresh token request failed",
            operation="Refresh token",
            status_code=exc.status_code,
            message=exc.message,
        )
        raise
    return created("Success to refresh token", data)


@router.get("/me", response_model=Response[UserOut], summary="Get current user")
async def me(user_id: uuid.UUID = Depends(get_current_user_id), db: AsyncSession = Depends(get_db)):
    try:
        data = await service.get_user(db, user_id)
    except AppError as exc:
        log.warning(
            "Get current user failed",
            operation="Me",
            status_code=exc.status_code,
            message=exc.message,
            user_id=str(user_id),
        )
        raise
    return ok("Success to get user", data)
