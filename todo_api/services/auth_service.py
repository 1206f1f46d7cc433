import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.config import Settings
from todo_api.logger import get_logger
from todo_api.repositories.refresh_token_repo import RefreshTokenRepository
from todo_api.repositories.user_repo import UserRepository
from todo_api.schemas.auth import LoginResponse, RefreshTokenResponse, RegisterResponse, UserOut
from todo_api.utils.clock import as_utc, utcnow
from todo_api.utils.errors import (
    InternalServerError,
    NotFoundError,
    UnauthorizedError,
    UnprocessableEntityError,
)
from todo_api.utils.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    refresh_token_expiry,
    verify_password,
)

log = get_logger(__name__)

LOGIN_FAILED = "Username or password wrong"
REFRESH_TOKEN_MISSING = "Refresh token not exist"


class AuthService:
    def __init__(self):
        self.users = UserRepository()
        self.tokens = RefreshTokenRepository()

    async def login(self, db: AsyncSession, settings: Settings, username: str, password: str) -> LoginResponse:
        user = await self.users.find_by_username(db, username)
        if user is None:
            log.debug("User not found during login", username=username)
            raise UnauthorizedError(LOGIN_FAILED)

        if not verify_password(password, user.password):
            log.debug("Invalid password attempt", username=username)
            raise UnauthorizedError(LOGIN_FAILED)

        access_token, refresh_token = await self._issue_tokens(db, settings, user.id, operation="Login")
        return LoginResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            user=UserOut.model_validate(user),
        )

    async def register(self, db: AsyncSession, username: str, password: str) -> RegisterResponse:
        if await self.users.exists(db, username=username):
            log.debug("Username already exists during registration", username=username)
            raise UnprocessableEntityError("Username already exists")

        try:
            user = await self.users.create_user(db, username, hash_password(password))
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            log.debug("Username taken by a concurrent registration", username=username)
            raise UnprocessableEntityError("Username already exists", exc)
        except SQLAlchemyError as exc:
            await db.rollback()
            log.error("Failed to create user", operation="Create user", username=username, error=str(exc))
            raise InternalServerError("Failed to create user", exc)

        log.info("User registered", user_id=str(user.id), username=username)
        return RegisterResponse(user=UserOut.model_validate(user))

    async def logout(self, db: AsyncSession, user_id: uuid.UUID, refresh_token: str) -> None:
        try:
            deleted = await self.tokens.delete_by_token(db, refresh_token, user_id=user_id)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            log.error(
                "Failed to delete refresh token during logout",
                operation="Logout - delete refresh token",
                user_id=str(user_id),
                error=str(exc),
            )
            raise InternalServerError("Failed to logout", exc)

        if deleted == 0:
            log.debug("Refresh token not found during logout", user_id=str(user_id))
            raise NotFoundError(REFRESH_TOKEN_MISSING)

    async def refresh(self, db: AsyncSession, settings: Settings, refresh_token: str) -> RefreshTokenResponse:
        """Exchange a refresh token for a new token pair.

        The presented token is consumed: it is deleted whether it was still
        valid or already expired.
        """
        stored = await self.tokens.find_by_token(db, refresh_token)
        if stored is None:
            log.debug("Refresh token not found")
            raise NotFoundError(REFRESH_TOKEN_MISSING)

        user_id = stored.user_id
        expired = as_utc(stored.expires_at) <= utcnow()
        # conditional delete: only one concurrent exchange may consume the row
        if await self.tokens.consume(db, stored) != 1:
            log.debug("Refresh token already consumed", user_id=str(user_id))
            raise NotFoundError(REFRESH_TOKEN_MISSING)

        if expired:
            await db.commit()
            log.debug("Expired refresh token presented", user_id=str(user_id))
            raise UnauthorizedError("Refresh token expired")

        access_token, new_refresh_token = await self._issue_tokens(db, settings, user_id, operation="Refresh token")
        return RefreshTokenResponse(access_token=access_token, refresh_token=new_refresh_token)

    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> UserOut:
        user = await self.users.find_by_id(db, user_id)
        if user is None:
            log.debug("Authenticated user no longer exists", user_id=str(user_id))
            raise NotFoundError("User not found")
        return UserOut.model_validate(user)

    async def _issue_tokens(
        self, db: AsyncSession, settings: Settings, user_id: uuid.UUID, operation: str
    ) -> tuple[str, str]:
        access_token = create_access_token(user_id, settings)
        refresh_token = create_refresh_token()
        try:
            await self.tokens.create_token(db, refresh_token, user_id, refresh_token_expiry(settings))
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            log.error(
                "Failed to save refresh token",
                operation=operation,
                user_id=str(user_id),
                error=str(exc),
            )
            raise InternalServerError("Failed to save refresh token", exc)
        return access_token, refresh_token