import uuid
from typing import AsyncIterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.config import Settings
from todo_api.logger import get_logger
from todo_api.utils.errors import UnauthorizedError
from todo_api.utils.security import decode_access_token

log = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.session_factory() as session:
        yield session


async def get_current_user_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> uuid.UUID:
    """Resolve the user id from the bearer access token."""
    if credentials is None:
        log.debug("Missing bearer token", path=request.url.path)
        raise UnauthorizedError("Unauthorized")
    claims = decode_access_token(credentials.credentials, settings)
    return claims.user_id
