import base64
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel, field_validator

from todo_api.config import Settings
from todo_api.utils.clock import utcnow
from todo_api.utils.errors import UnauthorizedError

JWT_ALGORITHM = "HS256"
REFRESH_TOKEN_BYTES = 64

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenClaims(BaseModel):
    sub: str
    iss: str
    iat: int
    exp: int

    @field_validator("sub")
    @classmethod
    def sub_is_uuid(cls, value: str) -> str:
        uuid.UUID(value)
        return value

    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.sub)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: uuid.UUID, settings: Settings) -> str:
    now = utcnow()
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "iss": settings.app_name,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=settings.jwt_ttl_hours)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> TokenClaims:
    """Verify signature, expiry and issuer of an access token.

    Raises:
        UnauthorizedError: if the token is expired, tampered with or does
            not carry a UUID subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            issuer=settings.app_name,
            options={"require": ["sub", "exp", "iat"]},
        )
        claims = TokenClaims(**payload)
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Token has expired", exc)
    except (jwt.InvalidTokenError, ValueError) as exc:
        raise UnauthorizedError("Invalid token", exc)
    return claims


def create_refresh_token() -> str:
    """64 random bytes, URL-safe base64 encoded."""
    return base64.urlsafe_b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")


def refresh_token_expiry(settings: Settings) -> datetime:
    return utcnow() + timedelta(hours=settings.refresh_ttl_hours)
