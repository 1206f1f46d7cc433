import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.models.refresh_token import RefreshToken
from todo_api.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    model = RefreshToken

    async def create_token(
        self, db: AsyncSession, token: str, user_id: uuid.UUID, expires_at: datetime
    ) -> RefreshToken:
        return await self.create(db, RefreshToken(token=token, user_id=user_id, expires_at=expires_at))

    async def find_by_token(self, db: AsyncSession, token: str) -> RefreshToken | None:
        return await self.first(db, token=token)

    async def delete_by_token(self, db: AsyncSession, token: str, user_id: uuid.UUID | None = None) -> int:
        if user_id is None:
            return await self.delete_where(db, token=token)
        return await self.delete_where(db, token=token, user_id=user_id)

    async def consume(self, db: AsyncSession, stored: RefreshToken) -> int:
        return await self.delete_where(db, id=stored.id, token=stored.token)
