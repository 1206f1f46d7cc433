import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.models.user import User
from todo_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def find_by_username(self, db: AsyncSession, username: str) -> User | None:
        return await self.first(db, username=username)

    async def find_by_id(self, db: AsyncSession, user_id: uuid.UUID) -> User | None:
        return await self.get(db, user_id)

    async def create_user(self, db: AsyncSession, username: str, hashed_password: str) -> User:
        return await self.create(db, User(username=username, password=hashed_password))
