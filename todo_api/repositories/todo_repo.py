import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.models.todo import Todo
from todo_api.repositories.base import BaseRepository


class TodoRepository(BaseRepository[Todo]):
    model = Todo

    async def find_all_by_user(self, db: AsyncSession, user_id: uuid.UUID) -> list[Todo]:
        return await self.list(
            db,
            where={"user_id": user_id},
            order_by=(Todo.created_at.asc(), Todo.id.asc()),
        )

    async def find_by_id_and_user(self, db: AsyncSession, todo_id: uuid.UUID, user_id: uuid.UUID) -> Todo | None:
        return await self.first(db, id=todo_id, user_id=user_id)
