import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.logger import get_logger
from todo_api.models.todo import Todo
from todo_api.repositories.todo_repo import TodoRepository
from todo_api.schemas.todo import TodoCreate, TodoListResponse, TodoOut, TodoResponse, TodoUpdate
from todo_api.utils.errors import InternalServerError, NotFoundError

log = get_logger(__name__)


class TodoService:
    def __init__(self):
        self.repo = TodoRepository()

    async def list_todos(self, db: AsyncSession, user_id: uuid.UUID) -> TodoListResponse:
        todos = await self.repo.find_all_by_user(db, user_id)
        return TodoListResponse(todos=[TodoOut.model_validate(t) for t in todos])

    async def create_todo(self, db: AsyncSession, user_id: uuid.UUID, todo_in: TodoCreate) -> TodoResponse:
        todo = Todo(**todo_in.model_dump(), completed=False, user_id=user_id)
        try:
            await self.repo.create(db, todo)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            log.error("Failed to create todo", operation="Create todo", user_id=str(user_id), error=str(exc))
            raise InternalServerError("Failed to create todo", exc)
        return TodoResponse(todo=TodoOut.model_validate(todo))

    async def update_todo(
        self, db: AsyncSession, user_id: uuid.UUID, todo_id: uuid.UUID, todo_in: TodoUpdate
    ) -> TodoResponse:
        todo = await self._get_owned(db, user_id, todo_id, operation="Update todo")
        todo.title = todo_in.title
        todo.description = todo_in.description
        todo.completed = todo_in.completed
        try:
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            log.error(
                "Failed to update todo",
                operation="Update todo",
                todo_id=str(todo_id),
                user_id=str(user_id),
                error=str(exc),
            )
            raise InternalServerError("Failed to update todo", exc)
        return TodoResponse(todo=TodoOut.model_validate(todo))

    async def delete_todo(self, db: AsyncSession, user_id: uuid.UUID, todo_id: uuid.UUID) -> None:
        todo = await self._get_owned(db, user_id, todo_id, operation="Delete todo")
        try:
            await self.repo.remove(db, todo)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            log.error(
                "Failed to delete todo",
                operation="Delete todo",
                todo_id=str(todo_id),
                user_id=str(user_id),
                error=str(exc),
            )
            raise InternalServerError("Failed to delete todo", exc)

    async def _get_owned(self, db: AsyncSession, user_id: uuid.UUID, todo_id: uuid.UUID, operation: str) -> Todo:
        # another user's todo is reported exactly like a missing one
        todo = await self.repo.find_by_id_and_user(db, todo_id, user_id)
        if todo is None:
            log.debug("Todo not found", operation=operation, todo_id=str(todo_id), user_id=str(user_id))
            raise NotFoundError("Todo not found")
        return todo
