import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.dependencies import get_current_user_id, get_db
from todo_api.logger import get_logger
from todo_api.schemas.response import Response, created, ok
from todo_api.schemas.todo import TodoCreate, TodoListResponse, TodoResponse, TodoUpdate
from todo_api.services.todo_service import TodoService
from todo_api.utils.errors import AppError

router = APIRouter(dependencies=[Depends(get_current_user_id)])
service = TodoService()
log = get_logger(__name__)


def _log_failure(operation: str, exc: AppError, user_id: uuid.UUID, todo_id: uuid.UUID | None = None) -> None:
    fields = {
        "operation": operation,
        "status_code": exc.status_code,
        "message": exc.message,
        "user_id": str(user_id),
    }
    if todo_id is not None:
        fields["todo_id"] = str(todo_id)
    log.warning(f"{operation} request failed", **fields)


@router.get("", response_model=Response[TodoListResponse], summary="Get all todos")
async def list_todos(user_id: uuid.UUID = Depends(get_current_user_id), db: AsyncSession = Depends(get_db)):
    try:
        data = await service.list_todos(db, user_id)
    except AppError as exc:
        _log_failure("Get all todos", exc, user_id)
        raise
    return ok("Todos retrieved successfully", data)


@router.post("", response_model=Response[TodoResponse], status_code=201, summary="Create todo")
async def create_todo(
    todo_in: TodoCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        data = await service.create_todo(db, user_id, todo_in)
    except AppError as exc:
        _log_failure("Create todo", exc, user_id)
        raise
    return created("Success to create todo", data)


@router.put("/{todo_id}", response_model=Response[TodoResponse], summary="Update todo")
async def update_todo(
    todo_id: uuid.UUID,
    todo_in: TodoUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        data = await service.update_todo(db, user_id, todo_id, todo_in)
    except AppError as exc:
        _log_failure("Update todo", exc, user_id, todo_id)
        raise
    return ok("Todo updated successfully", data)


@router.delete("/{todo_id}", response_model=Response[None], summary="Delete todo")
async def delete_todo(
    todo_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.delete_todo(db, user_id, todo_id)
    except AppError as exc:
        _log_failure("Delete todo", exc, user_id, todo_id)
        raise
    return ok("Todo deleted successfully")
