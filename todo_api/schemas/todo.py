import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from todo_api.utils.clock import as_utc


class TodoBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=1000)


class TodoCreate(TodoBase):
    pass


class TodoUpdate(TodoBase):
    completed: bool = False


class TodoOut(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    completed: bool
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    model_config = ConfigDict(from_attributes=True)


class TodoListResponse(BaseModel):
    todos: list[TodoOut]


class TodoResponse(BaseModel):
    todo: TodoOut
