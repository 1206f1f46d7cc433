from typing import Any, Generic, Optional, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel

T = TypeVar("T")


class Response(BaseModel, Generic[T]):
    message: str
    data: Optional[T] = None
    status_code: int


class FieldError(BaseModel):
    field: str
    message: str


def ok(message: str, data: Any = None) -> Response:
    return Response(message=message, data=data, status_code=200)


def created(message: str, data: Any = None) -> Response:
    return Response(message=message, data=data, status_code=201)


def error_response(status_code: int, message: str, data: Any = None) -> JSONResponse:
    body = Response(message=message, data=data, status_code=status_code)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
