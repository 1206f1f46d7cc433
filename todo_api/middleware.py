import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response as StarletteResponse

from todo_api.logger import get_logger
from todo_api.schemas.response import FieldError, error_response
from todo_api.utils.errors import AppError

log = get_logger("todo_api.http")

SKIP_PATHS = frozenset({"/health", "/ping"})
SLOW_REQUEST_SECONDS = 1.0


def _is_debug(request: Request) -> bool:
    return request.app.state.settings.debug


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its latency and recover from unhandled errors.

    Debug mode logs all requests. Release mode only logs client errors,
    server errors and requests slower than ``SLOW_REQUEST_SECONDS``.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> StarletteResponse:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            log.error(
                "Unhandled exception",
                error=str(exc),
                path=request.url.path,
                method=request.method,
                ip=_client_ip(request),
                exc_info=True,
            )
            message = str(exc) if _is_debug(request) else "Internal server error"
            response = error_response(500, message)

        latency = time.perf_counter() - start
        if request.url.path not in SKIP_PATHS:
            self._log(request, response.status_code, latency)
        return response

    def _log(self, request: Request, status: int, latency: float) -> None:
        fields = {
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query,
            "status": status,
            "latency_ms": round(latency * 1000, 3),
            "ip": _client_ip(request),
            "user_agent": request.headers.get("user-agent", ""),
        }
        if _is_debug(request):
            if status >= 500:
                log.error("HTTP Request", **fields)
            elif status >= 400:
                log.warning("HTTP Request", **fields)
            else:
                log.info("HTTP Request", **fields)
            return

        if status >= 500:
            log.error("HTTP Request Error", **fields)
        elif status >= 400:
            log.warning("HTTP Request Client Error", **fields)
        elif latency > SLOW_REQUEST_SECONDS:
            log.warning("HTTP Slow Request", **fields)


async def app_error_handler(request: Request, exc: AppError):
    if exc.error is not None:
        log.debug("Request failed with underlying error", message=exc.message, error=str(exc.error))
    return error_response(exc.status_code, exc.client_message(_is_debug(request)))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        errors.append(FieldError(field=field, message=err.get("msg", "")).model_dump())
    log.debug("Request validation failed", path=request.url.path, errors=errors)
    return error_response(422, "Validation failed", errors)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


def install_error_handling(app: FastAPI) -> None:
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
