from contextlib import asynccontextmanager

from fastapi import FastAPI

from todo_api.config import Settings, load_settings
from todo_api.database import build_engine, build_session_factory, create_tables, ping_database
from todo_api.logger import setup_logger
from todo_api.middleware import install_error_handling
from todo_api.routers import auth_router, todo_router

API_DESCRIPTION = (
    "Authenticated todo service.\n\n"
    "Auth: send `Authorization: Bearer <access_token>` on protected routes."
)

openapi_tags = [
    {"name": "Auth", "description": "Register, login, logout, token refresh and current user."},
    {"name": "Todo", "description": "Todo items of the authenticated user."},
    {"name": "Health", "description": "Service health checks."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    log = app.state.logger
    await ping_database(app.state.engine)
    if settings.db_auto_migrate:
        await create_tables(app.state.engine)
    log.info("Starting server", address=settings.app_url, mode=settings.app_mode)
    yield
    log.info("Shutting down server...")
    await app.state.engine.dispose()
    log.info("Server exited")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    logger = setup_logger(settings.app_mode)

    app = FastAPI(
        title=settings.app_name,
        description=API_DESCRIPTION,
        version="1.0.0",
        openapi_tags=openapi_tags,
        docs_url="/swagger",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.logger = logger
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)

    install_error_handling(app)

    app.include_router(auth_router.router, prefix="/api/v1/auth", tags=["Auth"])
    app.include_router(todo_router.router, prefix="/api/v1/todo", tags=["Todo"])

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
