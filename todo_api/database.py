from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from todo_api.logger import get_logger

log = get_logger(__name__)

Base = declarative_base()


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for ``database_url``.

    In-memory SQLite needs a single shared connection, otherwise every
    checkout would see an empty database.
    """
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_async_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(database_url, pool_pre_ping=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    # every model has to be registered on Base.metadata
    from todo_api.models import refresh_token, todo, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("Database tables ensured", tables=sorted(Base.metadata.tables))


async def ping_database(engine: AsyncEngine) -> None:
    url = engine.url
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        log.error("Failed to connect to database", host=url.host, database=url.database, error=str(exc))
        raise
    log.info("Successfully connected to database", host=url.host, database=url.database, port=url.port)
