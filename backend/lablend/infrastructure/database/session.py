"""SQLAlchemy database session and engine configuration."""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from lablend.config import get_settings


def _get_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to an async one."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def configure_sqlite_locking(engine: AsyncEngine) -> None:
    """Make pysqlite honour transactions and SAVEPOINTs.

    pysqlite defers BEGIN until the first DML statement, which both breaks
    SAVEPOINT and lets two lending transactions read the same free unit.
    Disabling its implicit handling and emitting ``BEGIN IMMEDIATE`` takes
    the write lock up front.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite engines get explicit transaction control."""
    async_url = _get_async_url(database_url)
    connect_args = {"timeout": 30} if async_url.startswith("sqlite") else {}
    engine = create_async_engine(
        async_url, echo=echo, future=True, connect_args=connect_args
    )
    if engine.dialect.name == "sqlite":
        configure_sqlite_locking(engine)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


settings = get_settings()

engine = build_engine(settings.database_url, echo=(settings.app_env == "development"))

async_session_factory = build_session_factory(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency — yields an async DB session per request."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
