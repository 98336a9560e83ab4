"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from lablend.config import get_settings
from lablend.infrastructure.database import Base, engine
from lablend.infrastructure.database.session import async_session_factory
from lablend.infrastructure.database.repositories import SQLAlchemyUserRepository
from lablend.application.services import UserService
from lablend.infrastructure.logging.log_config import setup_logging
from lablend.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def _ensure_database_exists() -> None:
    """Create the configured PostgreSQL database when it is missing.

    SQLite files are created on first connect, so only PostgreSQL URLs are
    handled. Failures are logged; ``create_all`` surfaces the real error.
    """
    url = make_url(get_settings().database_url)
    if not url.drivername.startswith("postgresql") or not url.database:
        return

    import asyncpg

    maintenance = url.set(drivername="postgresql", database="postgres")
    try:
        conn = await asyncpg.connect(maintenance.render_as_string(hide_password=False))
    except (OSError, asyncpg.PostgresError) as exc:
        logger.warning("Could not reach PostgreSQL to check '%s': %s", url.database, exc)
        return

    try:
        if await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", url.database):
            logger.debug("Database '%s' already exists", url.database)
            return
        # CREATE DATABASE cannot run inside a transaction block
        await conn.execute(f'CREATE DATABASE "{url.database}"')
        logger.info("Created database '%s'", url.database)
    except asyncpg.PostgresError as exc:
        logger.warning("Could not create database '%s': %s", url.database, exc)
    finally:
        await conn.close()


async def _seed_bootstrap_admin() -> None:
    """Ensure the configured bootstrap admin exists. Idempotent."""
    identity = get_settings().bootstrap_admin_identity.strip()
    if not identity:
        logger.debug("No bootstrap admin configured")
        return

    async with async_session_factory() as session:
        service = UserService(SQLAlchemyUserRepository(session))
        await service.ensure_admin(identity)
        await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create tables, seed the admin, prepare storage."""
    settings = get_settings()
    setup_logging()

    await _ensure_database_exists()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await _seed_bootstrap_admin()

    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    yield

    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "lablend.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
