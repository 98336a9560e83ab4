"""Integration fixtures — a throwaway SQLite database and an app wired to it."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lablend.application.services import UserService
from lablend.config import get_settings
from lablend.domain.entities import User
from lablend.infrastructure.database import Base, build_engine, build_session_factory
from lablend.infrastructure.database.repositories import SQLAlchemyUserRepository
from lablend.infrastructure.database.session import get_db_session


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = build_engine(f"sqlite:///{tmp_path / 'lablend-test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture
async def admin(session_factory) -> User:
    async with session_factory() as session:
        user = await UserService(SQLAlchemyUserRepository(session)).ensure_admin("root")
        await session.commit()
    return user


@pytest.fixture
async def client(session_factory, tmp_path, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("MAX_UPLOAD_SIZE_MB", "1")
    get_settings.cache_clear()

    from lablend.main import create_app

    app = create_app()

    async def _test_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()
    get_settings.cache_clear()
