"""Concrete repository implementation for User backed by SQLAlchemy."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lablend.application.interfaces import UserRepository
from lablend.domain.entities import User
from lablend.infrastructure.database.models import UserModel

from ._mapping import user_to_entity


class SQLAlchemyUserRepository(UserRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return user_to_entity(result) if result else None

    async def get_by_identity(self, identity: str) -> User | None:
        stmt = select(UserModel).where(UserModel.identity == identity)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return user_to_entity(model) if model else None

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[User]:
        stmt = select(UserModel).order_by(UserModel.created_at).offset(skip).limit(limit)
        result = await self._session.execute(stmt)
        return [user_to_entity(row) for row in result.scalars().all()]

    async def create(self, user: User) -> User:
        model = UserModel(
            id=user.id,
            identity=user.identity,
            role=user.role.value,
            is_active=user.is_active,
            created_at=user.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return user_to_entity(model)

    async def update(self, user: User) -> User:
        model = await self._session.get(UserModel, user.id)
        if model is None:
            raise ValueError(f"User {user.id} not found in database")
        model.role = user.role.value
        model.is_active = user.is_active
        await self._session.flush()
        return user_to_entity(model)
