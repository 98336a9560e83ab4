"""SQLAlchemy implementation of the lending store's atomic unit of work.

``run_atomic`` opens a transaction on the given session, or a SAVEPOINT when
the session is already inside one (the per-request session), so an aborted
transition rolls back without touching the rest of the request.

Concurrency:
    * Selection takes a row lock with ``FOR UPDATE SKIP LOCKED`` on
      PostgreSQL, so two concurrent borrows pick different units.
    * The holder change is a compare-and-set UPDATE guarded on the
      expected holder; a zero rowcount aborts the transaction.
    * On SQLite, transactions start with ``BEGIN IMMEDIATE`` (see
      ``session.py``), which serializes writers for the whole unit of work.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lablend.application.interfaces import AtomicStore, LendingTransaction
from lablend.domain.entities import AssetStatus, AssetUnit, LendRecord, User
from lablend.infrastructure.database.models import AssetUnitModel, UserModel

from ._mapping import asset_to_entity, record_to_model, user_to_entity


T = TypeVar("T")


class SQLAlchemyLendingTransaction(LendingTransaction):
    """LendingTransaction bound to one open session transaction."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_user(self, user_id: str) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return user_to_entity(result) if result else None

    async def _first_unit(self, *criteria) -> AssetUnit | None:
        stmt = (
            select(AssetUnitModel)
            .where(AssetUnitModel.scrapped.is_(False), *criteria)
            .order_by(AssetUnitModel.created_at, AssetUnitModel.id)
            .limit(1)
            .with_for_update(skip_locked=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return asset_to_entity(model) if model else None

    async def next_available_unit(self, group_key: str) -> AssetUnit | None:
        return await self._first_unit(
            AssetUnitModel.group_key == group_key,
            AssetUnitModel.current_holder.is_(None),
        )

    async def next_held_unit(self, group_key: str, user_id: str) -> AssetUnit | None:
        return await self._first_unit(
            AssetUnitModel.group_key == group_key,
            AssetUnitModel.current_holder == user_id,
        )

    async def compare_and_set_holder(
        self, unit_id: str, expected: str | None, new_holder: str | None
    ) -> bool:
        if expected is None:
            guard = AssetUnitModel.current_holder.is_(None)
        else:
            guard = AssetUnitModel.current_holder == expected

        status = AssetStatus.BORROWED if new_holder else AssetStatus.AVAILABLE
        stmt = (
            update(AssetUnitModel)
            .where(
                AssetUnitModel.id == unit_id,
                AssetUnitModel.scrapped.is_(False),
                guard,
            )
            .values(
                current_holder=new_holder,
                status=status.value,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def append_record(self, record: LendRecord) -> LendRecord:
        self._session.add(record_to_model(record))
        await self._session.flush()
        return record


class SQLAlchemyAtomicStore(AtomicStore):
    """Runs each lending unit of work as one (possibly nested) transaction."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def run_atomic(self, fn: Callable[[LendingTransaction], Awaitable[T]]) -> T:
        if self._session.in_transaction():
            scope = self._session.begin_nested()
        else:
            scope = self._session.begin()
        async with scope:
            return await fn(SQLAlchemyLendingTransaction(self._session))
