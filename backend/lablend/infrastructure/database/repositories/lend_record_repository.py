"""Read-only repository over the lend record log."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lablend.application.interfaces import LendRecordRepository
from lablend.domain.entities import LendRecord
from lablend.infrastructure.database.models import LendRecordModel

from ._mapping import record_to_entity


class SQLAlchemyLendRecordRepository(LendRecordRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_all(
        self,
        *,
        user_id: str | None = None,
        group_key: str | None = None,
    ) -> list[LendRecord]:
        stmt = select(LendRecordModel)
        if user_id is not None:
            stmt = stmt.where(LendRecordModel.user == user_id)
        if group_key is not None:
            stmt = stmt.where(LendRecordModel.group_key == group_key)

        stmt = stmt.order_by(LendRecordModel.occurred_at.desc(), LendRecordModel.id.desc())
        result = await self._session.execute(stmt)
        return [record_to_entity(row) for row in result.scalars().all()]
