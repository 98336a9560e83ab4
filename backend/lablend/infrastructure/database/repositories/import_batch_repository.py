"""Concrete repository implementation for ImportBatch backed by SQLAlchemy."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lablend.application.interfaces import ImportBatchRepository
from lablend.domain.entities import ImportBatch
from lablend.infrastructure.database.models import ImportBatchModel

from ._mapping import batch_to_entity


class SQLAlchemyImportBatchRepository(ImportBatchRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, batch: ImportBatch) -> ImportBatch:
        model = ImportBatchModel(
            id=batch.id,
            source_file_ref=batch.source_file_ref,
            created_by=batch.created_by,
            notes=batch.notes,
            created_at=batch.created_at,
        )
        async with self._session.begin_nested():
            self._session.add(model)
            await self._session.flush()
        return batch_to_entity(model)

    async def get_by_id(self, batch_id: str) -> ImportBatch | None:
        result = await self._session.get(ImportBatchModel, batch_id)
        return batch_to_entity(result) if result else None

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ImportBatch]:
        stmt = (
            select(ImportBatchModel)
            .order_by(ImportBatchModel.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [batch_to_entity(row) for row in result.scalars().all()]
