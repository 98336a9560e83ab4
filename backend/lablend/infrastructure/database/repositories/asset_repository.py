"""Concrete repository implementation for AssetUnit backed by SQLAlchemy."""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lablend.application.interfaces import AssetRepository
from lablend.domain.entities import AssetUnit
from lablend.infrastructure.database.models import AssetUnitModel

from ._mapping import asset_to_entity, asset_to_model


class SQLAlchemyAssetRepository(AssetRepository):
    """Implements the AssetRepository port using SQLAlchemy async sessions.

    ``create`` runs inside a SAVEPOINT so a rejected row leaves the
    surrounding request transaction usable for the rows after it.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, unit_id: str) -> AssetUnit | None:
        result = await self._session.get(AssetUnitModel, unit_id)
        return asset_to_entity(result) if result else None

    async def get_all(
        self,
        *,
        group_key: str | None = None,
        holder: str | None = None,
        include_scrapped: bool = False,
    ) -> list[AssetUnit]:
        stmt = select(AssetUnitModel)

        if group_key is not None:
            stmt = stmt.where(AssetUnitModel.group_key == group_key)
        if holder is not None:
            stmt = stmt.where(AssetUnitModel.current_holder == holder)
        if not include_scrapped:
            stmt = stmt.where(AssetUnitModel.scrapped.is_(False))

        stmt = stmt.order_by(AssetUnitModel.created_at, AssetUnitModel.id)
        result = await self._session.execute(stmt)
        return [asset_to_entity(row) for row in result.scalars().all()]

    async def create(self, unit: AssetUnit) -> AssetUnit:
        model = asset_to_model(unit)
        async with self._session.begin_nested():
            self._session.add(model)
            await self._session.flush()
        return asset_to_entity(model)

    async def update(self, unit: AssetUnit) -> AssetUnit:
        model = await self._session.get(AssetUnitModel, unit.id)
        if model is None:
            raise ValueError(f"AssetUnit {unit.id} not found in database")
        model.asset_description = unit.asset_description
        model.asset_name = unit.asset_name
        model.image_ref = unit.image_ref
        model.scrapped = unit.scrapped
        for name, value in unit.descriptive_fields().items():
            setattr(model, name, value)
        model.updated_at = unit.updated_at
        await self._session.flush()
        return asset_to_entity(model)

    async def delete(self, unit_id: str) -> bool:
        model = await self._session.get(AssetUnitModel, unit_id)
        if model is None or model.current_holder is not None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def mark_scrapped(self, unit_id: str) -> bool:
        stmt = (
            update(AssetUnitModel)
            .where(
                AssetUnitModel.id == unit_id,
                AssetUnitModel.current_holder.is_(None),
            )
            .values(
                scrapped=True,
                status="available",
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount == 1
