"""Inventory use cases — unit CRUD, group aggregation, scrapping, and export."""

import logging

from lablend.application.interfaces import AssetRepository
from lablend.application.schemas.assets import AssetUnitCreate
from lablend.domain.entities import AssetGroupSummary, AssetUnit
from lablend.domain.exceptions import EntityNotFoundError, InvalidOperationError
from lablend.infrastructure.export.workbook_exporter import AssetWorkbookExporter
from lablend.infrastructure.storage.local_file_storage import LocalFileStorage

logger = logging.getLogger(__name__)


def summarize_groups(units: list[AssetUnit]) -> list[AssetGroupSummary]:
    """Aggregate non-scrapped units by ``group_key``.

    Display fields (description, name, image) come from the first unit of a
    group in the given order, which is creation order for repository reads.
    """
    groups: dict[str, AssetGroupSummary] = {}
    for unit in units:
        if unit.scrapped:
            continue
        summary = groups.get(unit.group_key)
        if summary is None:
            summary = AssetGroupSummary(
                group_key=unit.group_key,
                description=unit.asset_description,
                asset_name=unit.asset_name,
                image_ref=unit.image_ref,
            )
            groups[unit.group_key] = summary
        elif summary.image_ref is None and unit.image_ref:
            summary.image_ref = unit.image_ref

        summary.total += 1
        if unit.current_holder:
            summary.borrowed += 1
        else:
            summary.available += 1

    return sorted(groups.values(), key=lambda g: (g.description.casefold(), g.group_key))


class InventoryService:
    """Orchestrates asset unit management. Depends on the repository port (DI).

    Admin-only checks live in the presentation layer (``require_admin``).
    """

    def __init__(
        self,
        repository: AssetRepository,
        exporter: AssetWorkbookExporter | None = None,
        file_storage: LocalFileStorage | None = None,
    ):
        self._repository = repository
        self._exporter = exporter or AssetWorkbookExporter()
        self._storage = file_storage

    async def get_unit(self, unit_id: str) -> AssetUnit:
        unit = await self._repository.get_by_id(unit_id)
        if unit is None:
            raise EntityNotFoundError("AssetUnit", unit_id)
        return unit

    async def list_units(
        self, *, group_key: str | None = None, include_scrapped: bool = False
    ) -> list[AssetUnit]:
        return await self._repository.get_all(
            group_key=group_key, include_scrapped=include_scrapped
        )

    async def summarize_groups(self) -> list[AssetGroupSummary]:
        return summarize_groups(await self._repository.get_all())

    async def held_group_keys(self, user_id: str) -> set[str]:
        """Group keys in which ``user_id`` currently holds at least one unit."""
        held = await self._repository.get_all(holder=user_id)
        return {unit.group_key for unit in held}

    async def create_unit(self, data: AssetUnitCreate) -> AssetUnit:
        # group_key is never taken from the caller; it is derived from the description
        unit = AssetUnit(**data.model_dump(exclude_none=True))
        created = await self._repository.create(unit)
        logger.info("Created asset unit %s in group '%s'", created.id, created.group_key)
        return created

    async def delete_unit(self, unit_id: str) -> AssetUnit:
        """Delete an unheld unit and return it.

        Its stored picture is left on disk; call ``discard_image`` once the
        deletion has been committed.
        """
        unit = await self.get_unit(unit_id)
        if unit.current_holder:
            raise InvalidOperationError("Cannot delete a unit that is currently borrowed")
        if not await self._repository.delete(unit_id):
            raise InvalidOperationError("Unit was borrowed while being deleted")
        logger.info("Deleted asset unit %s", unit_id)
        return unit

    async def discard_image(self, unit: AssetUnit) -> bool:
        if not unit.image_ref or self._storage is None:
            return False
        return await self._storage.delete_file(unit.image_ref)

    async def rename_group(self, group_key: str, asset_name: str) -> list[AssetUnit]:
        """Set the display name on every unit of a group; the key is unchanged."""
        units = await self._repository.get_all(group_key=group_key, include_scrapped=True)
        if not units:
            raise EntityNotFoundError("AssetGroup", group_key)
        renamed: list[AssetUnit] = []
        for unit in units:
            unit.rename(asset_name)
            renamed.append(await self._repository.update(unit))
        logger.info("Renamed group '%s' to '%s' (%d units)", group_key, asset_name, len(renamed))
        return renamed

    async def scrap_unit(self, unit_id: str) -> AssetUnit:
        """Scrap a unit. Terminal and idempotent; refused while the unit is held."""
        unit = await self.get_unit(unit_id)
        if unit.scrapped:
            return unit
        if unit.current_holder or not await self._repository.mark_scrapped(unit_id):
            raise InvalidOperationError("Cannot scrap a unit that is currently borrowed")
        logger.info("Scrapped asset unit %s", unit_id)
        return await self.get_unit(unit_id)

    async def export_workbook(self) -> bytes:
        units = await self._repository.get_all(include_scrapped=True)
        return self._exporter.export(units)
