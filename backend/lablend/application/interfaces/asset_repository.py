"""Abstract repository interface (port) for AssetUnit persistence."""

from abc import ABC, abstractmethod

from lablend.domain.entities import AssetUnit


class AssetRepository(ABC):
    """Port for asset unit persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, unit_id: str) -> AssetUnit | None:
        """Retrieve a single unit by its ID."""
        ...

    @abstractmethod
    async def get_all(
        self,
        *,
        group_key: str | None = None,
        holder: str | None = None,
        include_scrapped: bool = False,
    ) -> list[AssetUnit]:
        """Retrieve units in creation order, optionally filtered."""
        ...

    @abstractmethod
    async def create(self, unit: AssetUnit) -> AssetUnit:
        """Persist a new unit and return it."""
        ...

    @abstractmethod
    async def update(self, unit: AssetUnit) -> AssetUnit:
        """Update descriptive fields and the scrapped flag of an existing unit.

        Holder changes go through the atomic lending store only.
        """
        ...

    @abstractmethod
    async def delete(self, unit_id: str) -> bool:
        """Delete an unheld unit. Returns False if not found or currently held."""
        ...

    @abstractmethod
    async def mark_scrapped(self, unit_id: str) -> bool:
        """Set ``scrapped`` only while the unit is unheld.

        Returns False if the unit is missing or currently held.
        """
        ...
