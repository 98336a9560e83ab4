"""Abstract repository interface (port) for ImportBatch persistence."""

from abc import ABC, abstractmethod

from lablend.domain.entities import ImportBatch


class ImportBatchRepository(ABC):

    @abstractmethod
    async def create(self, batch: ImportBatch) -> ImportBatch:
        ...

    @abstractmethod
    async def get_by_id(self, batch_id: str) -> ImportBatch | None:
        ...

    @abstractmethod
    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ImportBatch]:
        """Retrieve batches, newest first."""
        ...
