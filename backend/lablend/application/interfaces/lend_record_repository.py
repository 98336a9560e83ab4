"""Abstract repository interface (port) for reading the lend record log."""

from abc import ABC, abstractmethod

from lablend.domain.entities import LendRecord


class LendRecordRepository(ABC):
    """Read side of the append-only audit log.

    Appends happen inside the atomic lending store, never here.
    """

    @abstractmethod
    async def get_all(
        self,
        *,
        user_id: str | None = None,
        group_key: str | None = None,
    ) -> list[LendRecord]:
        """Retrieve records, newest first."""
        ...
