"""Abstract interface (port) for the lending store's transaction primitive.

The lending transition engine expresses a borrow or return as a function
over a ``LendingTransaction``. ``AtomicStore.run_atomic`` must execute that
function with serializable-or-stricter isolation: selection, holder
mutation and audit append are observed as one unit of work, and either all
of them commit or none do.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TypeVar

from lablend.domain.entities import AssetUnit, LendRecord, User

T = TypeVar("T")


class TransactionAborted(Exception):
    """Raised inside ``run_atomic`` to roll the unit of work back.

    The engine converts it to a typed result; it never escapes the engine.
    """

    def __init__(self, reason: object, message: str = ""):
        self.reason = reason
        self.message = message
        super().__init__(message or str(reason))


class LendingTransaction(ABC):
    """Operations available inside one atomic unit of work."""

    @abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        ...

    @abstractmethod
    async def next_available_unit(self, group_key: str) -> AssetUnit | None:
        """Oldest-created non-scrapped, unheld unit of a group."""
        ...

    @abstractmethod
    async def next_held_unit(self, group_key: str, user_id: str) -> AssetUnit | None:
        """Oldest-created non-scrapped unit of a group held by ``user_id``."""
        ...

    @abstractmethod
    async def compare_and_set_holder(
        self, unit_id: str, expected: str | None, new_holder: str | None
    ) -> bool:
        """Set ``current_holder`` only if it still equals ``expected`` and the
        unit is not scrapped. Returns False when the guard does not hold."""
        ...

    @abstractmethod
    async def append_record(self, record: LendRecord) -> LendRecord:
        ...


class AtomicStore(ABC):
    """Port for running a lending unit of work atomically."""

    @abstractmethod
    async def run_atomic(self, fn: Callable[[LendingTransaction], Awaitable[T]]) -> T:
        """Run ``fn`` in a single transaction.

        Commits when ``fn`` returns; rolls back and re-raises when it raises
        (including ``TransactionAborted``). Never retries.
        """
        ...
