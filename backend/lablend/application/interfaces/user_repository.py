"""Abstract repository interface (port) for User persistence."""

from abc import ABC, abstractmethod

from lablend.domain.entities import User


class UserRepository(ABC):
    """Port for user persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None:
        ...

    @abstractmethod
    async def get_by_identity(self, identity: str) -> User | None:
        ...

    @abstractmethod
    async def get_all(self, skip: int = 0, limit: int = 100) -> list[User]:
        ...

    @abstractmethod
    async def create(self, user: User) -> User:
        ...

    @abstractmethod
    async def update(self, user: User) -> User:
        """Persist role and active-state changes."""
        ...
