"""Application service (use case) for users and role management."""

import logging

from lablend.application.interfaces import UserRepository
from lablend.domain.entities import User, UserRole
from lablend.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)


class UserService:
    """Orchestrates user registration and admin-only role changes."""

    def __init__(self, repository: UserRepository):
        self._repository = repository

    async def register(self, identity: str) -> User:
        """Create a user with the default ``user`` role."""
        identity = identity.strip()
        if await self._repository.get_by_identity(identity) is not None:
            raise DuplicateEntityError("User", "identity", identity)
        return await self._repository.create(User(identity=identity))

    async def get_user(self, user_id: str) -> User:
        user = await self._repository.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        return user

    async def resolve(self, reference: str) -> User | None:
        """Look a caller up by user id, falling back to identity."""
        user = await self._repository.get_by_id(reference)
        if user is None:
            user = await self._repository.get_by_identity(reference)
        return user

    async def list_users(self, skip: int = 0, limit: int = 100) -> list[User]:
        return await self._repository.get_all(skip=skip, limit=limit)

    async def update_role(self, actor: User, user_id: str, role: UserRole) -> User:
        """Change a user's role. Only admins may change it; a no-op is always allowed."""
        target = await self.get_user(user_id)
        if target.role == role:
            return target
        if not actor.is_admin:
            raise PermissionDeniedError("change the role field")

        target.role = role
        updated = await self._repository.update(target)
        logger.info("User %s role changed to %s by %s", user_id, role.value, actor.id)
        return updated

    async def set_active(self, actor: User, user_id: str, active: bool) -> User:
        """Suspend or reactivate a user (admin only)."""
        if not actor.is_admin:
            raise PermissionDeniedError("suspend or reactivate users")
        target = await self.get_user(user_id)
        target.is_active = active
        return await self._repository.update(target)

    async def ensure_admin(self, identity: str) -> User:
        """Idempotently make sure an admin with ``identity`` exists (startup seed)."""
        identity = identity.strip()
        existing = await self._repository.get_by_identity(identity)
        if existing is None:
            created = await self._repository.create(User(identity=identity, role=UserRole.ADMIN))
            logger.info("Seeded admin user '%s'", identity)
            return created
        if not existing.is_admin:
            existing.role = UserRole.ADMIN
            existing = await self._repository.update(existing)
            logger.info("Promoted bootstrap user '%s' to admin", identity)
        return existing
