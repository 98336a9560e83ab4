"""Unit tests for the UserService."""

import pytest

from lablend.application.interfaces import UserRepository
from lablend.application.services import UserService
from lablend.domain.entities import User, UserRole
from lablend.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    PermissionDeniedError,
)


class FakeUserRepository(UserRepository):
    """In-memory fake repository for unit testing."""

    def __init__(self):
        self._users: dict[str, User] = {}

    async def get_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    async def get_by_identity(self, identity: str) -> User | None:
        return next((u for u in self._users.values() if u.identity == identity), None)

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[User]:
        return list(self._users.values())[skip : skip + limit]

    async def create(self, user: User) -> User:
        self._users[user.id] = user
        return user

    async def update(self, user: User) -> User:
        self._users[user.id] = user
        return user


@pytest.fixture
def service() -> UserService:
    return UserService(FakeUserRepository())


@pytest.mark.asyncio
async def test_register_defaults_to_user_role(service: UserService):
    user = await service.register("  alice ")
    assert user.identity == "alice"
    assert user.role == UserRole.USER
    assert user.is_active


@pytest.mark.asyncio
async def test_register_duplicate_identity(service: UserService):
    await service.register("alice")
    with pytest.raises(DuplicateEntityError):
        await service.register("alice")


@pytest.mark.asyncio
async def test_resolve_by_id_or_identity(service: UserService):
    user = await service.register("alice")
    assert (await service.resolve(user.id)).id == user.id
    assert (await service.resolve("alice")).id == user.id
    assert await service.resolve("nobody") is None


@pytest.mark.asyncio
async def test_only_admin_changes_roles(service: UserService):
    admin = await service.ensure_admin("root")
    alice = await service.register("alice")
    bob = await service.register("bob")

    with pytest.raises(PermissionDeniedError):
        await service.update_role(alice, bob.id, UserRole.ADMIN)

    promoted = await service.update_role(admin, bob.id, UserRole.ADMIN)
    assert promoted.is_admin


@pytest.mark.asyncio
async def test_same_role_update_is_allowed_for_anyone(service: UserService):
    alice = await service.register("alice")
    unchanged = await service.update_role(alice, alice.id, UserRole.USER)
    assert unchanged.role == UserRole.USER


@pytest.mark.asyncio
async def test_update_role_unknown_user(service: UserService):
    admin = await service.ensure_admin("root")
    with pytest.raises(EntityNotFoundError):
        await service.update_role(admin, "missing", UserRole.ADMIN)


@pytest.mark.asyncio
async def test_set_active_requires_admin(service: UserService):
    admin = await service.ensure_admin("root")
    alice = await service.register("alice")

    with pytest.raises(PermissionDeniedError):
        await service.set_active(alice, alice.id, False)

    suspended = await service.set_active(admin, alice.id, False)
    assert suspended.is_active is False


@pytest.mark.asyncio
async def test_ensure_admin_is_idempotent_and_promotes(service: UserService):
    existing = await service.register("root")
    first = await service.ensure_admin("root")
    second = await service.ensure_admin("root")

    assert first.id == second.id == existing.id
    assert second.is_admin
    assert len(await service.list_users()) == 1
