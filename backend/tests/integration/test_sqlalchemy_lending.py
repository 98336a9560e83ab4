"""The SQLAlchemy lending store against a real (SQLite) database."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from lablend.application.services import LendingService
from lablend.domain.entities import AssetUnit, LendAction, TransitionErrorKind, User
from lablend.infrastructure.database.repositories import (
    SQLAlchemyAssetRepository,
    SQLAlchemyAtomicStore,
    SQLAlchemyLendRecordRepository,
    SQLAlchemyUserRepository,
)

T0 = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


async def _seed(session_factory, description: str, count: int, identities: list[str]):
    async with session_factory() as session:
        assets = SQLAlchemyAssetRepository(session)
        users = SQLAlchemyUserRepository(session)
        units = [
            await assets.create(
                AssetUnit(asset_description=description, created_at=T0 + timedelta(seconds=i))
            )
            for i in range(count)
        ]
        people = [await users.create(User(identity=identity)) for identity in identities]
        await session.commit()
    return units, people


async def _transition(session_factory, user_id: str, action: str, group_key: str = "Oscilloscope"):
    async with session_factory() as session:
        service = LendingService(SQLAlchemyAtomicStore(session))
        return await service.transition(group_key, user_id, action)


@pytest.mark.asyncio
async def test_borrow_and_return_persist_holder_and_log(session_factory):
    units, [alice] = await _seed(session_factory, "Oscilloscope", 2, ["alice"])

    borrowed = await _transition(session_factory, alice.id, "lend")
    returned = await _transition(session_factory, alice.id, "return")
    again = await _transition(session_factory, alice.id, "return")

    assert borrowed.success and borrowed.unit_id == units[0].id
    assert returned.success and returned.unit_id == units[0].id
    assert again.error_kind == TransitionErrorKind.NO_HELD_UNIT

    async with session_factory() as session:
        unit = await SQLAlchemyAssetRepository(session).get_by_id(units[0].id)
        records = await SQLAlchemyLendRecordRepository(session).get_all(user_id=alice.id)

    assert unit.current_holder is None
    assert [r.action for r in records] == [LendAction.RETURN, LendAction.LEND]
    assert records[0].asset_unit == units[0].id


@pytest.mark.asyncio
async def test_concurrent_borrows_are_serialized(session_factory):
    identities = [f"user-{i}" for i in range(6)]
    units, people = await _seed(session_factory, "Oscilloscope", 2, identities)

    results = await asyncio.gather(
        *(_transition(session_factory, person.id, "lend") for person in people)
    )

    winners = [r for r in results if r.success]
    assert len(winners) == 2
    assert {r.unit_id for r in winners} == {u.id for u in units}

    async with session_factory() as session:
        records = await SQLAlchemyLendRecordRepository(session).get_all()
    assert len(records) == 2


@pytest.mark.asyncio
async def test_aborted_transition_keeps_surrounding_work(session_factory):
    async with session_factory() as session:
        users = SQLAlchemyUserRepository(session)
        carol = await users.create(User(identity="carol"))

        service = LendingService(SQLAlchemyAtomicStore(session))
        result = await service.borrow("Nothing here", carol.id)
        await session.commit()

    assert result.error_kind == TransitionErrorKind.NO_AVAILABLE_UNIT
    async with session_factory() as session:
        assert await SQLAlchemyUserRepository(session).get_by_identity("carol") is not None


@pytest.mark.asyncio
async def test_scrapped_and_held_units_are_guarded(session_factory):
    units, [alice] = await _seed(session_factory, "Oscilloscope", 2, ["alice"])
    await _transition(session_factory, alice.id, "lend")

    async with session_factory() as session:
        assets = SQLAlchemyAssetRepository(session)
        assert await assets.mark_scrapped(units[0].id) is False
        assert await assets.delete(units[0].id) is False
        assert await assets.mark_scrapped(units[1].id) is True
        await session.commit()

    result = await _transition(session_factory, alice.id, "lend")
    assert result.error_kind == TransitionErrorKind.NO_AVAILABLE_UNIT


@pytest.mark.asyncio
async def test_timestamps_come_back_timezone_aware(session_factory):
    units, _ = await _seed(session_factory, "Oscilloscope", 1, [])

    async with session_factory() as session:
        unit = await SQLAlchemyAssetRepository(session).get_by_id(units[0].id)

    assert unit.created_at == T0
    assert unit.created_at.tzinfo is not None
