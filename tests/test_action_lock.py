"""Tests for the self-expiring duplicate-action lock."""

import asyncio

import pytest

from modwarden.database.db_connection import ConnectionManager
from modwarden.datatypes.lock_datatypes import LockStatus
from modwarden.moderation.action_lock import TICKET_OPEN_LOCK, TICKET_OPEN_LOCK_TTL_SECONDS, ActionLock
from modwarden.moderation.errors import LockHeld, StoreUnavailable
from modwarden.repositories.action_lock_repo import ActionLockRepository


@pytest.mark.asyncio
async def test_concurrent_attempts_acquire_once(store, clock):
    lock = ActionLock(connection=store, clock=clock)

    results = await asyncio.gather(*(lock.try_acquire(1, 10, metadata="msg") for _ in range(10)))

    statuses = [r.status for r in results]
    assert statuses.count(LockStatus.ACQUIRED) == 1
    assert statuses.count(LockStatus.HELD) == 9


@pytest.mark.asyncio
async def test_attempts_across_connections_acquire_once(store, second_store, clock):
    first = ActionLock(connection=store, clock=clock)
    second = ActionLock(connection=second_store, clock=clock)

    results = await asyncio.gather(
        *(first.try_acquire(1, 10) for _ in range(10)),
        *(second.try_acquire(1, 10) for _ in range(10)),
    )

    statuses = [r.status for r in results]
    assert statuses.count(LockStatus.ACQUIRED) == 1
    assert statuses.count(LockStatus.HELD) == 19


@pytest.mark.asyncio
async def test_acquired_again_after_ttl(store, clock):
    lock = ActionLock(connection=store, clock=clock)

    first = await lock.try_acquire(1, 10)
    assert first.acquired
    assert first.expires_at == pytest.approx(clock.now + TICKET_OPEN_LOCK_TTL_SECONDS)

    clock.advance(TICKET_OPEN_LOCK_TTL_SECONDS - 1)
    assert (await lock.try_acquire(1, 10)).status is LockStatus.HELD

    clock.advance(1)
    assert (await lock.try_acquire(1, 10)).status is LockStatus.ACQUIRED


@pytest.mark.asyncio
async def test_held_attempt_does_not_extend_lock(store, clock):
    lock = ActionLock(connection=store, clock=clock)
    await lock.try_acquire(1, 10)

    clock.advance(30)
    await lock.try_acquire(1, 10)
    clock.advance(15)

    assert (await lock.try_acquire(1, 10)).acquired


@pytest.mark.asyncio
async def test_keys_are_independent(store, clock):
    ticket_lock = ActionLock(connection=store, clock=clock)
    other_lock = ActionLock(lock_name="appeal_open", connection=store, clock=clock)

    assert (await ticket_lock.try_acquire(1, 10)).acquired
    assert (await ticket_lock.try_acquire(1, 11)).acquired
    assert (await ticket_lock.try_acquire(2, 10)).acquired
    assert (await other_lock.try_acquire(1, 10)).acquired


@pytest.mark.asyncio
async def test_metadata_is_stored(store, clock):
    lock = ActionLock(connection=store, clock=clock)
    await lock.try_acquire(1, 10, metadata=12345)

    async with store.read() as conn:
        record = await ActionLockRepository.get(conn, TICKET_OPEN_LOCK, 1, 10)

    assert record is not None
    assert record.payload == "12345"
    assert record.expires_at == pytest.approx(clock.now + TICKET_OPEN_LOCK_TTL_SECONDS)


@pytest.mark.asyncio
async def test_raise_if_held(store, clock):
    lock = ActionLock(connection=store, clock=clock)

    acquired = await lock.try_acquire(1, 10)
    assert acquired.raise_if_held() is acquired

    held = await lock.try_acquire(1, 10)
    with pytest.raises(LockHeld) as excinfo:
        held.raise_if_held()
    assert excinfo.value.actor_id == 10
    assert excinfo.value.lock_name == TICKET_OPEN_LOCK


@pytest.mark.asyncio
async def test_closed_store_raises_store_unavailable(clock):
    lock = ActionLock(connection=ConnectionManager(), clock=clock)

    with pytest.raises(StoreUnavailable):
        await lock.try_acquire(1, 10)


@pytest.mark.asyncio
async def test_timeout_is_reported_as_held(store, clock):
    lock = ActionLock(connection=store, timeout=0.05, clock=clock)

    async with store.transaction():
        result = await lock.try_acquire(1, 10)

    assert result.status is LockStatus.HELD
    assert result.timed_out is True


def test_ttl_must_be_positive():
    with pytest.raises(ValueError):
        ActionLock(ttl_seconds=0)
