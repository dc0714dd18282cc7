"""Tests for the store-backed trust service."""

import pytest

from modwarden.configuration.trust_settings import TrustConfig
from modwarden.database.db_connection import ConnectionManager
from modwarden.moderation.errors import StoreUnavailable
from modwarden.moderation.trust_policy import DAY_SECONDS, TrustPolicy
from modwarden.moderation.trust_service import TrustService
from modwarden.repositories.trust_repo import TrustRepository

T0 = 1_700_000_000


@pytest.fixture
def service(store):
    return TrustService(TrustPolicy(TrustConfig()), store)


@pytest.mark.asyncio
async def test_record_created_lazily_at_base(service):
    record = await service.get_or_create(1, 100, now=T0)

    assert record.trust == 30
    assert record.warnings == 0
    assert record.created_at == T0
    assert record.last_trust_update_at == T0
    assert record.last_infraction_at is None


@pytest.mark.asyncio
async def test_base_outside_range_is_clamped(store):
    service = TrustService(TrustPolicy(TrustConfig(base=150)), store)

    record = await service.get_or_create(1, 100, now=T0)

    assert record.trust == 100


@pytest.mark.asyncio
async def test_add_warning_applies_penalty(service):
    record = await service.add_warning(1, 100, now=T0)

    assert record.trust == 25
    assert record.warnings == 1
    assert record.last_infraction_at == T0

    record = await service.add_warning(1, 100, amount=2, now=T0 + 10)
    assert record.trust == 20
    assert record.warnings == 3


@pytest.mark.asyncio
async def test_mute_penalty_keeps_warnings(service):
    await service.add_warning(1, 100, now=T0)

    record = await service.apply_mute_penalty(1, 100, now=T0 + 5)

    assert record.trust == 10
    assert record.warnings == 1


@pytest.mark.asyncio
async def test_reset_warnings_keeps_trust(service):
    await service.add_warning(1, 100, now=T0)
    await service.add_warning(1, 100, now=T0)

    record = await service.reset_warnings(1, 100, now=T0 + 1)

    assert record.warnings == 0
    assert record.trust == 20


@pytest.mark.asyncio
async def test_regeneration_counts_from_latest_event(service):
    await service.add_warning(1, 100, now=T0)

    record = await service.get_or_create(1, 100, now=T0 + 3 * DAY_SECONDS)
    assert record.trust == 28
    assert record.last_trust_update_at == T0 + 3 * DAY_SECONDS

    record = await service.get_or_create(1, 100, now=T0 + 3 * DAY_SECONDS + 3600)
    assert record.trust == 28

    record = await service.get_or_create(1, 100, now=T0 + 4 * DAY_SECONDS)
    assert record.trust == 29


@pytest.mark.asyncio
async def test_regeneration_is_persisted(service, store):
    await service.add_warning(1, 100, now=T0)
    await service.get_or_create(1, 100, now=T0 + 2 * DAY_SECONDS)

    async with store.read() as conn:
        stored = await TrustRepository.get(conn, 1, 100)

    assert stored is not None
    assert stored.trust == 27


@pytest.mark.asyncio
async def test_records_are_per_guild(service):
    await service.add_warning(1, 100, now=T0)

    other = await service.get_or_create(2, 100, now=T0)

    assert other.trust == 30
    assert other.warnings == 0


@pytest.mark.asyncio
async def test_disabled_policy_counts_warnings_only(store):
    service = TrustService(TrustPolicy(TrustConfig(enabled=False)), store)

    record = await service.add_warning(1, 100, now=T0)

    assert record.warnings == 1
    assert record.trust == 30
    assert record.last_infraction_at is None


@pytest.mark.asyncio
async def test_clock_used_when_now_omitted(store, clock):
    service = TrustService(TrustPolicy(), store, clock=clock)

    record = await service.get_or_create(1, 100)

    assert record.created_at == int(clock.now)


@pytest.mark.asyncio
async def test_closed_store_raises_store_unavailable():
    service = TrustService(TrustPolicy(), ConnectionManager())

    with pytest.raises(StoreUnavailable):
        await service.get_or_create(1, 100, now=T0)

    with pytest.raises(StoreUnavailable):
        await service.add_warning(1, 100, now=T0)
