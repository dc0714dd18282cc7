"""
Trust record service.

Loads, regenerates and penalises per-guild trust records. A record is created
at the configured base the first time a user is looked up, and trust slowly
regenerates for every full day without an infraction, even when the record
is only read (e.g. by ``/trust``), so scores do not sit low for months.

Each public call runs in a single store transaction. The arithmetic itself
lives in :class:`TrustPolicy`.
"""

from __future__ import annotations

import time
from typing import Callable

import aiosqlite

from modwarden.database.db_connection import STORE_ERRORS, ConnectionManager, db_connection
from modwarden.datatypes.trust_datatypes import InfractionKind, TrustRecord
from modwarden.moderation.errors import StoreUnavailable
from modwarden.moderation.trust_policy import TrustPolicy
from modwarden.repositories.trust_repo import TrustRepository
from modwarden.util.logger import get_logger

logger = get_logger("trust_service")


class TrustService:
    """Store-backed trust operations for one :class:`TrustPolicy`."""

    def __init__(
        self,
        policy: TrustPolicy,
        connection: ConnectionManager = db_connection,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.policy = policy
        self._connection = connection
        self._clock = clock

    def _now(self, now: int | None) -> int:
        return int(self._clock()) if now is None else int(now)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_or_create(self, guild_id: int, user_id: int, now: int | None = None) -> TrustRecord:
        """Return the user's record, creating it at base and applying regeneration."""
        now = self._now(now)
        try:
            async with self._connection.transaction() as conn:
                return await self._load(conn, guild_id, user_id, now)
        except STORE_ERRORS as exc:
            raise StoreUnavailable(f"loading trust for user {user_id} in guild {guild_id} failed: {exc}") from exc

    async def add_warning(
        self,
        guild_id: int,
        user_id: int,
        amount: int = 1,
        now: int | None = None,
    ) -> TrustRecord:
        """Add ``amount`` warnings and apply the warn penalty."""
        return await self._record_infraction(guild_id, user_id, InfractionKind.WARN, amount, now)

    async def apply_mute_penalty(self, guild_id: int, user_id: int, now: int | None = None) -> TrustRecord:
        """Apply the mute penalty without touching the warning count."""
        return await self._record_infraction(guild_id, user_id, InfractionKind.MUTE, 0, now)

    async def reset_warnings(self, guild_id: int, user_id: int, now: int | None = None) -> TrustRecord:
        """Set the warning count back to zero; trust is left as it is."""
        now = self._now(now)
        try:
            async with self._connection.transaction() as conn:
                record = await self._load(conn, guild_id, user_id, now)
                record.warnings = 0
                await TrustRepository.update(conn, record)
        except STORE_ERRORS as exc:
            raise StoreUnavailable(f"resetting warnings for user {user_id} in guild {guild_id} failed: {exc}") from exc
        return record

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _record_infraction(
        self,
        guild_id: int,
        user_id: int,
        kind: InfractionKind,
        warnings: int,
        now: int | None,
    ) -> TrustRecord:
        now = self._now(now)
        try:
            async with self._connection.transaction() as conn:
                record = await self._load(conn, guild_id, user_id, now)
                before = record.trust

                record.warnings = max(0, record.warnings + warnings)
                if self.policy.enabled:
                    record.trust = self.policy.apply_penalty(record.trust, kind)
                    record.last_infraction_at = now
                    record.last_trust_update_at = now

                await TrustRepository.update(conn, record)
        except STORE_ERRORS as exc:
            raise StoreUnavailable(f"recording {kind} for user {user_id} in guild {guild_id} failed: {exc}") from exc

        logger.info(
            "[TRUST] %s for user %s in guild %s: trust %s -> %s, warnings %d",
            kind, user_id, guild_id, before, record.trust, record.warnings,
        )
        return record

    async def _load(self, conn: aiosqlite.Connection, guild_id: int, user_id: int, now: int) -> TrustRecord:
        base = self.policy.clamp(self.policy.config.base)
        if await TrustRepository.insert_if_absent(conn, guild_id, user_id, base, now):
            logger.debug("[TRUST] Created record for user %s in guild %s at %s", user_id, guild_id, base)

        record = await TrustRepository.get(conn, guild_id, user_id)
        if record is None:
            raise aiosqlite.OperationalError(f"trust record for user {user_id} in guild {guild_id} vanished")

        changed = False
        normalized = self.policy.normalize(record.trust)
        if normalized != record.trust:
            record.trust = normalized
            changed = True
        if record.last_trust_update_at is None:
            record.last_trust_update_at = now
            changed = True

        if self._regenerate(record, now):
            changed = True

        if changed:
            await TrustRepository.update(conn, record)
        return record

    def _regenerate(self, record: TrustRecord, now: int) -> bool:
        stamps = [t for t in (record.last_infraction_at, record.last_trust_update_at) if t is not None]
        last_event_at = max(stamps) if stamps else record.created_at

        result = self.policy.regenerate(record.trust, last_event_at, now)
        if not result.regenerated:
            return False

        record.trust = result.trust
        record.last_trust_update_at = now
        return True
