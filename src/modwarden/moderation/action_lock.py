"""
Short-lived duplicate-action lock.

Collapses a burst of identical triggers (the same user reacting twice to open
a ticket, a reaction event delivered twice) into a single action. The first
``try_acquire`` for a (guild, actor) key wins; every other attempt within the
TTL window gets a HELD result.

There is no ``release``: the protected action may fail halfway
and the lock simply lapses after the TTL. Acquisition is one conditional
upsert (see :meth:`ActionLockRepository.insert_if_absent`); an expired row is
overwritten in that same statement, and a background sweep deletes stale
rows (:meth:`MaintenanceOperations.purge_expired_locks`).
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable

from modwarden.database.db_connection import STORE_ERRORS, ConnectionManager, db_connection
from modwarden.datatypes.lock_datatypes import LockResult, LockStatus
from modwarden.moderation.errors import StoreUnavailable
from modwarden.repositories.action_lock_repo import ActionLockRepository
from modwarden.util.logger import get_logger

logger = get_logger("action_lock")

TICKET_OPEN_LOCK = "ticket_open"
TICKET_OPEN_LOCK_TTL_SECONDS = 45


class ActionLock:
    """Exclusive, self-expiring reservation keyed by (guild, actor).

    Args:
        lock_name: Lock kind; keys of different kinds never collide.
        ttl_seconds: Lifetime of an acquired lock, measured from acquisition.
        connection: Connection manager of the shared store.
        timeout: Optional limit in seconds for the store round trip.
        clock: Source of unix time; injectable for tests.
    """

    def __init__(
        self,
        lock_name: str = TICKET_OPEN_LOCK,
        ttl_seconds: float = TICKET_OPEN_LOCK_TTL_SECONDS,
        connection: ConnectionManager = db_connection,
        *,
        timeout: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.lock_name = lock_name
        self.ttl_seconds = ttl_seconds
        self._connection = connection
        self._timeout = timeout
        self._clock = clock

    async def try_acquire(self, guild_id: int, actor_id: int, metadata: str = "") -> LockResult:
        """Try to take the lock for ``(guild_id, actor_id)``.

        Args:
            guild_id: Guild the action happens in.
            actor_id: User who triggered the action.
            metadata: Diagnostic payload stored with the lock (e.g. the message id).

        Returns:
            LockResult: ACQUIRED for exactly one caller per TTL window, HELD for
            the rest. A timed-out round trip also yields HELD, flagged
            ``timed_out``, because it may have written the row.

        Raises:
            StoreUnavailable: The store rejected or could not run the statement.
        """
        created_at = self._clock()
        expires_at = created_at + self.ttl_seconds

        try:
            acquired = await asyncio.wait_for(
                self._insert(guild_id, actor_id, str(metadata), created_at, expires_at),
                self._timeout,
            )
        except TimeoutError:
            logger.warning(
                "[ACTION LOCK] %s lock attempt for actor %s in guild %s timed out; treating as held",
                self.lock_name, actor_id, guild_id,
            )
            return LockResult(LockStatus.HELD, self.lock_name, guild_id, actor_id, timed_out=True)
        except STORE_ERRORS as exc:
            logger.warning(
                "[ACTION LOCK] %s lock attempt for actor %s in guild %s failed: %s",
                self.lock_name, actor_id, guild_id, exc,
            )
            raise StoreUnavailable(f"{self.lock_name} lock attempt failed: {exc}") from exc

        if not acquired:
            logger.debug("[ACTION LOCK] %s already held for actor %s in guild %s", self.lock_name, actor_id, guild_id)
            return LockResult(LockStatus.HELD, self.lock_name, guild_id, actor_id)

        logger.debug("[ACTION LOCK] %s acquired for actor %s in guild %s", self.lock_name, actor_id, guild_id)
        return LockResult(LockStatus.ACQUIRED, self.lock_name, guild_id, actor_id, expires_at=expires_at)

    async def _insert(
        self,
        guild_id: int,
        actor_id: int,
        payload: str,
        created_at: float,
        expires_at: float,
    ) -> bool:
        async with self._connection.transaction() as conn:
            return await ActionLockRepository.insert_if_absent(
                conn, self.lock_name, guild_id, actor_id, payload, created_at, expires_at
            )
