"""
Per-guild sequence allocator for human-facing case and ticket numbers.

Each allocation is one atomic upsert against the store (see
:meth:`SequenceRepository.increment`), never a read followed by a write, so
concurrent callers in this process or in other processes sharing the
database always get distinct numbers. The first allocation for a key returns
1. Nothing is cached between calls.

On any store failure, or when the optional timeout elapses,
:class:`StoreUnavailable` is raised. There is no fallback number: a caller
that cannot get a number must abort or ask the user to retry.
"""

from __future__ import annotations

import asyncio

from modwarden.database.db_connection import STORE_ERRORS, ConnectionManager, db_connection
from modwarden.moderation.errors import StoreUnavailable
from modwarden.repositories.sequence_repo import SequenceRepository
from modwarden.util.logger import get_logger

logger = get_logger("sequence_allocator")

CASE_SEQUENCE = "case"
TICKET_SEQUENCE = "ticket"


class SequenceAllocator:
    """Hands out strictly increasing integers per (guild, sequence name)."""

    def __init__(
        self,
        connection: ConnectionManager = db_connection,
        *,
        timeout: float | None = None,
    ) -> None:
        """
        Args:
            connection: Connection manager of the shared store.
            timeout: Optional limit in seconds for one store round trip.
        """
        self._connection = connection
        self._timeout = timeout

    async def allocate(self, guild_id: int, sequence_name: str) -> int:
        """Return the next number for ``(guild_id, sequence_name)``.

        Raises:
            StoreUnavailable: The increment could not be executed or timed out.
        """
        try:
            value = await asyncio.wait_for(self._increment(guild_id, sequence_name), self._timeout)
        except TimeoutError as exc:
            logger.warning(
                "[SEQUENCE] Allocation of %s for guild %s timed out after %ss",
                sequence_name, guild_id, self._timeout,
            )
            raise StoreUnavailable(f"allocating {sequence_name!r} for guild {guild_id} timed out") from exc
        except STORE_ERRORS as exc:
            logger.warning("[SEQUENCE] Allocation of %s for guild %s failed: %s", sequence_name, guild_id, exc)
            raise StoreUnavailable(f"allocating {sequence_name!r} for guild {guild_id} failed: {exc}") from exc

        logger.debug("[SEQUENCE] Allocated %s #%d for guild %s", sequence_name, value, guild_id)
        return value

    async def _increment(self, guild_id: int, sequence_name: str) -> int:
        async with self._connection.transaction() as conn:
            return await SequenceRepository.increment(conn, guild_id, sequence_name)

    async def seed_if_absent(self, guild_id: int, sequence_name: str, start_from: int) -> bool:
        """Start a not-yet-created counter at ``start_from`` instead of 1.

        Used when numbered records already exist before the counter does
        (e.g. tickets imported from an older deployment). Has no effect on an
        existing counter. Returns True when the seed was applied.

        Raises:
            StoreUnavailable: The store could not execute the insert.
        """
        next_value = max(1, int(start_from))
        try:
            async with self._connection.transaction() as conn:
                created = await SequenceRepository.seed_if_absent(conn, guild_id, sequence_name, next_value)
        except STORE_ERRORS as exc:
            raise StoreUnavailable(f"seeding {sequence_name!r} for guild {guild_id} failed: {exc}") from exc

        if created:
            logger.info("[SEQUENCE] Seeded %s for guild %s at %d", sequence_name, guild_id, next_value)
        return created

    async def peek(self, guild_id: int, sequence_name: str) -> int:
        """Return the number the next allocation would get (1 if the counter is absent).

        Diagnostic only; the value may be stale as soon as it is returned.
        """
        try:
            async with self._connection.read() as conn:
                value = await SequenceRepository.get_next_value(conn, guild_id, sequence_name)
        except STORE_ERRORS as exc:
            raise StoreUnavailable(f"reading {sequence_name!r} for guild {guild_id} failed: {exc}") from exc
        return value if value is not None else 1
