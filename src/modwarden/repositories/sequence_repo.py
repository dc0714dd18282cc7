"""
Persistent storage for per-guild sequence counters.

``next_value`` is the number the next allocation hands out. Allocation is one
upsert statement so the row creation and the increment can never be split
between two callers.
"""

from __future__ import annotations

import aiosqlite


class SequenceRepository:
    """Low-level access to the ``sequence_counters`` table."""

    @staticmethod
    async def increment(
        conn: aiosqlite.Connection,
        guild_id: int,
        sequence_name: str,
    ) -> int:
        """Atomically take the current ``next_value`` and store ``next_value + 1``.

        A missing row is created already advanced to 2, which hands out 1.
        Returns the allocated (pre-increment) value.
        """
        async with conn.execute(
            """
            INSERT INTO sequence_counters (guild_id, sequence_name, next_value)
            VALUES (?, ?, 2)
            ON CONFLICT(guild_id, sequence_name) DO UPDATE SET
                next_value = sequence_counters.next_value + 1
            RETURNING next_value
            """,
            (int(guild_id), sequence_name),
        ) as cursor:
            rows = await cursor.fetchall()

        if not rows:
            raise aiosqlite.OperationalError(
                f"counter upsert for {sequence_name!r} in guild {guild_id} returned no row"
            )
        return rows[0][0] - 1

    @staticmethod
    async def seed_if_absent(
        conn: aiosqlite.Connection,
        guild_id: int,
        sequence_name: str,
        next_value: int,
    ) -> bool:
        """Create the counter at ``next_value`` unless it exists. Returns True if created."""
        cursor = await conn.execute(
            """
            INSERT INTO sequence_counters (guild_id, sequence_name, next_value)
            VALUES (?, ?, ?)
            ON CONFLICT(guild_id, sequence_name) DO NOTHING
            """,
            (int(guild_id), sequence_name, int(next_value)),
        )
        created = cursor.rowcount == 1
        await cursor.close()
        return created

    @staticmethod
    async def get_next_value(
        conn: aiosqlite.Connection,
        guild_id: int,
        sequence_name: str,
    ) -> int | None:
        """Return the stored ``next_value`` or None if the counter does not exist."""
        async with conn.execute(
            "SELECT next_value FROM sequence_counters WHERE guild_id = ? AND sequence_name = ?",
            (int(guild_id), sequence_name),
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row is not None else None

