"""
Persistent storage for per-guild trust records.

The repository stores whatever trust value it is given; keeping trust inside
the configured range is done by :class:`TrustPolicy` before a write.
"""

from __future__ import annotations

import aiosqlite

from modwarden.datatypes.trust_datatypes import TrustRecord

_COLUMNS = (
    "guild_id, user_id, trust, warnings, "
    "last_infraction_at, last_trust_update_at, created_at"
)


def _row_to_record(row) -> TrustRecord:
    return TrustRecord(
        guild_id=row[0],
        user_id=row[1],
        trust=row[2],
        warnings=row[3],
        last_infraction_at=row[4],
        last_trust_update_at=row[5],
        created_at=row[6],
    )


class TrustRepository:
    """Low-level CRUD for the ``trust_records`` table."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    async def get(
        conn: aiosqlite.Connection,
        guild_id: int,
        user_id: int,
    ) -> TrustRecord | None:
        """Fetch one record, or None if the user has none in this guild."""
        async with conn.execute(
            f"SELECT {_COLUMNS} FROM trust_records WHERE guild_id = ? AND user_id = ?",
            (int(guild_id), int(user_id)),
        ) as cursor:
            row = await cursor.fetchone()

        return _row_to_record(row) if row is not None else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    async def insert_if_absent(
        conn: aiosqlite.Connection,
        guild_id: int,
        user_id: int,
        trust: float,
        now: int,
    ) -> bool:
        """Create a record at ``trust``; returns False if one already existed."""
        cursor = await conn.execute(
            """
            INSERT INTO trust_records (
                guild_id, user_id, trust, warnings,
                last_infraction_at, last_trust_update_at, created_at
            ) VALUES (?, ?, ?, 0, NULL, ?, ?)
            ON CONFLICT(guild_id, user_id) DO NOTHING
            """,
            (int(guild_id), int(user_id), trust, now, now),
        )
        inserted = cursor.rowcount == 1
        await cursor.close()
        return inserted

    @staticmethod
    async def update(conn: aiosqlite.Connection, record: TrustRecord) -> None:
        """Write back every mutable column of ``record``."""
        await conn.execute(
            """
            UPDATE trust_records SET
                trust                = ?,
                warnings             = ?,
                last_infraction_at   = ?,
                last_trust_update_at = ?
            WHERE guild_id = ? AND user_id = ?
            """,
            (
                record.trust,
                record.warnings,
                record.last_infraction_at,
                record.last_trust_update_at,
                int(record.guild_id),
                int(record.user_id),
            ),
        )

