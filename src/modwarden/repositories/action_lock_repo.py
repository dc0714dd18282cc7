"""
Persistent storage for short-lived duplicate-action locks.

A row is live while ``expires_at`` is in the future. An expired row counts
as absent: the conditional upsert overwrites it in the same statement that
would otherwise have inserted a fresh row.
"""

from __future__ import annotations

from dataclasses import dataclass

import aiosqlite


@dataclass
class ActionLockRecord:
    """A single row from the ``action_locks`` table."""
    lock_name: str
    guild_id: int
    actor_id: int
    payload: str
    created_at: float   # unix seconds
    expires_at: float   # unix seconds


class ActionLockRepository:
    """Low-level access to the ``action_locks`` table."""

    @staticmethod
    async def insert_if_absent(
        conn: aiosqlite.Connection,
        lock_name: str,
        guild_id: int,
        actor_id: int,
        payload: str,
        created_at: float,
        expires_at: float,
    ) -> bool:
        """Write the lock unless a live one exists for the key.

        Returns True when this call wrote the row, False when a live lock
        already held the key.
        """
        async with conn.execute(
            """
            INSERT INTO action_locks (lock_name, guild_id, actor_id, payload, created_at, expires_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(lock_name, guild_id, actor_id) DO UPDATE SET
                payload    = excluded.payload,
                created_at = excluded.created_at,
                expires_at = excluded.expires_at
            WHERE action_locks.expires_at <= excluded.created_at
            RETURNING expires_at
            """,
            (lock_name, int(guild_id), int(actor_id), payload, created_at, expires_at),
        ) as cursor:
            rows = await cursor.fetchall()

        return bool(rows)

    @staticmethod
    async def get(
        conn: aiosqlite.Connection,
        lock_name: str,
        guild_id: int,
        actor_id: int,
    ) -> ActionLockRecord | None:
        """Return the stored row for the key, live or expired."""
        async with conn.execute(
            "SELECT lock_name, guild_id, actor_id, payload, created_at, expires_at "
            "FROM action_locks WHERE lock_name = ? AND guild_id = ? AND actor_id = ?",
            (lock_name, int(guild_id), int(actor_id)),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None

        return ActionLockRecord(
            lock_name=row[0],
            guild_id=row[1],
            actor_id=row[2],
            payload=row[3],
            created_at=row[4],
            expires_at=row[5],
        )

