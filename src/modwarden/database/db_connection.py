"""
Shared SQLite store for trust records, sequence counters and action locks.

The whole bot talks to one aiosqlite connection opened at startup. WAL mode
lets ``/trust`` lookups read while a warning is being written.

Writers
-------
Inside this process, writers take turns on ``_write_sem``. When several bot
processes point at the same file, SQLite's own write lock orders them and
``busy_timeout`` makes the loser wait instead of failing with "database is
locked". Counter increments and lock inserts are each one statement inside
``transaction()``, so either process sees the other's write or none of it.

Usage
-----
    await db_connection.open(path)

    async with db_connection.transaction() as conn:
        value = await SequenceRepository.increment(conn, guild_id, "case")

    async with db_connection.read() as conn:
        record = await TrustRepository.get(conn, guild_id, user_id)

    await db_connection.close()
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from modwarden.util.logger import get_logger

logger = get_logger("database_connection")

BUSY_TIMEOUT_MS = 5000

# Failures that mean "the store could not run the statement": driver errors,
# a connection that was never opened (RuntimeError below) or already closed
# (aiosqlite raises ValueError).
STORE_ERRORS = (aiosqlite.Error, RuntimeError, ValueError)

_PRAGMAS = (
    "PRAGMA journal_mode = WAL",
    "PRAGMA synchronous = NORMAL",
    f"PRAGMA busy_timeout = {BUSY_TIMEOUT_MS}",
    "PRAGMA temp_store = MEMORY",
)


class ConnectionManager:
    """
    Owner of the bot's single aiosqlite connection.

    Repositories never connect on their own; they receive the connection
    from ``read()``, ``transaction()`` or ``exclusive()``. Tests create
    their own instance per temporary database instead of using the
    module-level ``db_connection``.
    """

    def __init__(self) -> None:
        self._conn: aiosqlite.Connection | None = None
        self._write_sem = asyncio.Semaphore(1)
        self._path: Path | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self, path: Path) -> None:
        """
        Connect to ``path`` (creating parent directories) and apply pragmas.

        A second call while already open logs a warning and does nothing.
        """
        if self._conn is not None:
            logger.warning("[DB CONNECTION] Already open at %s; ignoring open(%s)", self._path, path)
            return

        path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(path)
        try:
            for pragma in _PRAGMAS:
                await conn.execute(pragma)
            await conn.commit()
        except aiosqlite.Error:
            await conn.close()
            raise

        self._conn = conn
        self._path = path
        logger.info("[DB CONNECTION] Opened %s", path)

    async def close(self) -> None:
        """Checkpoint the WAL into the main file and close. Safe to call twice."""
        if self._conn is None:
            return

        try:
            await self._conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
        except (aiosqlite.Error, ValueError):
            logger.exception("[DB CONNECTION] WAL checkpoint failed during close")
        finally:
            await self._conn.close()
            self._conn = None
            logger.info("[DB CONNECTION] Closed %s", self._path)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def connection(self) -> aiosqlite.Connection:
        """
        The open connection.

        Raises:
            RuntimeError: ``open()`` has not been called, or ``close()`` has.
        """
        if self._conn is None:
            raise RuntimeError("store connection is not open")
        return self._conn

    # ------------------------------------------------------------------
    # Scoped access
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def read(self) -> AsyncIterator[aiosqlite.Connection]:
        """Connection for SELECTs; does not wait for the writer slot."""
        yield self.connection

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        One write transaction at a time.

        Commits when the block exits normally. Rolls back on any exception,
        cancellation included, so a timed-out allocation leaves no partial
        write behind.

        Raises:
            RuntimeError: The connection is not open.
        """
        conn = self.connection

        async with self._write_sem:
            try:
                yield conn
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Hold the writer slot without opening a transaction.

        For statements SQLite refuses to run inside a transaction, such as
        ``VACUUM``.
        """
        conn = self.connection

        async with self._write_sem:
            yield conn


# Module-level singleton
db_connection = ConnectionManager()
