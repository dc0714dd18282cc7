"""
Database maintenance operations.

Physically evicts expired action locks and runs VACUUM/ANALYZE. Expired locks
are already ignored by acquisition; the purge only keeps the table small.
"""

import time

from modwarden.database.db_connection import STORE_ERRORS, ConnectionManager, db_connection
from modwarden.util.logger import get_logger

logger = get_logger("database_maintenance")


class MaintenanceOperations:
    """Handles database maintenance and cleanup operations."""

    def __init__(self, connection: ConnectionManager = db_connection) -> None:
        self._connection = connection

    async def purge_expired_locks(self, now: float | None = None) -> int:
        """
        Delete action locks whose TTL has elapsed.

        Args:
            now: Unix time to compare against (defaults to the current time)

        Returns:
            Number of rows deleted, or -1 on error
        """
        cutoff = time.time() if now is None else now
        try:
            async with self._connection.transaction() as conn:
                cursor = await conn.execute(
                    "DELETE FROM action_locks WHERE expires_at <= ?",
                    (cutoff,),
                )
                deleted_count = cursor.rowcount
                await cursor.close()
        except STORE_ERRORS as e:
            logger.error("[MAINTENANCE] Lock purge failed: %s", e)
            return -1

        if deleted_count:
            logger.debug("[MAINTENANCE] Purged %d expired action locks", deleted_count)
        return deleted_count

    async def vacuum(self) -> bool:
        """
        Reclaim free pages. Runs outside a transaction, as SQLite requires.

        Returns:
            True if vacuum succeeded, False otherwise
        """
        try:
            logger.info("[MAINTENANCE] Starting VACUUM operation")
            start_time = time.time()
            async with self._connection.exclusive() as conn:
                await conn.execute("VACUUM")
            logger.info("[MAINTENANCE] VACUUM completed in %.2f seconds", time.time() - start_time)
            return True
        except STORE_ERRORS as e:
            logger.error("[MAINTENANCE] VACUUM failed: %s", e)
            return False

    async def analyze(self) -> bool:
        """
        Update database statistics for the query planner.

        Returns:
            True if analyze succeeded, False otherwise
        """
        try:
            async with self._connection.transaction() as conn:
                await conn.execute("ANALYZE")
            return True
        except STORE_ERRORS as e:
            logger.error("[MAINTENANCE] ANALYZE failed: %s", e)
            return False
