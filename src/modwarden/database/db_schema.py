"""
Database schema initialization and version tracking.

Timestamps are stored as unix seconds so expiry checks are plain numeric
comparisons with no string parsing or timezone conversion.
"""

import aiosqlite
from modwarden.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 1


class SchemaManager:
    """Creates the tables, indexes and schema version row."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> None:
        """
        Create all database tables and indexes if they do not exist.

        Args:
            db: Open database connection
        """
        await SchemaManager._create_tables(db)
        await SchemaManager._create_indexes(db)
        await SchemaManager._update_schema_version(db)
        await db.commit()
        logger.info("[SCHEMA] Database schema initialized")

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        """Create all required database tables."""
        # Per-guild, per-user trust score
        await db.execute("""
            CREATE TABLE IF NOT EXISTS trust_records (
                guild_id INTEGER NOT NULL,
                user_id INTEGER NOT NULL,
                trust REAL NOT NULL,
                warnings INTEGER NOT NULL DEFAULT 0 CHECK (warnings >= 0),
                last_infraction_at INTEGER,
                last_trust_update_at INTEGER,
                created_at INTEGER NOT NULL,
                PRIMARY KEY (guild_id, user_id)
            )
        """)

        # Case / ticket numbering; next_value is the number the next caller gets
        await db.execute("""
            CREATE TABLE IF NOT EXISTS sequence_counters (
                guild_id INTEGER NOT NULL,
                sequence_name TEXT NOT NULL,
                next_value INTEGER NOT NULL DEFAULT 1 CHECK (next_value >= 1),
                PRIMARY KEY (guild_id, sequence_name)
            )
        """)

        # Short-lived duplicate-action locks, live until expires_at
        await db.execute("""
            CREATE TABLE IF NOT EXISTS action_locks (
                lock_name TEXT NOT NULL,
                guild_id INTEGER NOT NULL,
                actor_id INTEGER NOT NULL,
                payload TEXT NOT NULL DEFAULT '',
                created_at REAL NOT NULL,
                expires_at REAL NOT NULL,
                PRIMARY KEY (lock_name, guild_id, actor_id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def _create_indexes(db: aiosqlite.Connection) -> None:
        """Create indexes for the maintenance sweep."""
        await db.execute("CREATE INDEX IF NOT EXISTS idx_action_locks_expires ON action_locks(expires_at)")

    @staticmethod
    async def _update_schema_version(db: aiosqlite.Connection) -> None:
        """Update schema version tracking."""
        await db.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
