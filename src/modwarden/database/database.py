"""
Database initialization and lifecycle.

The Database class opens the shared connection, creates the schema and owns
the maintenance helpers. Repositories and services talk to the connection
manager directly; this class only handles startup and shutdown.
"""

from __future__ import annotations

from pathlib import Path

import aiosqlite

from modwarden.database.db_connection import ConnectionManager, db_connection
from modwarden.database.db_maintenance import MaintenanceOperations
from modwarden.database.db_schema import SchemaManager
from modwarden.util.logger import get_logger

logger = get_logger("database")

# Database file path
DB_PATH = Path("./data/app.db").resolve()


class Database:
    """
    Central coordinator for database startup, maintenance and shutdown.

    Lifecycle:
        1. Call initialize() at program startup
        2. Use repositories/services through the connection manager
        3. Call shutdown() at program end
    """

    def __init__(self, db_path: Path = DB_PATH, connection: ConnectionManager = db_connection):
        """
        Args:
            db_path: Path to the SQLite database file
            connection: Connection manager to open (the module singleton by default)
        """
        self.db_path = db_path
        self.connection = connection
        self.maintenance = MaintenanceOperations(connection)
        self._initialized = False

    async def initialize(self) -> bool:
        """
        Open the connection and create the schema.

        Returns:
            True if initialization succeeded, False otherwise
        """
        if self._initialized:
            logger.debug("[DATABASE] Already initialized, skipping")
            return True

        try:
            await self.connection.open(self.db_path)
            await SchemaManager.initialize_schema(self.connection.connection)
        except (aiosqlite.Error, OSError) as e:
            logger.error("[DATABASE] Database initialization failed: %s", e)
            await self.connection.close()
            return False

        self._initialized = True
        logger.info("[DATABASE] Database initialized at %s", self.db_path)
        return True

    async def shutdown(self) -> None:
        """Close the shared connection."""
        if not self._initialized:
            return

        await self.connection.close()
        self._initialized = False
        logger.info("[DATABASE] Database shutdown complete")
