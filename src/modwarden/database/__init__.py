"""
Database package for Modwarden.

SQLite store accessed through one long-lived aiosqlite connection.

Public API:
    - db_connection: shared ConnectionManager (serialised write transactions)
    - Database: startup/shutdown coordinator that creates the schema
    - MaintenanceOperations: expired-lock purge, VACUUM, ANALYZE
"""
