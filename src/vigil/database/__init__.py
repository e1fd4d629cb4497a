"""
Database package for Vigil.

Holds the single aiosqlite connection used for the audit trail and the schema
it is created with.

Public API:
    - db_connection: Global ConnectionManager instance
    - ConnectionManager: Connection lifecycle and serialised write transactions
"""

from vigil.database.db_connection import ConnectionManager, db_connection

__all__ = ["ConnectionManager", "db_connection"]
