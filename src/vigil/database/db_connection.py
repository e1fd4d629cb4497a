"""
Database connection management: one long-lived aiosqlite connection.

SQLite is single-writer, so writes go through ``transaction()`` which
serialises writers with a semaphore and commits or rolls back as a unit.
The audit trail is append-only, so there is no read path.

Usage
-----
    await db_connection.open(DB_PATH)

    async with db_connection.transaction() as conn:
        await conn.execute("INSERT ...")

    await db_connection.close()
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from vigil.database.db_schema import SchemaManager
from vigil.util.logger import get_logger

logger = get_logger("database_connection")

_PRAGMAS = [
    "PRAGMA journal_mode = WAL",
    "PRAGMA synchronous = NORMAL",    # safe with WAL
    "PRAGMA temp_store = MEMORY",
]


class ConnectionManager:
    """
    Wrapper around a single aiosqlite connection opened for the bot lifetime.

    Writes go through ``transaction()``, one writer at a time.
    """

    def __init__(self) -> None:
        self._conn: aiosqlite.Connection | None = None
        self._write_sem = asyncio.Semaphore(1)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self, path: Path) -> None:
        """
        Open the database, apply pragmas and make sure the schema exists.

        Args:
            path: Path to the SQLite database file. Parent folders are created.
        """
        if self.is_open:
            logger.warning("[DB CONNECTION] open() called but connection already exists; ignoring")
            return

        path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(path)
        self._conn.row_factory = aiosqlite.Row

        for pragma in _PRAGMAS:
            await self._conn.execute(pragma)
        await SchemaManager.initialize_schema(self._conn)

        logger.info("[DB CONNECTION] Opened connection to %s", path)

    async def close(self) -> None:
        """Flush the WAL and close the connection. Safe to call twice."""
        if not self.is_open:
            return

        try:
            await self._conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
            await self._conn.commit()
        except Exception:
            logger.exception("[DB CONNECTION] WAL checkpoint failed during close")
        finally:
            await self._conn.close()
            self._conn = None
            logger.info("[DB CONNECTION] Connection closed")

    @property
    def connection(self) -> aiosqlite.Connection:
        """
        The raw aiosqlite connection.

        Raises:
            RuntimeError: If the connection has not been opened yet.
        """
        if self._conn is None:
            raise RuntimeError("Database connection is not open. Call `await db_connection.open(path)` at startup.")
        return self._conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Serialised write transaction; commits on clean exit, rolls back on error."""
        conn = self.connection

        async with self._write_sem:
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise


db_connection = ConnectionManager()
