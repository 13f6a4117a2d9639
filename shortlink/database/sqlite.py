"""SQLite implementation for URL shortener.

The stdlib ``sqlite3`` driver is blocking, so every statement runs in a
worker thread via ``asyncio.to_thread``. Connections live in a fixed-size
pool; each borrowed connection serves one statement and is handed back
once its thread is done with it.
"""

import asyncio
import functools
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, Callable, List, Optional

from ..errors import StorageError
from .base import MappingStoreBase
from .models import InsertResult
from .schema import (
    COUNT_SQL,
    CREATE_TABLE_SQL,
    SQLITE_INSERT_SQL,
    SQLITE_SELECT_SQL,
    TABLE_PROBE_SQL,
)


class SQLiteConnectionPool:
    """Fixed-size pool of SQLite connections shared by all request tasks."""

    def __init__(
        self,
        db_path: str,
        size: int = 5,
        timeout_seconds: float = 30,
        create_if_missing: bool = True,
    ):
        self.db_path = db_path
        self.size = size
        self.timeout_seconds = timeout_seconds
        self.create_if_missing = create_if_missing
        self._connections: List[sqlite3.Connection] = []
        self._idle: Optional[asyncio.Queue] = None
        self._closed = False

    def _connect(self) -> sqlite3.Connection:
        """Open one connection (runs in a worker thread)."""
        mode = "rwc" if self.create_if_missing else "rw"
        uri = f"{Path(self.db_path).resolve().as_uri()}?mode={mode}"
        conn = sqlite3.connect(
            uri,
            uri=True,
            timeout=self.timeout_seconds,
            isolation_level=None,  # autocommit: one statement, one transaction
            check_same_thread=False,
        )
        try:
            conn.execute("PRAGMA journal_mode=WAL")
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    async def open(self) -> None:
        if self.create_if_missing:
            parent = os.path.dirname(os.path.abspath(self.db_path))
            os.makedirs(parent, exist_ok=True)

        self._idle = asyncio.Queue()
        for _ in range(self.size):
            conn = await asyncio.to_thread(self._connect)
            self._connections.append(conn)
            self._idle.put_nowait(conn)

    async def run(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run ``fn(conn, *args)`` in a worker thread on a pooled connection.

        If the awaiting task is cancelled the statement still runs to
        completion and the connection is released only afterwards.
        """
        if self._closed or self._idle is None:
            raise StorageError("SQLite connection pool is not open")

        conn = await self._idle.get()
        work = asyncio.ensure_future(asyncio.to_thread(fn, conn, *args))
        work.add_done_callback(functools.partial(self._release, conn))
        return await asyncio.shield(work)

    def _release(self, conn: sqlite3.Connection, work: asyncio.Future) -> None:
        if not work.cancelled():
            # Mark the result as retrieved; the caller may have gone away.
            work.exception()
        self._idle.put_nowait(conn)

    async def close(self) -> None:
        """Wait for every connection to come back, then close them all."""
        if self._closed or self._idle is None:
            return
        self._closed = True

        for _ in range(len(self._connections)):
            conn = await self._idle.get()
            await asyncio.to_thread(conn.close)
        self._connections.clear()


class SQLiteMappingStore(MappingStoreBase):
    """Single-file SQLite store for URL mappings."""

    backend = "sqlite"

    def __init__(
        self,
        db_config: str,
        pool_size: int = 5,
        timeout_seconds: float = 30,
        create_if_missing: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize SQLite store.

        Args:
            db_config: Path of the database file
            pool_size: Number of pooled connections
            timeout_seconds: How long a writer waits on a locked database
            create_if_missing: Create the file and table if absent
            logger: Optional logger instance
        """
        super().__init__(db_config)

        self.logger = logger or logging.getLogger(__name__)
        self.create_if_missing = create_if_missing
        self.pool = SQLiteConnectionPool(
            db_path=db_config,
            size=pool_size,
            timeout_seconds=timeout_seconds,
            create_if_missing=create_if_missing,
        )

    async def open(self) -> None:
        self.logger.info(f"Opening SQLite database at {self.db_config} (pool size {self.pool.size})")
        try:
            await self.pool.open()
            if self.create_if_missing:
                await self.pool.run(self._execute_sync, CREATE_TABLE_SQL)
                self.logger.info("Ensured urls table exists")
            else:
                await self.pool.run(self._execute_sync, TABLE_PROBE_SQL)
        except (sqlite3.Error, OSError) as e:
            self.logger.error(f"Error opening SQLite database: {e}")
            await self.pool.close()
            raise StorageError(f"Cannot open SQLite database {self.db_config}: {e}") from e

    @staticmethod
    def _execute_sync(conn: sqlite3.Connection, sql: str) -> None:
        conn.execute(sql).fetchall()

    @staticmethod
    def _insert_sync(conn: sqlite3.Connection, short_code: str, original_url: str) -> bool:
        cursor = conn.execute(SQLITE_INSERT_SQL, (short_code, original_url))
        return cursor.rowcount == 1

    @staticmethod
    def _get_sync(conn: sqlite3.Connection, short_code: str) -> Optional[str]:
        row = conn.execute(SQLITE_SELECT_SQL, (short_code,)).fetchone()
        return row[0] if row else None

    @staticmethod
    def _count_sync(conn: sqlite3.Connection) -> int:
        return conn.execute(COUNT_SQL).fetchone()[0]

    async def insert(self, short_code: str, original_url: str) -> InsertResult:
        try:
            created = await self.pool.run(self._insert_sync, short_code, original_url)
        except sqlite3.Error as e:
            self.logger.error(f"Error inserting short code {short_code}: {e}")
            raise StorageError(f"SQLite insert failed: {e}") from e

        if not created:
            self.logger.warning(f"Short code already exists: {short_code}")
            return InsertResult.CONFLICT

        self.logger.debug(f"Stored {short_code} -> {original_url}")
        return InsertResult.CREATED

    async def get(self, short_code: str) -> Optional[str]:
        try:
            return await self.pool.run(self._get_sync, short_code)
        except sqlite3.Error as e:
            self.logger.error(f"Error looking up short code {short_code}: {e}")
            raise StorageError(f"SQLite lookup failed: {e}") from e

    async def count(self) -> int:
        try:
            return await self.pool.run(self._count_sync)
        except sqlite3.Error as e:
            raise StorageError(f"SQLite count failed: {e}") from e

    async def health_check(self) -> bool:
        try:
            await self.pool.run(self._execute_sync, "SELECT 1")
            return True
        except (sqlite3.Error, StorageError) as e:
            self.logger.error(f"Health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.pool.close()
        self.logger.debug(f"Closed SQLite database at {self.db_config}")
