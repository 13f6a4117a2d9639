"""Tests specific to the SQLite mapping store and its connection pool."""

import asyncio
import sqlite3

import pytest

from shortlink.database.models import InsertResult
from shortlink.database.sqlite import SQLiteMappingStore
from shortlink.errors import StorageError


@pytest.mark.asyncio
class TestSQLiteMappingStore:
    """SQLite engine behavior beyond the shared contract."""

    async def test_creates_schema(self, sqlite_store, sqlite_path):
        """The urls table has the documented two-column layout."""
        with sqlite3.connect(sqlite_path) as conn:
            columns = conn.execute("PRAGMA table_info(urls)").fetchall()

        # (cid, name, type, notnull, default, pk)
        by_name = {col[1]: col for col in columns}
        assert set(by_name) == {"id", "url"}
        assert by_name["id"][2] == "TEXT" and by_name["id"][5] == 1
        assert by_name["url"][2] == "TEXT" and by_name["url"][3] == 1

    async def test_mappings_survive_reopen(self, sqlite_path, logger):
        db = SQLiteMappingStore(db_config=sqlite_path, logger=logger)
        await db.open()
        assert await db.insert("P3rs1s", "https://example.com/durable") is InsertResult.CREATED
        await db.close()

        reopened = SQLiteMappingStore(db_config=sqlite_path, create_if_missing=False, logger=logger)
        await reopened.open()
        try:
            assert await reopened.get("P3rs1s") == "https://example.com/durable"
        finally:
            await reopened.close()

    async def test_missing_file_without_create_fails_open(self, tmp_path, logger):
        db = SQLiteMappingStore(
            db_config=str(tmp_path / "absent.db"),
            create_if_missing=False,
            logger=logger,
        )

        with pytest.raises(StorageError):
            await db.open()

        assert not (tmp_path / "absent.db").exists()

    async def test_missing_table_without_create_fails_open(self, tmp_path, logger):
        path = tmp_path / "empty.db"
        sqlite3.connect(path).close()

        db = SQLiteMappingStore(db_config=str(path), create_if_missing=False, logger=logger)

        with pytest.raises(StorageError, match="no such table"):
            await db.open()

    async def test_creates_parent_directory(self, tmp_path, logger):
        path = tmp_path / "nested" / "dir" / "urls.db"
        db = SQLiteMappingStore(db_config=str(path), logger=logger)
        await db.open()
        await db.close()

        assert path.exists()

    async def test_constraint_failure_is_storage_error(self, sqlite_store):
        """A NOT NULL violation is a storage failure, not a conflict."""
        with pytest.raises(StorageError) as exc_info:
            await sqlite_store.insert("N0Url1", None)

        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)
        assert await sqlite_store.get("N0Url1") is None

    async def test_connections_return_to_pool_after_errors(self, sqlite_store):
        pool_size = sqlite_store.pool.size

        for i in range(pool_size * 2):
            with pytest.raises(StorageError):
                await sqlite_store.insert(f"Err{i:03d}", None)

        assert sqlite_store.pool._idle.qsize() == pool_size
        assert await sqlite_store.insert("Ok1234", "https://example.com") is InsertResult.CREATED

    async def test_more_tasks_than_connections(self, sqlite_store):
        """Tasks beyond the pool size wait for a connection instead of failing."""
        codes = [f"Pool{i:02d}" for i in range(sqlite_store.pool.size * 5)]

        results = await asyncio.gather(
            *(sqlite_store.insert(code, f"https://example.com/{code}") for code in codes)
        )

        assert all(result is InsertResult.CREATED for result in results)
        assert sqlite_store.pool._idle.qsize() == sqlite_store.pool.size

    async def test_cancelled_insert_leaves_complete_row_or_none(self, sqlite_store):
        """Cancelling the caller never leaks a connection or a partial row."""
        task = asyncio.create_task(sqlite_store.insert("C4ncel", "https://example.com/cancel"))
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        # Wait until the worker thread has handed its connection back
        for _ in range(200):
            if sqlite_store.pool._idle.qsize() == sqlite_store.pool.size:
                break
            await asyncio.sleep(0.01)

        assert sqlite_store.pool._idle.qsize() == sqlite_store.pool.size
        assert await sqlite_store.get("C4ncel") in (None, "https://example.com/cancel")

    async def test_closed_store_raises_storage_error(self, sqlite_path, logger):
        db = SQLiteMappingStore(db_config=sqlite_path, logger=logger)
        await db.open()
        await db.close()

        with pytest.raises(StorageError):
            await db.get("AbC123")

        assert await db.health_check() is False
