# sqlite_store.py - SQLite archive store
# ============================================================================
# FILE: repo_archive/stores/sqlite_store.py
# Local persistent storage for compressed archives using SQLite
# ============================================================================

import os
import time
import asyncio
import sqlite3
import logging
from contextlib import contextmanager
from typing import List, Optional

from .base import BaseArchiveStore

logger = logging.getLogger(__name__)


class SQLiteArchiveStore(BaseArchiveStore):
    """
    Archive records in a single SQLite table.
    Blocking sqlite3 calls run in a worker thread.
    """

    def __init__(self, db_path: Optional[str] = None, table: str = "archives"):
        if db_path is None:
            cache_dir = os.path.join(os.getcwd(), ".repo_archive")
            os.makedirs(cache_dir, exist_ok=True)
            self.db_path = os.path.join(cache_dir, "archives.db")
        else:
            self.db_path = db_path
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table!r}")
        self.table = table

    @contextmanager
    def _get_conn(self):
        conn = sqlite3.connect(self.db_path)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_db(self):
        """Initialize the database schema."""
        with self._get_conn() as conn:
            conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at REAL
            )
            """)

    async def initialize(self):
        await asyncio.to_thread(self._init_db)
        logger.info(f"Initialized SQLiteArchiveStore at {self.db_path}")

    def _get(self, key: str) -> Optional[str]:
        with self._get_conn() as conn:
            row = conn.execute(
                f"SELECT value FROM {self.table} WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def _set(self, key: str, value: str):
        with self._get_conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {self.table} (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, time.time()),
            )

    def _delete(self, key: str):
        with self._get_conn() as conn:
            conn.execute(f"DELETE FROM {self.table} WHERE key = ?", (key,))

    def _keys(self) -> List[str]:
        with self._get_conn() as conn:
            rows = conn.execute(f"SELECT key FROM {self.table} ORDER BY updated_at").fetchall()
        return [r[0] for r in rows]

    def _clear(self):
        with self._get_conn() as conn:
            conn.execute(f"DELETE FROM {self.table}")

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str):
        await asyncio.to_thread(self._set, key, value)

    async def delete(self, key: str):
        await asyncio.to_thread(self._delete, key)

    async def keys(self) -> List[str]:
        return await asyncio.to_thread(self._keys)

    async def clear(self):
        await asyncio.to_thread(self._clear)
