"""
PostgresStore - Key-value store over a single Postgres table.

Usage:
    db = Database(dsn="postgresql://...")
    await db.initialize()
    store = PostgresStore(db)
    await store.initialize()

    await store.set("chinatrack_items", [...])
    items = await store.get("chinatrack_items")
"""

import json
import logging
from typing import Any, Optional

from ..db import Database, Repository
from .base import KeyValueStore

logger = logging.getLogger(__name__)


class KeyValueTable(Repository):
    TABLE_NAME = "kv_store"
    CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS kv_store (
        key         TEXT PRIMARY KEY,
        value_json  JSONB NOT NULL,
        updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """


class PostgresStore(KeyValueStore):
    """
    Whole-value storage in the ``kv_store`` table.

    Each set() is a single upsert, so a value is never half-written.
    """

    def __init__(self, db: Database):
        self._db = db
        self._table = KeyValueTable(db)

    async def initialize(self) -> None:
        await self._db.initialize()
        await self._table.ensure_table()

    async def close(self) -> None:
        await self._db.close()

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._db.fetchval(
            "SELECT value_json FROM kv_store WHERE key = $1", key
        )
        if raw is None:
            return None
        return json.loads(raw) if isinstance(raw, str) else raw

    async def set(self, key: str, value: Any) -> None:
        await self._db.execute(
            """
            INSERT INTO kv_store (key, value_json, updated_at)
            VALUES ($1, $2::jsonb, NOW())
            ON CONFLICT (key) DO UPDATE SET
                value_json = EXCLUDED.value_json,
                updated_at = NOW()
            """,
            key,
            json.dumps(value),
        )

    async def delete(self, key: str) -> bool:
        result = await self._db.execute("DELETE FROM kv_store WHERE key = $1", key)
        return result == "DELETE 1"
