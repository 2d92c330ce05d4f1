"""
ChinaTrack Store - persistence for users, session, shipments and settings.

- KeyValueStore: backend interface (MemoryStore, JsonFileStore, PostgresStore)
- StorageService: typed accessors used by the managers
- create_store: build a backend from the ``store`` config section
"""

from typing import Any, Dict, Optional

from ..errors import ConfigError
from .base import KeyValueStore, MemoryStore
from .file_store import JsonFileStore
from .service import StorageService


def create_store(cfg: Optional[Dict[str, Any]] = None) -> KeyValueStore:
    """Build a store backend from config (``backend``: memory | file | postgres)."""
    cfg = cfg or {}
    backend = cfg.get("backend", "file")
    if backend == "memory":
        return MemoryStore()
    if backend == "file":
        return JsonFileStore(cfg.get("path", "~/.chinatrack/store.json"))
    if backend == "postgres":
        dsn = cfg.get("dsn")
        if not dsn:
            raise ConfigError("store.dsn is required for the postgres backend")
        from ..db import Database
        from .postgres_store import PostgresStore
        return PostgresStore(Database(dsn=dsn))
    raise ConfigError(f"Unknown store backend: {backend!r}")


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "StorageService",
    "create_store",
]
