"""JsonFileStore: single-file JSON persistence with atomic writes and backup."""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from .base import KeyValueStore

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class JsonFileStore(KeyValueStore):
    """JSON file persistence for all store keys.

    The whole key space lives in one JSON document
    ``{"version": 1, "data": {key: value}}``. Every write rewrites the file
    through a temp file + rename, keeping the previous file as ``.bak``.
    """

    def __init__(self, path: str = "~/.chinatrack/store.json"):
        self._path = Path(os.path.expanduser(path))
        self._data: Dict[str, Any] = {}
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    async def initialize(self) -> None:
        await self._load()

    async def _load(self) -> None:
        """Load the document from disk. A missing file is an empty store."""
        self._loaded = True
        if not self._path.exists():
            self._data = {}
            logger.info(f"Store not found at {self._path}, starting empty")
            return

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load store from {self._path}: {e}")
            self._data = {}
            return

        if not isinstance(data, dict) or not isinstance(data.get("data", {}), dict):
            logger.error(f"Store at {self._path} is not a JSON object, starting empty")
            self._data = {}
            return

        version = data.get("version", STORE_VERSION)
        if version != STORE_VERSION:
            logger.warning(f"Store version mismatch: expected {STORE_VERSION}, got {version}")
        self._data = data.get("data", {})
        logger.info(f"Loaded {len(self._data)} keys from {self._path}")

    async def _save(self, data: Dict[str, Any]) -> None:
        """Persist data with atomic write and backup."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(
            {"version": STORE_VERSION, "data": data},
            indent=2,
            ensure_ascii=False,
        )

        if self._path.exists():
            bak_path = self._path.with_suffix(".json.bak")
            try:
                shutil.copy2(str(self._path), str(bak_path))
            except OSError as e:
                logger.debug(f"Backup creation failed (non-fatal): {e}")

        # Temp file in the same directory so the rename stays atomic
        fd, tmp_path = tempfile.mkstemp(
            prefix=".store-", suffix=".tmp", dir=str(self._path.parent)
        )
        try:
            try:
                os.write(fd, content.encode("utf-8"))
            finally:
                os.close(fd)
            os.replace(tmp_path, str(self._path))
        except OSError:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    async def get(self, key: str) -> Optional[Any]:
        if not self._loaded:
            await self._load()
        value = self._data.get(key)
        # Round-trip through JSON so callers never share state with the cache
        return json.loads(json.dumps(value)) if value is not None else None

    async def set(self, key: str, value: Any) -> None:
        if not self._loaded:
            await self._load()
        # The cache only changes once the file write succeeded
        data = dict(self._data)
        data[key] = json.loads(json.dumps(value))
        await self._save(data)
        self._data = data

    async def delete(self, key: str) -> bool:
        if not self._loaded:
            await self._load()
        if key not in self._data:
            return False
        data = {k: v for k, v in self._data.items() if k != key}
        await self._save(data)
        self._data = data
        return True
