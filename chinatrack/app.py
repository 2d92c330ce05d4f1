"""
ChinaTrack Application - single entry point wiring store, client and managers.

Usage:
    from chinatrack import ChinaTrack

    app = ChinaTrack("config.yaml")

    user = await app.users.login("admin@test.com", "admin")
    shipment = await app.shipments.add_shipment("SF123", "sf-express")

    await app.close()

Config file (``${VAR}`` is replaced from the environment):

    tracking:
      api_key: ${TRACKINGMORE_API_KEY}
      timeout: 15            # per HTTP request
      refresh_timeout: 45    # per shipment in refresh_all, default 3 x timeout
      max_concurrency: 5
    store:
      backend: file
      path: ~/.chinatrack/store.json
    admin:
      email: admin@test.com
      password: ${CHINATRACK_ADMIN_PASSWORD}
"""

import logging
import os
import re
from typing import Any, Dict, Optional, Union

import httpx
import yaml

from .constants import (
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_TIMEOUT,
    LOOKUP_REQUESTS,
    TRACKINGMORE_BASE_URL,
)
from .errors import ConfigError
from .shipments import ShipmentManager
from .store import KeyValueStore, StorageService, create_store
from .tracking import TrackingClient
from .users import UserManager

logger = logging.getLogger(__name__)


def _load_config(path: str) -> dict:
    """Read YAML config file with ${VAR} environment variable substitution."""
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    # Replace ${VAR} with environment variable values
    def _replace_env(match):
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    resolved = re.sub(r"\$\{(\w+)\}", _replace_env, raw)
    return yaml.safe_load(resolved) or {}


class ChinaTrack:
    """
    ChinaTrack application entry point.

    Sync constructor reads config and builds components; async
    initialization (loading the store, seeding the admin account) is
    deferred to initialize(), which the managers' callers run once.

    Args:
        config: Path to a YAML config file, or an already-loaded dict.
        store: Optional store backend overriding the ``store`` section.
        http_client: Optional httpx.AsyncClient for the tracking client.
    """

    def __init__(
        self,
        config: Union[str, Dict[str, Any]],
        store: Optional[KeyValueStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = _load_config(config) if isinstance(config, str) else dict(config)
        self._initialized = False

        tracking_cfg = self._config.get("tracking") or {}
        if not tracking_cfg.get("api_key"):
            raise ConfigError("Missing required config field: 'tracking.api_key'")

        timeout = float(tracking_cfg.get("timeout", DEFAULT_TIMEOUT))
        refresh_timeout = float(tracking_cfg.get("refresh_timeout", timeout * LOOKUP_REQUESTS))
        self._store = store or create_store(self._config.get("store"))
        self._storage = StorageService(self._store)
        self._client = TrackingClient(
            api_key=tracking_cfg["api_key"],
            base_url=tracking_cfg.get("base_url", TRACKINGMORE_BASE_URL),
            timeout=timeout,
            http_client=http_client,
        )
        self.users = UserManager(self._storage)
        self.shipments = ShipmentManager(
            self._storage,
            self._client,
            max_concurrency=int(tracking_cfg.get("max_concurrency", DEFAULT_MAX_CONCURRENCY)),
            refresh_timeout=refresh_timeout,
        )

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    @property
    def storage(self) -> StorageService:
        return self._storage

    @property
    def tracking_client(self) -> TrackingClient:
        return self._client

    async def initialize(self) -> None:
        """Open the store and seed the admin account. Runs once."""
        if self._initialized:
            return
        admin_cfg = self._config.get("admin") or {}
        await self._store.initialize()
        await self._storage.ensure_initial_data(
            admin_email=admin_cfg.get("email", DEFAULT_ADMIN_EMAIL),
            admin_password=admin_cfg.get("password", DEFAULT_ADMIN_PASSWORD),
        )
        self._initialized = True
        logger.info("ChinaTrack initialized")

    async def close(self) -> None:
        await self._client.close()
        await self._store.close()
        self._initialized = False
