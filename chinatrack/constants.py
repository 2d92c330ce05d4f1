"""
Shared constants for ChinaTrack.

Centralizes store keys, the carrier catalogue and tracking service defaults
so the store, client and managers agree on them without importing each other.
"""

from typing import Dict, Tuple

# ── Persistent store keys ──
# Each key holds one whole JSON value. There are no partial updates.

KEY_USERS = "chinatrack_users"
KEY_CURRENT_USER = "chinatrack_current_user"
KEY_TRACKINGS = "chinatrack_items"
KEY_SETTINGS = "chinatrack_settings"

STORE_KEYS: Tuple[str, ...] = (KEY_USERS, KEY_CURRENT_USER, KEY_TRACKINGS, KEY_SETTINGS)

# ── TrackingMore API ──

TRACKINGMORE_BASE_URL = "https://api.trackingmore.com/v4"
TRACKINGMORE_API_KEY_HEADER = "Tracking-Api-Key"

# meta.code values returned by TrackingMore
META_CODE_OK = 200
META_CODE_ALREADY_EXISTS = 4016

DEFAULT_TIMEOUT = 15.0

# A lookup makes up to three sequential requests (realtime, create, get);
# the per-shipment refresh budget covers all of them.
LOOKUP_REQUESTS = 3
DEFAULT_REFRESH_TIMEOUT = DEFAULT_TIMEOUT * LOOKUP_REQUESTS
DEFAULT_MAX_CONCURRENCY = 5

# ── Carriers ──
# code -> display name

CHINA_CARRIERS: Dict[str, str] = {
    "sf-express": "SF Express (Thuận Phong)",
    "deppon": "Debon (Deppon)",
    "zto": "ZTO Express",
    "yto": "YTO Express",
    "sto": "STO Express",
    "yunda": "Yunda Express",
    "china-ems": "China EMS",
    "jtexpress": "J&T Express China",
    "bestex": "Best Express",
}

DEFAULT_CARRIER = "sf-express"

# ── Seeded admin ──

DEFAULT_ADMIN_ID = "1"
DEFAULT_ADMIN_EMAIL = "admin@test.com"
DEFAULT_ADMIN_PASSWORD = "admin"
