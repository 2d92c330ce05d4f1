"""
StorageService - Typed accessors over the four store keys.

Wraps any KeyValueStore so managers deal in User/Shipment/Settings objects
instead of raw JSON. Lists are always read and written whole.

Usage:
    storage = StorageService(MemoryStore())
    await storage.ensure_initial_data(admin_email="admin@test.com", admin_password="admin")

    users = await storage.get_users()
    await storage.save_trackings([...])
"""

import logging
from typing import List, Optional

from ..constants import (
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_ID,
    KEY_CURRENT_USER,
    KEY_SETTINGS,
    KEY_TRACKINGS,
    KEY_USERS,
)
from ..credentials import hash_password
from ..models import Settings, Shipment, User, UserRole
from .base import KeyValueStore

logger = logging.getLogger(__name__)


class StorageService:

    def __init__(self, store: KeyValueStore):
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        return self._store

    async def ensure_initial_data(
        self,
        admin_email: str = DEFAULT_ADMIN_EMAIL,
        admin_password: Optional[str] = None,
    ) -> None:
        """Seed the admin account when no user list has ever been stored."""
        if await self._store.get(KEY_USERS) is not None:
            return
        admin = User(
            id=DEFAULT_ADMIN_ID,
            email=admin_email,
            role=UserRole.ADMIN,
            password_hash=hash_password(admin_password) if admin_password else None,
        )
        await self.save_users([admin])
        logger.info(f"Seeded admin account {admin_email}")

    # -- Users --

    async def get_users(self) -> List[User]:
        raw = await self._store.get(KEY_USERS) or []
        return [User.from_dict(u) for u in raw]

    async def save_users(self, users: List[User]) -> None:
        await self._store.set(KEY_USERS, [u.to_dict() for u in users])

    async def add_user(self, user: User) -> None:
        users = await self.get_users()
        users.append(user)
        await self.save_users(users)

    # -- Session --

    async def get_current_user(self) -> Optional[User]:
        raw = await self._store.get(KEY_CURRENT_USER)
        return User.from_dict(raw) if raw else None

    async def get_session_token(self) -> Optional[str]:
        raw = await self._store.get(KEY_CURRENT_USER)
        return raw.get("token") if raw else None

    async def set_current_user(self, user: Optional[User], token: Optional[str] = None) -> None:
        if user:
            # The session pointer never carries the password hash
            session = user.to_public_dict()
            if token:
                session["token"] = token
            await self._store.set(KEY_CURRENT_USER, session)
        else:
            await self._store.delete(KEY_CURRENT_USER)

    # -- Shipments --

    async def get_trackings(self) -> List[Shipment]:
        raw = await self._store.get(KEY_TRACKINGS) or []
        return [Shipment.from_dict(s) for s in raw]

    async def save_trackings(self, trackings: List[Shipment]) -> None:
        await self._store.set(KEY_TRACKINGS, [s.to_dict() for s in trackings])

    # -- Settings --

    async def get_settings(self) -> Settings:
        return Settings.from_dict(await self._store.get(KEY_SETTINGS))

    async def get_registration_enabled(self) -> bool:
        return (await self.get_settings()).registration_enabled

    async def set_registration_enabled(self, enabled: bool) -> None:
        raw = await self._store.get(KEY_SETTINGS) or {}
        raw["registrationEnabled"] = enabled
        await self._store.set(KEY_SETTINGS, raw)
