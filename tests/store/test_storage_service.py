"""Tests for chinatrack.store.StorageService and create_store"""

import pytest

from chinatrack.credentials import verify_password
from chinatrack.errors import ConfigError
from chinatrack.models import Shipment, User, UserRole
from chinatrack.store import JsonFileStore, MemoryStore, create_store

from conftest import make_update


class TestInitialData:

    async def test_seeds_admin_once(self, storage):
        await storage.ensure_initial_data(admin_email="admin@test.com", admin_password="admin")

        users = await storage.get_users()
        assert len(users) == 1
        admin = users[0]
        assert admin.id == "1"
        assert admin.role == UserRole.ADMIN
        assert verify_password("admin", admin.password_hash)

        await storage.ensure_initial_data(admin_email="other@test.com", admin_password="x")
        assert [u.email for u in await storage.get_users()] == ["admin@test.com"]

    async def test_empty_user_list_is_not_reseeded(self, storage):
        await storage.save_users([])
        await storage.ensure_initial_data()
        assert await storage.get_users() == []


class TestTypedAccessors:

    async def test_users_roundtrip(self, storage):
        user = User(id="u1", email="a@b.c", role=UserRole.USER, password_hash="h")
        await storage.add_user(user)
        assert await storage.get_users() == [user]

    async def test_trackings_stored_with_camel_case_keys(self, storage, store):
        shipment = Shipment.create("SF1", "sf-express", make_update())
        await storage.save_trackings([shipment])

        raw = store.snapshot()["chinatrack_items"][0]
        assert raw["trackingNumber"] == "SF1"
        assert raw["carrierCode"] == "sf-express"
        assert "deletedAt" not in raw
        assert await storage.get_trackings() == [shipment]

    async def test_settings_default_to_registration_enabled(self, storage):
        assert await storage.get_registration_enabled() is True

    async def test_registration_setting_persists(self, storage, store):
        await storage.set_registration_enabled(False)
        assert await storage.get_registration_enabled() is False
        assert store.snapshot()["chinatrack_settings"] == {"registrationEnabled": False}

    async def test_clearing_session_deletes_key(self, storage, store):
        await storage.set_current_user(User(id="1", email="a@b.c"))
        await storage.set_current_user(None)
        assert "chinatrack_current_user" not in store.snapshot()
        assert await storage.get_current_user() is None


class TestCreateStore:

    def test_default_is_file(self):
        assert isinstance(create_store(None), JsonFileStore)

    def test_memory(self):
        assert isinstance(create_store({"backend": "memory"}), MemoryStore)

    def test_file_path(self, tmp_path):
        store = create_store({"backend": "file", "path": str(tmp_path / "s.json")})
        assert store.path == tmp_path / "s.json"

    def test_postgres_requires_dsn(self):
        with pytest.raises(ConfigError):
            create_store({"backend": "postgres"})

    def test_unknown_backend(self):
        with pytest.raises(ConfigError):
            create_store({"backend": "redis"})
