"""Tests for chinatrack.users.UserManager"""

import pytest

from chinatrack.errors import (
    EmailExistsError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    PermissionDeniedError,
    RegistrationDisabledError,
    ValidationError,
)
from chinatrack.models import UserRole


@pytest.fixture
async def seeded(storage):
    await storage.ensure_initial_data(admin_email="admin@test.com", admin_password="admin")
    return storage


@pytest.fixture
async def admin(users, seeded):
    return await users.login("admin@test.com", "admin")


class TestRegisterAndLogin:

    async def test_register_creates_user_and_signs_in(self, users, seeded):
        user = await users.register("Alice@Example.com ", "pw")

        assert user.email == "alice@example.com"
        assert user.role == UserRole.USER
        assert user.password_hash and "pw" not in user.password_hash
        assert (await users.current_user()).id == user.id

    async def test_register_duplicate_email(self, users, seeded):
        await users.register("bob@example.com", "pw")
        with pytest.raises(EmailExistsError):
            await users.register("BOB@example.com", "other")

    async def test_register_requires_email_and_password(self, users, seeded):
        with pytest.raises(ValidationError):
            await users.register("", "pw")
        with pytest.raises(ValidationError):
            await users.register("x@example.com", "")

    async def test_register_when_disabled(self, users, seeded, admin):
        await users.toggle_registration()
        await users.logout()

        with pytest.raises(RegistrationDisabledError):
            await users.register("carol@example.com", "pw")
        assert len(await seeded.get_users()) == 1

    async def test_login_success(self, users, seeded):
        user = await users.login("admin@test.com", "admin")
        assert user.is_admin
        assert (await users.current_user()).id == "1"

    async def test_login_wrong_password(self, users, seeded):
        with pytest.raises(InvalidCredentialsError):
            await users.login("admin@test.com", "nope")
        assert await users.current_user() is None

    async def test_login_unknown_email(self, users, seeded):
        with pytest.raises(InvalidCredentialsError):
            await users.login("ghost@example.com", "admin")

    async def test_session_never_stores_password_hash(self, users, seeded, store):
        await users.login("admin@test.com", "admin")
        session = store.snapshot()["chinatrack_current_user"]
        assert "passwordHash" not in session

    async def test_logout(self, users, admin):
        await users.logout()
        assert await users.current_user() is None
        with pytest.raises(NotAuthenticatedError):
            await users.require_user()


class TestAdminOperations:

    async def test_non_admin_cannot_list_users(self, users, seeded):
        await users.register("dave@example.com", "pw")
        with pytest.raises(PermissionDeniedError):
            await users.list_users()

    async def test_signed_out_cannot_toggle_registration(self, users, seeded):
        with pytest.raises(NotAuthenticatedError):
            await users.toggle_registration()

    async def test_toggle_role(self, users, seeded):
        member = await users.register("erin@example.com", "pw")
        await users.login("admin@test.com", "admin")

        promoted = await users.toggle_role(member.id)
        assert promoted.role == UserRole.ADMIN
        demoted = await users.toggle_role(member.id)
        assert demoted.role == UserRole.USER

    async def test_toggle_own_role_is_noop(self, users, admin):
        assert await users.toggle_role(admin.id) is None
        assert (await users.current_user()).is_admin

    async def test_toggle_unknown_role_is_noop(self, users, admin):
        assert await users.toggle_role("missing") is None

    async def test_demoted_admin_loses_rights(self, users, seeded):
        member = await users.register("frank@example.com", "pw")
        await users.login("admin@test.com", "admin")
        await users.toggle_role(member.id)

        await users.login("frank@example.com", "pw")
        await users.toggle_role("1")

        await users.login("admin@test.com", "admin")
        with pytest.raises(PermissionDeniedError):
            await users.list_users()

    async def test_delete_user(self, users, seeded):
        member = await users.register("gina@example.com", "pw")
        await users.login("admin@test.com", "admin")

        assert await users.delete_user(member.id) is True
        assert [u.email for u in await users.list_users()] == ["admin@test.com"]
        with pytest.raises(InvalidCredentialsError):
            await users.login("gina@example.com", "pw")

    async def test_delete_self_is_noop(self, users, admin):
        assert await users.delete_user(admin.id) is False
        assert len(await users.list_users()) == 1

    async def test_delete_unknown_is_noop(self, users, admin):
        assert await users.delete_user("missing") is False

    async def test_session_of_deleted_user_is_dropped(self, users, seeded, store):
        member = await users.register("hank@example.com", "pw")
        users_list = [u for u in await seeded.get_users() if u.id != member.id]
        await seeded.save_users(users_list)

        assert await users.current_user() is None
        assert "chinatrack_current_user" not in store.snapshot()

    async def test_toggle_registration(self, users, admin):
        assert await users.registration_enabled() is True
        assert await users.toggle_registration() is False
        assert await users.registration_enabled() is False
        assert await users.toggle_registration() is True


class TestSessionToken:

    async def test_sign_in_issues_token(self, users, seeded, store):
        session = await users.sign_in("admin@test.com", "admin")

        assert session.user.id == "1"
        assert store.snapshot()["chinatrack_current_user"]["token"] == session.token
        assert (await users.authenticate(session.token)).id == "1"

    async def test_sign_up_issues_token(self, users, seeded):
        session = await users.sign_up("ivy@example.com", "pw")
        assert (await users.authenticate(session.token)).email == "ivy@example.com"

    async def test_missing_or_wrong_token_rejected(self, users, seeded):
        session = await users.sign_in("admin@test.com", "admin")

        for token in [None, "", session.token + "x", "guess"]:
            with pytest.raises(NotAuthenticatedError):
                await users.authenticate(token)
            assert await users.session_user(token) is None

    async def test_new_sign_in_replaces_token(self, users, seeded):
        first = await users.sign_in("admin@test.com", "admin")
        second = await users.sign_in("admin@test.com", "admin")

        assert first.token != second.token
        assert await users.session_user(first.token) is None
        assert (await users.session_user(second.token)).id == "1"

    async def test_logout_invalidates_token(self, users, seeded):
        session = await users.sign_in("admin@test.com", "admin")
        await users.logout()
        with pytest.raises(NotAuthenticatedError):
            await users.authenticate(session.token)

    async def test_token_of_deleted_user_rejected(self, users, seeded):
        session = await users.sign_up("jay@example.com", "pw")
        await seeded.save_users([u for u in await seeded.get_users() if u.id != session.user.id])

        with pytest.raises(NotAuthenticatedError):
            await users.authenticate(session.token)
