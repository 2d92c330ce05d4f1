"""
User and session management.

One session per store: the current-session key points at the signed-in
user and holds a random bearer token. In-process callers use current_user();
remote callers must present the token to authenticate(). Admin-only
operations check the session user's stored role, not the copy held in the
session.
"""

import logging
from typing import List, Optional

from .credentials import hash_password, new_session_token, tokens_match, verify_password
from .errors import (
    EmailExistsError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    PermissionDeniedError,
    RegistrationDisabledError,
    ValidationError,
)
from .models import Session, User, UserRole, new_id
from .store import StorageService

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserManager:

    def __init__(self, storage: StorageService):
        self._storage = storage

    # ----- session -----

    async def current_user(self) -> Optional[User]:
        """The signed-in user, re-read from the user list. None if signed out or deleted."""
        session = await self._storage.get_current_user()
        if session is None:
            return None
        for user in await self._storage.get_users():
            if user.id == session.id:
                return user
        # Account was deleted while signed in
        logger.info(f"Dropping session of deleted user {session.id}")
        await self._storage.set_current_user(None)
        return None

    async def session_user(self, token: Optional[str]) -> Optional[User]:
        """The signed-in user if token matches the session token, else None."""
        if not tokens_match(token, await self._storage.get_session_token()):
            return None
        return await self.current_user()

    async def authenticate(self, token: Optional[str]) -> User:
        user = await self.session_user(token)
        if user is None:
            raise NotAuthenticatedError()
        return user

    async def _start_session(self, user: User) -> Session:
        session = Session(user=user, token=new_session_token())
        await self._storage.set_current_user(user, token=session.token)
        return session

    async def require_user(self) -> User:
        user = await self.current_user()
        if user is None:
            raise NotAuthenticatedError()
        return user

    async def require_admin(self, action: str = "this action") -> User:
        user = await self.require_user()
        if not user.is_admin:
            raise PermissionDeniedError(action)
        return user

    async def register(self, email: str, password: str) -> User:
        """Create a user-role account and sign it in."""
        return (await self.sign_up(email, password)).user

    async def sign_up(self, email: str, password: str) -> Session:
        """
        Create a user-role account and start a session for it.

        Raises:
            RegistrationDisabledError: the admin closed registration
            ValidationError: empty email or password
            EmailExistsError: the email is already registered
        """
        if not await self._storage.get_registration_enabled():
            raise RegistrationDisabledError()

        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required.")

        users = await self._storage.get_users()
        if any(normalize_email(u.email) == email for u in users):
            raise EmailExistsError(email)

        user = User(
            id=new_id(),
            email=email,
            role=UserRole.USER,
            password_hash=hash_password(password),
        )
        await self._storage.add_user(user)
        session = await self._start_session(user)
        logger.info(f"Registered user {email}")
        return session

    async def login(self, email: str, password: str) -> User:
        return (await self.sign_in(email, password)).user

    async def sign_in(self, email: str, password: str) -> Session:
        """Start a session. Exactly one stored account must match email and password."""
        email = normalize_email(email)
        matches = [
            u for u in await self._storage.get_users()
            if normalize_email(u.email) == email and verify_password(password or "", u.password_hash)
        ]
        if len(matches) != 1:
            logger.info(f"Failed login for {email}")
            raise InvalidCredentialsError()

        session = await self._start_session(matches[0])
        logger.info(f"User {email} signed in")
        return session

    async def logout(self) -> None:
        await self._storage.set_current_user(None)

    # ----- admin -----

    async def list_users(self) -> List[User]:
        await self.require_admin("listing users")
        return await self._storage.get_users()

    async def toggle_role(self, target_id: str) -> Optional[User]:
        """
        Flip a user between the user and admin roles.

        Returns:
            The updated user, or None when the target is the caller or unknown
        """
        caller = await self.require_admin("changing roles")
        if target_id == caller.id:
            return None

        users = await self._storage.get_users()
        for user in users:
            if user.id == target_id:
                user.role = user.role.flipped()
                await self._storage.save_users(users)
                logger.info(f"User {user.email} is now {user.role.value}")
                return user
        return None

    async def delete_user(self, target_id: str) -> bool:
        """
        Remove an account. Deleting yourself is a no-op.

        A session still pointing at the removed account is dropped by current_user().
        """
        caller = await self.require_admin("deleting users")
        if target_id == caller.id:
            return False

        users = await self._storage.get_users()
        remaining = [u for u in users if u.id != target_id]
        if len(remaining) == len(users):
            return False
        await self._storage.save_users(remaining)
        logger.info(f"Deleted user {target_id}")
        return True

    async def registration_enabled(self) -> bool:
        return await self._storage.get_registration_enabled()

    async def toggle_registration(self) -> bool:
        """Open or close self-registration. Returns the new setting."""
        await self.require_admin("changing registration")
        enabled = not await self._storage.get_registration_enabled()
        await self._storage.set_registration_enabled(enabled)
        logger.info(f"Registration {'enabled' if enabled else 'disabled'}")
        return enabled
