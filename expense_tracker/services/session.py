"""Signed-in user state and owner-change notifications.

The session is the identity provider for the expense list: it exposes the
current owner id and awaits every subscriber whenever that id changes
(login, registration, logout). Profile updates keep the same id and notify
nobody. State is held in memory only.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional

from expense_tracker.core.errors import AuthError
from expense_tracker.models.user import ProfileUpdate, RegistrationIn, User
from expense_tracker.services.auth_service import AuthService

logger = logging.getLogger("expense_tracker.session")

OwnerCallback = Callable[[str], Awaitable[None]]


class Session:
    def __init__(self, auth: AuthService):
        self._auth = auth
        self._subscribers: List[OwnerCallback] = []
        self.user: Optional[User] = None
        self.token: Optional[str] = None
        self.loading = False
        self.error: Optional[str] = None

    @property
    def owner_id(self) -> str:
        return str(self.user.id) if self.user else ""

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def subscribe(self, callback: OwnerCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def _set_user(self, user: Optional[User], token: Optional[str]) -> None:
        previous = self.owner_id
        self.user, self.token = user, token
        if self.owner_id != previous:
            logger.info("owner changed", extra={"owner_id": self.owner_id or "-"})
            for callback in list(self._subscribers):
                await callback(self.owner_id)

    async def login(self, email: str, password: str) -> User:
        self.loading, self.error = True, None
        try:
            user, token = await self._auth.login(email, password)
        except AuthError as e:
            self.error = str(e) or "Login failed"
            raise
        finally:
            self.loading = False
        await self._set_user(user, token)
        return user

    async def register(self, data: RegistrationIn) -> User:
        self.loading, self.error = True, None
        try:
            user, token = await self._auth.register(data)
        except AuthError as e:
            self.error = str(e) or "Registration failed"
            raise
        finally:
            self.loading = False
        await self._set_user(user, token)
        return user

    async def update_profile(self, updates: ProfileUpdate) -> Optional[User]:
        if self.user is None:
            return None
        self.loading, self.error = True, None
        try:
            updated = await self._auth.update_user(self.user.id, updates)
        except AuthError as e:
            self.error = str(e) or "Update failed"
            raise
        finally:
            self.loading = False
        self.user = updated
        return updated

    async def logout(self) -> None:
        await self._set_user(None, None)
