"""Account operations against the remote users collection.

The mock API has no auth endpoints: login scans the users collection for a
matching email/password pair and mints a local token. Passwords are stored
in plain text by the remote API; nothing here hashes them.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from expense_tracker.core.errors import AuthError, EmailInUseError, InvalidCredentialsError
from expense_tracker.models.user import ProfileUpdate, RegistrationIn, User
from expense_tracker.services.http_client import HttpError, JsonClient


def make_token(user_id: str) -> str:
    return f"mock-token-{int(time.time() * 1000)}-{user_id}"


class AuthService:
    def __init__(self, client: JsonClient, collection: str = "/users"):
        self._client = client
        self._collection = collection

    async def _request(self, method: str, path: str, **kw: Any) -> Any:
        try:
            return await self._client.request_json(method, path, **kw)
        except HttpError as e:
            raise AuthError(str(e)) from e

    @staticmethod
    def _parse(data: Any) -> User:
        try:
            return User.model_validate(data)
        except ValidationError as e:
            raise AuthError(f"malformed user record: {e}") from e

    async def list_users(self) -> List[User]:
        data = await self._request("GET", self._collection)
        if not isinstance(data, list):
            raise AuthError("expected a list of users")
        return [self._parse(row) for row in data]

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        users = await self.list_users()
        user = next(
            (u for u in users if u.email == email and u.password == password), None
        )
        if user is None:
            raise InvalidCredentialsError()
        return user, make_token(user.id)

    async def register(self, data: RegistrationIn) -> Tuple[User, str]:
        users = await self.list_users()
        if any(u.email == data.email for u in users):
            raise EmailInUseError()
        payload: Dict[str, Any] = {
            **data.to_wire(),
            "budget": data.budget or 0,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        user = self._parse(await self._request("POST", self._collection, json=payload))
        return user, make_token(user.id)

    async def update_user(self, user_id: str, updates: ProfileUpdate) -> User:
        data = await self._request(
            "PUT", f"{self._collection}/{user_id}", json=updates.to_wire()
        )
        return self._parse(data)

    async def get_user_by_id(self, user_id: str) -> User:
        return self._parse(await self._request("GET", f"{self._collection}/{user_id}"))
