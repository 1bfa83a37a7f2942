"""In-memory UserRepository for local dev and tests (DATABASE_URL unset)."""

import uuid
from dataclasses import replace

from src.ff_auth.domain.models import User
from src.ff_common.datetime_utils import utc_now
from src.ff_common.errors import UsernameExistsError


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    async def get_user(self, user_id: str) -> User | None:
        user = self._users.get(user_id)
        return replace(user) if user else None

    async def get_user_by_username(self, username: str) -> User | None:
        for user in self._users.values():
            if user.username == username:
                return replace(user)
        return None

    async def create_user(self, username: str, password_hash: str) -> User:
        if await self.get_user_by_username(username) is not None:
            raise UsernameExistsError()
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            password_hash=password_hash,
            created_at=utc_now(),
        )
        self._users[user.id] = user
        return replace(user)

    async def increment_token_version(self, user_id: str) -> int:
        user = self._users.get(user_id)
        if user is None:
            return 0
        user.token_version += 1
        return user.token_version

    async def enable_mfa(self, user_id: str, secret: str) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        user.mfa_enabled = True
        user.mfa_secret = secret
        return replace(user)

    async def delete_user(self, user_id: str) -> None:
        """Hard delete, used by test teardown only."""
        self._users.pop(user_id, None)
