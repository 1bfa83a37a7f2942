"""User repository Protocol — dependency inversion for testability.

The SQL implementation lives in infrastructure/persistence.py, the in-memory
one (dev + tests) in infrastructure/memory.py.
"""

from typing import Protocol

from src.ff_auth.domain.models import User


class UserRepositoryProtocol(Protocol):
    async def get_user(self, user_id: str) -> User | None: ...

    async def get_user_by_username(self, username: str) -> User | None: ...

    async def create_user(self, username: str, password_hash: str) -> User: ...

    async def increment_token_version(self, user_id: str) -> int: ...

    async def enable_mfa(self, user_id: str, secret: str) -> User | None: ...
