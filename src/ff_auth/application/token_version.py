"""Per-user token version counter.

Every token embeds the version current at issue time; bumping the counter
invalidates all outstanding access and refresh tokens for that user in one
write, without a blacklist. The counter lives on the user row so it survives
cache flushes.
"""

from src.ff_auth.domain.repository import UserRepositoryProtocol


class TokenVersionStore:
    def __init__(self, users: UserRepositoryProtocol) -> None:
        self._users = users

    async def get_version(self, user_id: str) -> int:
        """Current version, 0 for an unknown user."""
        user = await self._users.get_user(user_id)
        return user.token_version if user else 0

    async def increment(self, user_id: str) -> int:
        """Bump and return the new version.

        Two racing increments just revoke one extra round of tokens, which is
        harmless.
        """
        return await self._users.increment_token_version(user_id)
