"""Single-token revocation list, keyed by SHA-256 of the raw token.

Entries expire once the longest-lived token they can revoke (a 7-day
refresh token) would have expired anyway, so the key space stays bounded.
"""

import hashlib

from src.ff_common.cache import CacheService

_PREFIX = "token:blacklist:"


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenBlacklist:
    def __init__(self, cache: CacheService, ttl_seconds: int) -> None:
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    async def blacklist(self, token: str, user_id: str) -> bool:
        return await self._cache.set(f"{_PREFIX}{hash_token(token)}", user_id, self._ttl_seconds)

    async def is_blacklisted(self, token: str) -> bool:
        return await self._cache.get(f"{_PREFIX}{hash_token(token)}") is not None
