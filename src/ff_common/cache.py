"""Key/value cache with TTL — Redis when configured, in-process dict otherwise.

Contract: no method ever raises to the caller. Backend or serialization
failures are logged and degrade to a miss (``None``) or ``False``. The cache
is never authoritative; everything in it can be rebuilt from the store.

Values are JSON-encoded, so callers put plain dicts/lists/str/int in and get
the same back.

Key layout used across the app:
  token:blacklist:{sha256}     Token blacklist entries
  mfa:pending:{user_id}        Staged MFA secret awaiting enable
  transactions:{user_id}       Cached transaction list
  budgets:{user_id}            Cached budget list
  goals:{user_id}              Cached goal list
  spending-summary:{user_id}   Cached spending summary
  categories                   Global category list
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.ff_common.redis_client import close_redis

logger = logging.getLogger("ff.cache")

_BACKEND_ERRORS = (RedisError, OSError)


@dataclass
class CacheEntry:
    value: str                   # JSON-encoded
    expires_at: float | None     # monotonic seconds, None = no expiry

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() >= self.expires_at


class CacheService:
    """Async cache facade. Construct once at startup and inject."""

    def __init__(self, client: aioredis.Redis | None = None) -> None:
        self._client = client
        self._mem: dict[str, CacheEntry] = {}

    @property
    def backend(self) -> str:
        return "redis" if self._client is not None else "memory"

    async def get(self, key: str) -> Any | None:
        if self._client is None:
            entry = self._mem.get(key)
            if entry is None:
                return None
            if entry.is_expired:
                del self._mem[key]
                return None
            return json.loads(entry.value)

        try:
            data = await self._client.get(key)
            return json.loads(data) if data is not None else None
        except _BACKEND_ERRORS as exc:
            logger.error("Redis get error key=%s: %s", key, exc)
        except ValueError as exc:
            logger.error("Cache decode error key=%s: %s", key, exc)
        return None

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> bool:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as exc:
            logger.error("Cache encode error key=%s: %s", key, exc)
            return False

        if self._client is None:
            expires_at = time.monotonic() + ttl_seconds if ttl_seconds else None
            self._mem[key] = CacheEntry(payload, expires_at)
            return True

        try:
            if ttl_seconds:
                await self._client.set(key, payload, ex=ttl_seconds)
            else:
                await self._client.set(key, payload)
            return True
        except _BACKEND_ERRORS as exc:
            logger.error("Redis set error key=%s: %s", key, exc)
            return False

    async def delete(self, key: str) -> bool:
        if self._client is None:
            self._mem.pop(key, None)
            return True

        try:
            await self._client.delete(key)
            return True
        except _BACKEND_ERRORS as exc:
            logger.error("Redis delete error key=%s: %s", key, exc)
            return False

    async def flush(self) -> bool:
        if self._client is None:
            self._mem.clear()
            return True

        try:
            await self._client.flushdb()
            return True
        except _BACKEND_ERRORS as exc:
            logger.error("Redis flush error: %s", exc)
            return False

    async def ping(self) -> bool:
        if self._client is None:
            return True
        try:
            return bool(await self._client.ping())
        except _BACKEND_ERRORS as exc:
            logger.warning("Redis unreachable, cache reads will miss: %s", exc)
            return False

    async def close(self) -> None:
        if self._client is not None:
            await close_redis(self._client)
