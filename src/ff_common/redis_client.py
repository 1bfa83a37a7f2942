"""Redis client factory — backs the cache service when REDIS_URL is set.

The pool is created lazily by redis-py on first command, so building the
client at startup does no I/O.
"""

import redis.asyncio as aioredis


def create_redis(url: str) -> aioredis.Redis:
    """Create a Redis client with its own connection pool."""
    return aioredis.from_url(url, decode_responses=True)


async def close_redis(client: aioredis.Redis) -> None:
    """Close the Redis connection pool."""
    await client.aclose()
