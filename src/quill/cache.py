"""Redis connection pool.

Learn: Redis is only used for rate-limit counters. It is optional:
init_redis() failing at startup just leaves the pool unset, and every
caller checks get_redis() for None and carries on without it.
"""

from typing import Optional

import redis.asyncio as aioredis

from quill.config import settings

# Global Redis connection pool (initialized in lifespan)
_redis: Optional[aioredis.Redis] = None


async def init_redis() -> aioredis.Redis:
    """Initialize the Redis connection pool and verify it answers."""
    global _redis
    client = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    _redis = client
    return _redis


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> Optional[aioredis.Redis]:
    """The Redis connection, or None when it was never brought up."""
    return _redis
