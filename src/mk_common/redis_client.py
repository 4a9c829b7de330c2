"""Shared Redis connection for the order id sequence (`INCR orders:seq`).

Listing quantities never live here: stock counters are changed only by
conditional UPDATEs in PostgreSQL. The pool is created lazily on first use
and closed by the app lifespan.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Return the process-wide client, connecting on first call."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
    return _redis_pool


async def close_redis() -> None:
    """Drop the client on shutdown; the next get_redis() reconnects."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
