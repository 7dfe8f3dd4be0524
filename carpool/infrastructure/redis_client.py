"""Redis async client used by the chat relay for cross-process fan-out."""

import redis.asyncio as aioredis


def create_redis(url: str) -> aioredis.Redis:
    """Return a Redis client backed by its own connection pool."""
    pool = aioredis.ConnectionPool.from_url(url, decode_responses=True)
    return aioredis.Redis(connection_pool=pool)
