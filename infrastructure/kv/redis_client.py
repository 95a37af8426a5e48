"""Async Redis connection factory.

Always returns a client once a URI is configured. A failed startup ping is
logged but not fatal: Redis is the durable store, so later writes must fail
loudly (StorageError) rather than silently land somewhere else.
"""

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from shared.logging import get_logger

log = get_logger(__name__)


async def create_redis_client(redis_uri: str) -> aioredis.Redis:
    """Build a Redis client and ping it once for visibility."""
    client: aioredis.Redis = aioredis.from_url(redis_uri, decode_responses=True)
    masked_uri = redis_uri.split("@")[-1]  # mask credentials
    try:
        await client.ping()
        log.info("redis_connected", uri=masked_uri)
    except RedisError as e:
        log.error(
            "redis_connection_failed",
            uri=masked_uri,
            error=str(e),
            error_type=type(e).__name__,
        )
    return client
