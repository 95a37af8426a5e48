"""Redis-backed KeyValueStore.

Values are stored as plain JSON strings so entries stay readable with
redis-cli. Errors are not caught here; SubmissionStore decides what they mean.
"""

from typing import Optional

import redis.asyncio as aioredis


class RedisKVStore:
    def __init__(
        self,
        redis_client: aioredis.Redis,
        key_prefix: str = "",
        ttl_seconds: Optional[int] = None,
    ) -> None:
        self._redis = redis_client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def put(self, key: str, value: str) -> None:
        await self._redis.set(self._key(key), value, ex=self.ttl_seconds)

    async def get(self, key: str) -> Optional[str]:
        return await self._redis.get(self._key(key))

    async def ping(self) -> bool:
        return bool(await self._redis.ping())

    async def aclose(self) -> None:
        await self._redis.aclose()
