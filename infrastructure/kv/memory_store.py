"""In-process KeyValueStore.

Used when no Redis is configured (local development) and in tests.
Contents vanish with the process.
"""

from typing import Optional


class InMemoryKVStore:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._data)
