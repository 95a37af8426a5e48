"""KeyValueStore protocol: the only persistence capability the service needs."""

from typing import Protocol


class KeyValueStore(Protocol):
    async def put(self, key: str, value: str) -> None: ...
