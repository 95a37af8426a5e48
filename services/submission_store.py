"""
Persists validated submissions under freshly minted keys.

One unconditional ``put`` per record: no existence check, no retries.
Whatever the backend raises is re-raised as StorageError so the route can
answer 500 instead of blaming the visitor.
"""

from __future__ import annotations

from typing import Callable

from errors import StorageError
from infrastructure.kv.protocol import KeyValueStore
from schemas.models.submission import SubmissionRecord
from shared.generators import generate_submission_key
from shared.logging import get_logger

log = get_logger(__name__)


class SubmissionStore:
    def __init__(
        self,
        kv: KeyValueStore,
        key_factory: Callable[[], str] = generate_submission_key,
    ) -> None:
        self._kv = kv
        self._key_factory = key_factory

    async def save(self, record: SubmissionRecord) -> str:
        """Write *record* and return the key it was stored under."""
        key = self._key_factory()
        try:
            await self._kv.put(key, record.to_json())
        except Exception as e:
            log.error(
                "submission_store_write_failed",
                submission_key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageError("Could not save your answer. Please try again later.") from e
        return key
