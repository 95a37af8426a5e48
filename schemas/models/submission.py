"""
Survey submission document model.

SubmissionRecord is what lands in the key-value store. It is frozen: built
once by the validator, serialised once by the store, never updated.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SubmissionRecord(BaseModel):
    """One accepted survey answer.

    Optional fields are ``None`` when the visitor left them blank and are
    dropped from the stored JSON entirely, so "absent" never reads back as
    an empty string.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = Field(min_length=1)
    username: Optional[str] = None
    email: Optional[str] = None
    rate: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    # Unix epoch milliseconds, always assigned server-side
    timestamp: int

    def to_json(self) -> str:
        """Compact JSON in field order, absent optionals omitted."""
        return self.model_dump_json(exclude_none=True)
