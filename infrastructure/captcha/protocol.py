"""CaptchaProvider protocol: services depend on this, not the concrete implementation."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class CaptchaVerificationOutcome:
    """Result of one verification call. Transient, never persisted."""

    verified: bool
    error_codes: tuple[str, ...] = ()


class CaptchaProvider(Protocol):
    async def verify(self, token: Optional[str]) -> CaptchaVerificationOutcome: ...
