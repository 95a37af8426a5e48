"""Cloudflare Turnstile implementation of CaptchaProvider.

- secret key is injected, never read from the environment here
- transport failures are raised as CaptchaUnavailableError so callers can
  tell "service unreachable" apart from "bot suspected"
- no retries; the timeout is whatever HttpClient was built with
"""

from __future__ import annotations

from typing import Optional

import httpx

from config import TURNSTILE_VERIFY_URL
from errors import CaptchaUnavailableError, MissingTokenError
from infrastructure.captcha.protocol import CaptchaVerificationOutcome
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)


class TurnstileProvider:
    def __init__(
        self,
        secret: str,
        http_client: HttpClient,
        verify_url: str = TURNSTILE_VERIFY_URL,
    ) -> None:
        self._secret = secret
        self._http = http_client
        self._verify_url = verify_url

    async def verify(self, token: Optional[str]) -> CaptchaVerificationOutcome:
        if not token:
            raise MissingTokenError("Complete the CAPTCHA challenge before submitting.")

        if not self._secret:
            log.warning("turnstile_secret_not_configured")
            return CaptchaVerificationOutcome(
                verified=False, error_codes=("missing-input-secret",)
            )

        try:
            response = await self._http.post(
                self._verify_url,
                data={"secret": self._secret, "response": token},
            )
        except httpx.HTTPError as e:
            log.error(
                "turnstile_request_failed", error=str(e), error_type=type(e).__name__
            )
            raise CaptchaUnavailableError("Verification service unavailable.") from e

        if response.status_code != 200:
            log.error(
                "turnstile_api_error",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise CaptchaUnavailableError("Verification service unavailable.")

        try:
            data = response.json()
        except ValueError as e:
            log.error("turnstile_invalid_response", error=str(e))
            raise CaptchaUnavailableError("Verification service unavailable.") from e

        if not isinstance(data, dict):
            log.error("turnstile_invalid_response", payload_type=type(data).__name__)
            raise CaptchaUnavailableError("Verification service unavailable.")

        verified = data.get("success") is True
        error_codes = tuple(str(code) for code in data.get("error-codes") or ())
        if not verified:
            log.warning("turnstile_verification_failed", error_codes=list(error_codes))
        return CaptchaVerificationOutcome(verified=verified, error_codes=error_codes)
