"""
Survey submission orchestration.

verify → validate → store, strictly in that order. Nothing is written
unless the CAPTCHA passed and the payload is valid.
"""

from __future__ import annotations

from typing import Callable

from errors import CaptchaRejectedError
from infrastructure.captcha.protocol import CaptchaProvider
from schemas.dto.requests.survey import SurveyForm
from services.submission_store import SubmissionStore
from services.submission_validator import validate_submission
from shared.datetime_utils import now_millis
from shared.logging import get_logger

log = get_logger(__name__)


class SurveyService:
    def __init__(
        self,
        captcha: CaptchaProvider,
        store: SubmissionStore,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self._captcha = captcha
        self._store = store
        self._clock = clock

    async def submit(self, form: SurveyForm) -> str:
        """Verify, validate and persist one survey; return its storage key.

        Raises:
            MissingTokenError: no CAPTCHA token in the form.
            CaptchaUnavailableError: verification service unreachable.
            CaptchaRejectedError: verification service said no.
            InvalidPayloadError: host/rate failed validation.
            StorageError: the key-value store refused the write.
        """
        outcome = await self._captcha.verify(form.token)
        if not outcome.verified:
            raise CaptchaRejectedError(
                "CAPTCHA verification failed.", error_codes=outcome.error_codes
            )

        record = validate_submission(form, timestamp=self._clock())
        key = await self._store.save(record)
        log.info(
            "survey_submission_stored",
            submission_key=key,
            host=record.host,
            rate=record.rate,
        )
        return key
