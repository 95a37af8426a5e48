"""
Survey payload validation.

Rules, applied in order, first failure wins:
1. ``host`` must be present and non-empty.
2. ``rate`` must be a base-10 integer in [1, 5]. Out-of-range values are
   rejected, never clamped.
3. ``username``, ``email`` and ``comment`` pass through verbatim when
   non-empty and become ``None`` otherwise.

Nothing is trimmed, case-folded or length-capped.
"""

from __future__ import annotations

import re
from typing import Optional

from errors import InvalidPayloadError
from schemas.dto.requests.survey import SurveyForm
from schemas.models.submission import SubmissionRecord

MIN_RATE = 1
MAX_RATE = 5

# Longer digit strings are rejected before int() sees them
MAX_RATE_DIGITS = 16

INVALID_PAYLOAD_MESSAGE = "Please choose a host and a rating from 1 to 5."

_INTEGER_RE = re.compile(r"[+-]?[0-9]{1,%d}" % MAX_RATE_DIGITS)


def parse_rate(raw: Optional[str]) -> Optional[int]:
    """Return *raw* as an int, or ``None`` if it is not a plain integer string."""
    if raw is None or not _INTEGER_RE.fullmatch(raw):
        return None
    return int(raw)


def _present(value: Optional[str]) -> Optional[str]:
    return value if value else None


def validate_submission(form: SurveyForm, timestamp: int) -> SubmissionRecord:
    """Turn raw form fields into a SubmissionRecord.

    Args:
        form: Fields exactly as submitted.
        timestamp: Server time in epoch milliseconds.

    Raises:
        InvalidPayloadError: host missing/empty, or rate not an integer in range.
    """
    if not form.host:
        raise InvalidPayloadError(INVALID_PAYLOAD_MESSAGE, field="host")

    rate = parse_rate(form.rate)
    if rate is None or not MIN_RATE <= rate <= MAX_RATE:
        raise InvalidPayloadError(INVALID_PAYLOAD_MESSAGE, field="rate")

    return SubmissionRecord(
        host=form.host,
        username=_present(form.username),
        email=_present(form.email),
        rate=rate,
        comment=_present(form.comment),
        timestamp=timestamp,
    )
