"""
Request DTO for the survey form.

The form arrives as ``application/x-www-form-urlencoded``; every value is a
string exactly as the browser sent it. Business rules live in
services.submission_validator, not here.
"""

from __future__ import annotations

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

TOKEN_FIELD = "cf-turnstile-response"


class SurveyForm(BaseModel):
    """Raw survey fields, untouched apart from dropping unknown keys."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    token: Optional[str] = Field(default=None, alias=TOKEN_FIELD)
    host: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    rate: Optional[str] = None
    comment: Optional[str] = None

    @classmethod
    def from_form(cls, form: Iterable[tuple[str, object]]) -> "SurveyForm":
        """Build from parsed form items; non-string values (uploads) are rejected.

        A repeated field keeps its first occurrence.
        """
        fields: dict[str, str] = {}
        for name, value in form:
            if not isinstance(value, str):
                raise ValueError(f"form field {name!r} is not a text value")
            fields.setdefault(name, value)
        return cls.model_validate(fields)
