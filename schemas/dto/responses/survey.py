"""
Response DTOs for the survey endpoint.

SubmissionAcceptedResponse : 200 body for a stored submission
ErrorResponse              : {"error": ...} body for every failure
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SubmissionAcceptedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    key: str


class ErrorResponse(BaseModel):
    """Error JSON body produced by AppError.to_dict()."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
