"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. The objects themselves are built once in the
app lifespan and parked on app.state.
"""

from __future__ import annotations

from fastapi import Request


def get_survey_service(request: Request):
    """Return the SurveyService wired up in the lifespan."""
    return request.app.state.survey_service


def get_kv_store(request: Request):
    """Return the active key-value store (Redis or in-memory)."""
    return request.app.state.kv_store
