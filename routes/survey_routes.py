"""
Survey form endpoint.

OPTIONS : 204 preflight, CORS headers only, nothing else runs.
POST    : verify CAPTCHA, validate, store; 200 {message, key}.
other   : 405.

Every branch ends in build_response(); no exception leaves this module.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from dependencies import get_survey_service
from errors import AppError, MalformedRequestError, MethodNotAllowedError, StorageError
from schemas.dto.requests.survey import SurveyForm
from schemas.dto.responses.survey import ErrorResponse, SubmissionAcceptedResponse
from services.survey_service import SurveyService
from shared.logging import get_logger
from shared.responses import build_response

log = get_logger(__name__)

SUCCESS_MESSAGE = "Your survey answer has been saved."
MALFORMED_MESSAGE = "The request could not be processed."
METHOD_NOT_ALLOWED_MESSAGE = "This HTTP method is not allowed."

ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def dispatch_survey_request(request: Request, service: SurveyService) -> Response:
    """Produce exactly one response for *request*."""
    if request.method == "OPTIONS":
        return build_response(204)

    if request.method != "POST":
        exc = MethodNotAllowedError(METHOD_NOT_ALLOWED_MESSAGE)
        return build_response(exc.status_code, exc.to_dict())

    try:
        form = SurveyForm.from_form((await request.form()).multi_items())
        key = await service.submit(form)
    except (MalformedRequestError, StorageError) as e:
        # details already logged where they happened; client gets the generic text
        generic = MALFORMED_MESSAGE if isinstance(e, MalformedRequestError) else e.message
        return build_response(e.status_code, ErrorResponse(error=generic).model_dump())
    except AppError as e:
        log.info("survey_submission_rejected", error_code=e.error_code, field=e.field)
        return build_response(e.status_code, e.to_dict())
    except Exception as e:
        log.error(
            "survey_request_failed",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=e,
        )
        return build_response(400, ErrorResponse(error=MALFORMED_MESSAGE).model_dump())

    body = SubmissionAcceptedResponse(message=SUCCESS_MESSAGE, key=key)
    return build_response(200, body.model_dump())


def create_survey_router(path: str = "/api/form") -> APIRouter:
    """Build the router that mounts the survey endpoint at *path*."""
    router = APIRouter(tags=["survey"])

    @router.api_route(
        path,
        methods=ROUTED_METHODS,
        responses={
            200: {"model": SubmissionAcceptedResponse},
            400: {"model": ErrorResponse},
            403: {"model": ErrorResponse},
            405: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )
    async def survey_endpoint(
        request: Request,
        service: SurveyService = Depends(get_survey_service),
    ) -> Response:
        return await dispatch_survey_request(request, service)

    return router
