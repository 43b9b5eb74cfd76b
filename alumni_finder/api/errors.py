"""Translate domain exceptions into HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from alumni_finder.errors import (
    AlumniFinderError,
    CallbackPayloadError,
    InvalidInputError,
    JobAccessDeniedError,
    JobNotFoundError,
    LLMError,
    ProfileExtractionError,
    ProfileIncompleteError,
    ProfileNotFoundError,
    StoreError,
    TransitionConflictError,
)
from alumni_finder.logger import get_logger

logger = get_logger(__name__)

# Checked in order; subclasses must come before their bases
_STATUS_CODES = [
    (InvalidInputError, 400),
    (CallbackPayloadError, 400),
    (ProfileIncompleteError, 400),
    (JobAccessDeniedError, 403),
    (JobNotFoundError, 404),
    (ProfileNotFoundError, 404),
    (TransitionConflictError, 409),
    (LLMError, 502),
    (ProfileExtractionError, 502),
    (StoreError, 500),
]


def status_for(exc: AlumniFinderError) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def _domain_error_handler(request: Request, exc: AlumniFinderError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.url.path, status_code, exc)
    # Store failures are reported generically
    detail = "Database error" if isinstance(exc, StoreError) else exc.message
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("%s %s invalid request: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "errors": jsonable_errors(exc)},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s error: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AlumniFinderError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
