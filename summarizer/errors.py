"""
Error taxonomy and the single boundary translator.

Everything below the HTTP boundary raises one of these exceptions;
register_error_handlers() maps them to status codes and JSON bodies.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from summarizer import config
from summarizer.observability.posthog_client import posthog_client

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"

    def __init__(self, message: str = None, detail: str = None):
        self.message = message or self.default_message
        # server-side only, never sent to the caller
        self.detail = detail
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NoFileError(ValidationError):
    default_message = "No file uploaded"


class EmptyDocumentError(ValidationError):
    default_message = "No content found in the PDF"


class FileTooLargeError(ValidationError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "File too large"


class UnsupportedFormatError(ValidationError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    default_message = "Only PDF files are allowed"


class SessionNotFoundError(AppError):
    """The session expired or never existed. Callers must re-upload."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Document not found. Please upload it again."


class UpstreamError(AppError):
    """
    Embedding or completion provider failed.

    The caller always gets the fixed message; provider text goes to
    ``detail`` and only reaches the logs.
    """

    default_message = "The AI provider failed to respond. Please try again."

    def __init__(self, detail: str = None):
        super().__init__(detail=detail)


def _error_body(request: Request, message: str, error_type: str) -> dict:

    return {
        "detail": message,
        "error_type": error_type,
        "request_id": getattr(request.state, "request_id", "unknown"),
    }


async def app_error_handler(request: Request, exc: AppError):

    log = logger.warning if exc.status_code < 500 else logger.error

    log(
        "request_rejected",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "path": request.url.path,
            "status_code": exc.status_code,
            "error": exc.message,
            "error_detail": exc.detail,
            "error_type": type(exc).__name__,
        },
    )

    if exc.status_code >= 500:
        posthog_client.track_error(
            distinct_id=getattr(request.state, "request_id", "unknown"),
            error_type=type(exc).__name__,
            error_message=exc.message,
            endpoint=request.url.path,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.message, type(exc).__name__),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):

    errors = exc.errors()

    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"

    logger.warning(
        "request_validation_failed",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "path": request.url.path,
            "error": message,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(request, message, "ValidationError"),
    )


def rate_limit_handler(request: Request, exc: RateLimitExceeded):

    logger.warning(
        "rate_limit_exceeded",
        extra={
            "client_ip": request.client.host if request.client else None,
            "path": request.url.path,
            "limit": str(exc.detail),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_error_body(
            request,
            "Too many requests, please try again later.",
            "RateLimitExceeded",
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):

    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        "unhandled_exception",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "error": str(exc),
            "error_type": type(exc).__name__,
        },
        exc_info=exc,
    )

    posthog_client.track_error(
        distinct_id=request_id,
        error_type=type(exc).__name__,
        error_message=str(exc),
        endpoint=request.url.path,
    )

    if config.APP_ENV == "production":
        message = "An internal error occurred. Please try again."
    else:
        message = str(exc) or "Something went wrong!"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, message, "InternalError"),
    )


def register_error_handlers(app: FastAPI):

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
