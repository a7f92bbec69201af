"""
Error translation - domain failures to HTTP responses.

Every failing request, whatever raised it, gets the same envelope:
statusCode, error (machine-readable kind), message, timestamp, path, method.
"""

import logging
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.domain.exceptions import DomainError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.EMAIL_NOT_VERIFIED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_IMPLEMENTED: status.HTTP_501_NOT_IMPLEMENTED,
    ErrorKind.STORAGE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Kinds whose message may reveal internals
_MASKED_KINDS = {ErrorKind.STORAGE, ErrorKind.UNEXPECTED}

_KIND_BY_HTTP_STATUS = {
    status.HTTP_400_BAD_REQUEST: ErrorKind.VALIDATION,
    status.HTTP_401_UNAUTHORIZED: ErrorKind.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorKind.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorKind.CONFLICT,
}


def error_envelope(request: Request, status_code: int, kind: str, message: str) -> JSONResponse:
    """Build the uniform error response."""
    if status_code >= 500:
        logger.error("%s %s - %s - %s", request.method, request.url.path, status_code, message)
    else:
        logger.warning("%s %s - %s - %s", request.method, request.url.path, status_code, message)

    return JSONResponse(
        status_code=status_code,
        content={
            "statusCode": status_code,
            "error": kind,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
            "method": request.method,
        },
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_KIND[exc.kind]
    message = exc.message
    if exc.kind in _MASKED_KINDS:
        logger.error("Unhandled %s failure: %s", exc.kind.value, exc.message, exc_info=exc)
        message = "Internal server error"
    return error_envelope(request, status_code, exc.kind.value, message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    message = "; ".join(details) or "Invalid request"
    return error_envelope(request, status.HTTP_400_BAD_REQUEST, ErrorKind.VALIDATION.value, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = _KIND_BY_HTTP_STATUS.get(exc.status_code)
    if kind is not None:
        error = kind.value
    else:
        error = HTTPStatus(exc.status_code).phrase.lower().replace(" ", "_")
    return error_envelope(request, exc.status_code, error, str(exc.detail))


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_envelope(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorKind.UNEXPECTED.value,
        "Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
