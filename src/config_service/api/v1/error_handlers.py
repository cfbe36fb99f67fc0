"""
FastAPI exception handlers that map service-level exceptions to HTTP responses.

- Services raise config_service.exceptions.base.* (ValidationFailedError, ApplicationNameConflictError, ...)
- These handlers produce `{"message": ..., "details": ...}` (via .to_payload())
  with the right status code (via .http_status()).
- Internal failures never echo driver/database text; the request id is added
  to `details` so a client report can be matched to the server log.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from config_service.core.logging.filters import get_request_id
from config_service.exceptions.base import (
    ServiceError,
    DuplicateError,
    InternalError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)


def _with_request_reference(details: str | None) -> str | None:
    rid = get_request_id()
    if not rid:
        return details
    return f"{details} (request id: {rid})" if details else f"request id: {rid}"


async def validation_failed_handler(request: Request, exc: ValidationFailedError) -> JSONResponse:
    """422 for business-rule violations."""
    logger.info("ValidationFailedError for %s %s: fields=%s", request.method, request.url.path, exc.fields)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 for bodies FastAPI could not parse into the request model."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    logger.info("RequestValidationError for %s %s: %s", request.method, request.url.path, problems)
    return JSONResponse(status_code=422, content={"message": "Validation failed", "details": "; ".join(problems)})


async def duplicate_error_handler(request: Request, exc: DuplicateError) -> JSONResponse:
    """409 Conflict for duplicates."""
    logger.info("DuplicateError for %s %s: fields=%s", request.method, request.url.path, exc.fields)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def internal_error_handler(request: Request, exc: InternalError) -> JSONResponse:
    """500 with a sanitized payload. The cause chain is logged, never returned."""
    logger.error("InternalError for %s %s: %s", request.method, request.url.path, str(exc),
                 exc_info=exc.__cause__ or exc)
    payload = exc.to_payload()
    payload["details"] = _with_request_reference(payload.get("details"))
    return JSONResponse(status_code=exc.http_status(), content=payload)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Fallback for any other ServiceError (status from its error_code)."""
    logger.warning("ServiceError for %s %s: %s", request.method, request.url.path, str(exc))
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    500 for anything that escaped the service layer.

    Normally reached through UnhandledExceptionMiddleware, so the request id is
    still set. The `Exception` registration below only covers errors raised
    outside it (in the request-id middleware itself).
    """
    logger.exception("Unhandled exception for %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "message": "An unexpected error occurred",
            "details": _with_request_reference(InternalError.DEFAULT_DETAILS),
        },
    )


class UnhandledExceptionMiddleware(BaseHTTPMiddleware):
    """
    Turns unhandled exceptions into the 500 payload inside the request-id scope.

    Starlette sends `Exception` handlers to the outermost ServerErrorMiddleware,
    which runs after RequestIDMiddleware has reset the id and without its
    response header. Add this middleware before RequestIDMiddleware so it sits inside it.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_exception_handler(request, exc)


# Most specific first
def register_exception_handlers(app):
    app.add_exception_handler(ValidationFailedError, validation_failed_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(DuplicateError, duplicate_error_handler)
    app.add_exception_handler(InternalError, internal_error_handler)
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
