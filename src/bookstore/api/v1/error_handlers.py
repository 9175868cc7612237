# bookstore/api/v1/error_handlers.py
"""
FastAPI exception handlers that map app-level exceptions to HTTP responses.

Handlers and repositories raise bookstore.exceptions.base.* (BookValidationError,
NotFoundError, DuplicateError, ...). Each exception already knows its status
(`http_status()`) and body (`to_payload()`), so the handlers here only log and
add HTTP framing.

Register them from the app factory:

    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging
from bookstore.core.logging.filters import get_request_id
from bookstore.core.logging.middleware import REQUEST_ID_HEADER
from bookstore.exceptions.base import (
    RepositoryError,
    BookValidationError,
    DuplicateError,
    InvalidFieldError,
    NotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)


# Starlette picks the handler registered for the closest class in the exception's MRO,
# so the specific handlers win over repository_error_handler.

async def validation_error_handler(request: Request, exc: BookValidationError) -> JSONResponse:
    """
    400 Bad Request. Payload: {"errors": [...]} in field order.
    """
    logger.info("BookValidationError for %s %s: %d error(s)", request.method, request.url.path, len(exc.errors))
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def duplicate_error_handler(request: Request, exc: DuplicateError) -> JSONResponse:
    """
    409 Conflict for duplicates.
    Payload: exc.to_payload() -> {"detail": "...", "code": "duplicate", "fields": [...]}
    """
    # do not log raw DB messages here; the mapper already logged the constraint
    logger.info("DuplicateError for %s %s: fields=%s", request.method, request.url.path, exc.fields)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def invalid_field_handler(request: Request, exc: InvalidFieldError) -> JSONResponse:
    """
    422 Unprocessable Entity for unexpected fields.
    """
    logger.info("InvalidFieldError for %s %s: fields=%s", request.method, request.url.path, exc.fields)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.info("NotFoundError for %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """
    500 with a generic body. The underlying driver error was logged (with stack)
    by db_error_handler; this line ties it to the request.
    """
    logger.error("StorageError for %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """
    Fallback for general repository errors -> 400 by default (or code-defined status).
    """
    logger.warning("RepositoryError for %s %s: %s", request.method, request.url.path, str(exc))
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic 500. Starlette runs this handler outside the user middleware stack,
    after RequestIDMiddleware has returned, so the request id is set here.
    """
    rid = getattr(request.state, "request_id", None) or get_request_id()
    logger.exception("Unhandled error for %s %s", request.method, request.url.path, extra={"request_id": rid})
    headers = {REQUEST_ID_HEADER: rid} if rid else None
    return JSONResponse(status_code=500, content={"detail": "Internal server error"}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookValidationError, validation_error_handler)
    app.add_exception_handler(DuplicateError, duplicate_error_handler)
    app.add_exception_handler(InvalidFieldError, invalid_field_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
