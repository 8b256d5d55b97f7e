"""Domain error taxonomy and the FastAPI handlers that render it.

Every failure leaves the API in the same envelope::

    {"success": false, "error": "<message>"}

Domain code raises the subclasses below; unexpected exceptions are logged
and replaced with a generic 500 so internals never reach the client.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"


class InkwellError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(InkwellError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthError(InkwellError):
    """Bad credentials or an unusable token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class ForbiddenError(InkwellError):
    """Role or ownership mismatch."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(InkwellError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(InkwellError):
    """Uniqueness violation such as a duplicate email."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class InternalError(InkwellError):
    """Unexpected failure; the message shown to clients stays generic."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the failure envelope."""
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ValidationError.default_message
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", ValidationError.default_message)
    return f"{location}: {message}" if location else message


def install_error_handlers(app: FastAPI) -> None:
    """Register the envelope-producing exception handlers on ``app``."""

    @app.exception_handler(InkwellError)
    async def _handle_domain_error(request: Request, exc: InkwellError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s - %s", request.method, request.url.path, exc, exc_info=exc)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(status.HTTP_400_BAD_REQUEST, _first_validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "%s %s - %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)
