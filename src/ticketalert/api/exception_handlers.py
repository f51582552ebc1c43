"""Custom exception handlers for the FastAPI application.

Every error leaves the API as JSON shaped {"error": "<message>"} - the frontend
reads that key. Domain exceptions map to status codes here so routers can just
raise:

- ValidationException / RequestValidationError -> 400
- DuplicateEntityException                     -> 400 (message shown to the user)
- AuthenticationError                          -> 401
- ConfigurationError                           -> 503
- anything unhandled                           -> 500, generic message
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ticketalert.domain.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DuplicateEntityException,
    ValidationException,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Noe gikk galt, prøv igjen senere"
INVALID_REQUEST_MESSAGE = "Ugyldig forespørsel"


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep only JSON-safe, non-echoing fields of pydantic errors."""
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
        for error in errors
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, validation, HTTP and unexpected errors."""

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(
        request: Request, exc: ValidationException
    ) -> JSONResponse:
        logger.info(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(DuplicateEntityException)
    async def duplicate_entity_exception_handler(
        request: Request, exc: DuplicateEntityException
    ) -> JSONResponse:
        logger.info(
            "Duplicate %s at %s",
            exc.entity_type,
            request.url.path,
            extra={"path": request.url.path, "entity_type": exc.entity_type},
        )
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        logger.warning(
            "Authentication failed at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return error_response(status.HTTP_401_UNAUTHORIZED, exc.message)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error(
            "Configuration error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = _sanitize_validation_errors(list(exc.errors()))
        logger.info(
            "Request validation failed at %s: %s",
            request.url.path,
            errors,
            extra={"path": request.url.path},
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST, INVALID_REQUEST_MESSAGE, details=errors
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("HTTP %s at %s: %s", exc.status_code, request.url.path, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    # Hey future me, last line of defense. The real exception goes to the log (with the
    # correlation ID); the client only ever sees the generic message.
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error at %s",
            request.url.path,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


__all__ = ["GENERIC_ERROR_MESSAGE", "error_response", "register_exception_handlers"]
