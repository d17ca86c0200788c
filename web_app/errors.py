"""Mapping of domain errors to HTTP responses."""

from http import HTTPStatus
from typing import Dict, Tuple, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortener.common.logging_config import get_logger
from shortener.errors import (
    CodeGenerationError,
    GenerationExhaustedError,
    InvalidInputError,
    InvalidShortCodeError,
    InvalidURLError,
    ShortCodeAlreadyExistsError,
    ShortenerError,
    ShortURLExpiredError,
    ShortURLNotFoundError,
    StorageError,
    StoreUnavailableError,
)
from .api.schemas import ErrorResponse


logger = get_logger("url_shortener.web")

INTERNAL_ERROR = "internal_error"
INTERNAL_MESSAGE = "internal server error"

# status code, error token; internal kinds never expose their message
ERROR_RESPONSES: Dict[Type[ShortenerError], Tuple[int, str]] = {
    ShortURLNotFoundError: (404, "not_found"),
    ShortURLExpiredError: (410, "expired"),
    InvalidURLError: (400, "invalid_url"),
    InvalidShortCodeError: (400, "invalid_short_code"),
    InvalidInputError: (400, "invalid_input"),
    ShortCodeAlreadyExistsError: (409, "short_code_exists"),
    GenerationExhaustedError: (500, "generation_exhausted"),
    StoreUnavailableError: (503, "service_unavailable"),
    CodeGenerationError: (500, INTERNAL_ERROR),
    StorageError: (500, INTERNAL_ERROR),
}


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    """Build the JSON error body shared by every failure response."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump(),
    )


def resolve_error(error: ShortenerError) -> Tuple[int, str, str]:
    """Find status code, token and public message for a domain error."""
    for cls in type(error).__mro__:
        if cls in ERROR_RESPONSES:
            status_code, token = ERROR_RESPONSES[cls]
            if token == INTERNAL_ERROR:
                return status_code, token, INTERNAL_MESSAGE
            return status_code, token, cls.default_message
    return 500, INTERNAL_ERROR, INTERNAL_MESSAGE


async def handle_shortener_error(request: Request, exc: ShortenerError) -> JSONResponse:
    status_code, token, message = resolve_error(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    return error_response(status_code, token, message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Invalid request body for {request.method} {request.url.path}: {exc.errors()}")
    return error_response(400, "invalid_request", "invalid request body")


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    token = HTTPStatus(exc.status_code).phrase.lower().replace(" ", "_")
    response = error_response(exc.status_code, token, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def register_error_handlers(app: FastAPI) -> None:
    """Install the error handlers on an app."""
    app.add_exception_handler(ShortenerError, handle_shortener_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
