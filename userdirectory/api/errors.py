"""Error envelope and exception handlers for the HTTP API.

Every failure is rendered with the same shape so clients can branch on `status`:
{timestamp, status, error, message, path, validationErrors?}
"""

import logging
from datetime import datetime
from http import HTTPStatus
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from userdirectory.services.exceptions import (
    DataIntegrityError,
    UserAlreadyExistsError,
    UserNotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "email": "Email",
    "firstName": "First name",
    "first_name": "First name",
    "lastName": "Last name",
    "last_name": "Last name",
}

REQUIRED_ERROR_TYPES = {"missing", "string_too_short", "string_blank"}
LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


class ErrorResponse(BaseModel):
    """Error envelope returned for every non-2xx response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timestamp: datetime = Field(default_factory=datetime.utcnow)
    status: int
    error: str
    message: str
    path: str
    validation_errors: Optional[Dict[str, str]] = None


def error_response(
    request: Request,
    status_code: int,
    message: str,
    validation_errors: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        status=status_code,
        error=HTTPStatus(status_code).phrase,
        message=message,
        path=request.url.path,
        validation_errors=validation_errors,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if str(part) not in LOCATION_PREFIXES]
    return parts[-1] if parts else "body"


def field_message(field: str, error: dict) -> str:
    """Human-readable message for one pydantic error on `field`."""
    label = FIELD_LABELS.get(field)
    if label is None:
        return error.get("msg", "Invalid value")

    error_type = error.get("type", "")
    if error_type in REQUIRED_ERROR_TYPES:
        return f"{label} is required"
    if error_type == "string_too_long":
        max_length = (error.get("ctx") or {}).get("max_length")
        return f"{label} must not exceed {max_length} characters"
    if field == "email" and error_type == "value_error":
        return "Email must be valid"
    return error.get("msg", "Invalid value")


def validation_messages(errors) -> Dict[str, str]:
    """Collapse pydantic errors into {field: message}, first error per field wins."""
    messages: Dict[str, str] = {}
    for error in errors:
        field = _field_name(error.get("loc", ()))
        messages.setdefault(field, field_message(field, error))
    return messages


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = validation_messages(exc.errors())
    logger.info(f"Validation failed on {request.url.path}: {errors}")
    return error_response(request, 400, "Validation failed", validation_errors=errors)


async def validation_failed_handler(request: Request, exc: ValidationFailedError) -> JSONResponse:
    logger.info(f"Validation failed on {request.url.path}: {exc.errors}")
    return error_response(request, 400, "Validation failed", validation_errors=exc.errors)


async def user_not_found_handler(request: Request, exc: UserNotFoundError) -> JSONResponse:
    return error_response(request, 404, str(exc))


async def user_already_exists_handler(request: Request, exc: UserAlreadyExistsError) -> JSONResponse:
    return error_response(request, 409, str(exc))


async def data_integrity_handler(request: Request, exc: DataIntegrityError) -> JSONResponse:
    logger.warning(f"Integrity violation on {request.url.path}: {exc.detail}")
    return error_response(request, 409, str(exc))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    detail = str(getattr(exc, "orig", exc))
    logger.warning(f"Unhandled integrity violation on {request.url.path}: {detail}")
    return error_response(request, 409, f"Data integrity violation: {detail}")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else HTTPStatus(exc.status_code).phrase
    return error_response(request, exc.status_code, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}")
    return error_response(request, 500, "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error envelope for every failure class."""
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationFailedError, validation_failed_handler)
    app.add_exception_handler(UserNotFoundError, user_not_found_handler)
    app.add_exception_handler(UserAlreadyExistsError, user_already_exists_handler)
    app.add_exception_handler(DataIntegrityError, data_integrity_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
