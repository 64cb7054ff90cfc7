"""API error envelope and exception handler registration."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
import logging
import traceback
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wod_tracker.core.config import settings_for_app
from wod_tracker.schemas.error import ErrorDetail
from wod_tracker.schemas.error import ErrorObject
from wod_tracker.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

VALIDATION_FAILED_MESSAGE = "Validation failed"


class ApiErrorCode(str, Enum):
    """Machine-readable error codes used across the API."""

    # 401
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TELEGRAM_AUTH_FAILED = "TELEGRAM_AUTH_FAILED"

    # 403
    FORBIDDEN = "FORBIDDEN"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # 404
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    WORKOUT_NOT_FOUND = "WORKOUT_NOT_FOUND"
    COMMUNITY_NOT_FOUND = "COMMUNITY_NOT_FOUND"

    # 400
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # 409
    ALREADY_EXISTS = "ALREADY_EXISTS"
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # 5xx
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"


class APIError(Exception):
    """Base application exception for explicit API error responses."""

    def __init__(
        self,
        *,
        status_code: int,
        code: ApiErrorCode | str,
        message: str,
        details: Sequence[ErrorDetail] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code.value if isinstance(code, ApiErrorCode) else code
        self.message = message
        self.details = list(details) if details is not None else None


class RequestValidationFailed(APIError):
    """Input failed one or more field constraints."""

    def __init__(self, details: Sequence[ErrorDetail]) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code=ApiErrorCode.VALIDATION_ERROR,
            message=VALIDATION_FAILED_MESSAGE,
            details=details,
        )


class NotFoundError(APIError):
    """Convenience exception for missing resources."""

    def __init__(self, *, message: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, code=ApiErrorCode.NOT_FOUND, message=message)


class NotImplementedAPIError(APIError):
    """Raised by placeholder routes whose controllers do not exist yet."""

    def __init__(self, *, message: str = "Endpoint not implemented yet") -> None:
        super().__init__(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            code=ApiErrorCode.NOT_IMPLEMENTED,
            message=message,
        )


def build_error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: Sequence[ErrorDetail] | None = None,
    stack: str | None = None,
) -> JSONResponse:
    """Render the shared error envelope."""
    error: dict[str, Any] = {"message": message, "code": code}
    if details is not None:
        error["details"] = list(details)
    if stack is not None:
        error["stack"] = stack
    payload = ErrorResponse(success=False, error=ErrorObject(**error))
    return JSONResponse(status_code=status_code, content=payload.to_content())


def _http_error_code(status_code: int) -> ApiErrorCode:
    if status_code == status.HTTP_404_NOT_FOUND:
        return ApiErrorCode.NOT_FOUND
    if status_code == status.HTTP_400_BAD_REQUEST:
        return ApiErrorCode.INVALID_INPUT
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return ApiErrorCode.UNAUTHORIZED
    if status_code == status.HTTP_403_FORBIDDEN:
        return ApiErrorCode.FORBIDDEN
    if status_code == status.HTTP_409_CONFLICT:
        return ApiErrorCode.ALREADY_EXISTS
    if status_code == status.HTTP_501_NOT_IMPLEMENTED:
        return ApiErrorCode.NOT_IMPLEMENTED
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return ApiErrorCode.INTERNAL_ERROR
    return ApiErrorCode.INVALID_INPUT


def format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    """Join an error location into a dot path, dropping request-part prefixes."""
    if not isinstance(location, (tuple, list)):
        return str(location)

    prefixes = {"body", "query", "path", "header", "cookie"}
    filtered = [str(part) for part in location if part not in prefixes]
    if filtered:
        return ".".join(filtered)

    if not location:
        return "request"

    return str(location[0])


def _validation_details(exc: RequestValidationError) -> list[ErrorDetail]:
    details: list[ErrorDetail] = []
    for issue in exc.errors():
        field = format_location(issue.get("loc", ()))
        message = str(issue.get("msg", "Invalid value"))
        details.append(ErrorDetail(field=field, message=message))
    return details


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI validation errors to the shared envelope."""

    return build_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        code=ApiErrorCode.VALIDATION_ERROR.value,
        message=VALIDATION_FAILED_MESSAGE,
        details=_validation_details(exc),
    )


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Normalize HTTP exceptions to the shared envelope."""

    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail in (None, "", "Not Found"):
        message = "Endpoint not found"
    elif isinstance(exc.detail, str) and exc.detail:
        message = exc.detail
    else:
        message = "Request failed"

    return build_error_response(
        status_code=exc.status_code,
        code=_http_error_code(exc.status_code).value,
        message=message,
    )


async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
    """Return explicit domain errors in the shared envelope."""

    return build_error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Keep the response shape stable and hide fault text in production."""

    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    settings = settings_for_app(request.app)
    message = "Internal server error" if settings.is_production else str(exc) or "Internal server error"
    stack = None
    if settings.is_development:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    return build_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ApiErrorCode.INTERNAL_ERROR.value,
        message=message,
        stack=stack,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach all error handlers to a FastAPI app instance."""

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
