"""
Error taxonomy and the error half of the response envelope.

Every failure leaves the API as:

    {"success": false, "error": {"code": ..., "message": ..., "details"?: ...}}

Handlers raise ApiError (usually through one of its factory methods);
framework errors and unhandled exceptions are mapped by the handlers
registered in register_exception_handlers().
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Application error codes for client-side handling."""

    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_STATUS = {
    ErrorCode.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DUPLICATE_ENTRY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

DEFAULT_MESSAGES = {
    ErrorCode.INVALID_REQUEST: "Invalid request",
    ErrorCode.VALIDATION_ERROR: "Input validation failed",
    ErrorCode.DUPLICATE_ENTRY: "Entry already exists",
    ErrorCode.UNAUTHORIZED: "Authentication required",
    ErrorCode.FORBIDDEN: "You do not have permission to perform this action",
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.CONFLICT: "Request conflicts with the current state of the resource",
    ErrorCode.INTERNAL_ERROR: "An internal error occurred",
}


class ApiError(Exception):
    """An error that is reported to the client as an error envelope."""

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.code = code
        self.message = message or DEFAULT_MESSAGES[code]
        self.details = details
        self.headers = headers
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS[self.code]

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"success": False, "error": error}

    # Factories

    @classmethod
    def invalid_request(cls, message: Optional[str] = None, details: Optional[Any] = None) -> "ApiError":
        return cls(ErrorCode.INVALID_REQUEST, message, details)

    @classmethod
    def validation(cls, details: List[Dict[str, str]], message: Optional[str] = None) -> "ApiError":
        return cls(ErrorCode.VALIDATION_ERROR, message, details)

    @classmethod
    def duplicate(cls, message: Optional[str] = None) -> "ApiError":
        return cls(ErrorCode.DUPLICATE_ENTRY, message)

    @classmethod
    def unauthorized(cls, message: Optional[str] = None) -> "ApiError":
        return cls(ErrorCode.UNAUTHORIZED, message, headers={"WWW-Authenticate": "Bearer"})

    @classmethod
    def forbidden(cls, message: Optional[str] = None) -> "ApiError":
        return cls(ErrorCode.FORBIDDEN, message)

    @classmethod
    def not_found(cls, message: Optional[str] = None) -> "ApiError":
        return cls(ErrorCode.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: Optional[str] = None) -> "ApiError":
        return cls(ErrorCode.CONFLICT, message)

    @classmethod
    def internal(cls, message: Optional[str] = None) -> "ApiError":
        return cls(ErrorCode.INTERNAL_ERROR, message)


def field_error(field: str, message: str) -> Dict[str, str]:
    """One entry of a VALIDATION_ERROR details list."""
    return {"field": field, "message": message}


_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def format_validation_errors(errors) -> List[Dict[str, str]]:
    """
    Flatten pydantic errors into [{field, message}, ...], keeping order.

    ("body", "visits", 0, "content") -> "visits.0.content"
    """
    details = []
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) or "body"

        message = err.get("msg", "Invalid value")
        # Messages raised from our own validators come through as "Value error, ..."
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]

        details.append(field_error(field, message))
    return details


def error_response(exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


# =============================================================================
# Exception handlers
# =============================================================================

async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()

    # A body that is not JSON at all is a malformed request, not a field violation
    if any(err.get("type") == "json_invalid" for err in errors):
        # Body parsing runs before the auth dependency; keep 401 ahead of 400
        from daily_report.auth.dependencies import authentication_error

        auth_exc = authentication_error(request)
        if auth_exc is not None:
            return error_response(auth_exc)
        return error_response(ApiError.invalid_request("Request body is not valid JSON"))

    return error_response(ApiError.validation(format_validation_errors(errors)))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        api_exc = ApiError.not_found()
    elif exc.status_code == status.HTTP_401_UNAUTHORIZED:
        api_exc = ApiError.unauthorized()
    elif exc.status_code == status.HTTP_403_FORBIDDEN:
        api_exc = ApiError.forbidden()
    elif exc.status_code >= 500:
        api_exc = ApiError.internal()
    else:
        api_exc = ApiError.invalid_request(str(exc.detail) if exc.detail else None)

    response = error_response(api_exc)
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        response.status_code = exc.status_code
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log everything, reveal nothing."""
    logger.error(
        "Unhandled exception on %s %s", request.method, request.url.path,
        exc_info=exc,
    )
    api_exc = ApiError.internal()
    body = api_exc.to_dict()
    body["error"]["details"] = {"request_id": getattr(request.state, "request_id", None)}
    return JSONResponse(status_code=api_exc.status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
