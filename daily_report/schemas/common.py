"""
Common schemas used across the API: the response envelope, pagination,
and the reusable validation rules the request schemas are built from.
"""

import re
from typing import Annotated, Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from daily_report.core.pagination import Pagination

T = TypeVar("T")


# =============================================================================
# Validation building blocks
# =============================================================================

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_PATTERN = re.compile(r"^[0-9()+\- ]+$")
VISIT_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def RequiredText(max_length: int):
    """Trimmed string of 1..max_length characters."""
    return Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=max_length)]


def OptionalText(max_length: int):
    """Trimmed string of at most max_length characters, or None."""
    return Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=max_length)]]


Password = Annotated[str, StringConstraints(min_length=8, max_length=128)]


def blank_to_none(v: Any) -> Any:
    """Empty or whitespace-only strings become None."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


def reject_null(v: Any) -> Any:
    """For update fields that may be omitted but not cleared."""
    if v is None:
        raise ValueError("Field cannot be null")
    return v


def validate_email(v: str) -> str:
    """Validate email format; returns the address lower-cased."""
    v = v.strip()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email format")
    return v.lower()


def validate_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    if not PHONE_PATTERN.match(v):
        raise ValueError("Phone number may contain only digits, spaces, hyphens, parentheses and '+'")
    return v


# =============================================================================
# Response envelope
# =============================================================================

class ApiModel(BaseModel):
    """Base for response payloads: attributes in snake_case, JSON in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(BaseModel, Generic[T]):
    """Success half of the envelope: {"success": true, "data": ...}."""

    success: bool = True
    data: Optional[T] = None


class ErrorBody(BaseModel):
    code: str = Field(description="Error code (VALIDATION_ERROR, FORBIDDEN, ...)")
    message: str = Field(description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Per-field violations or extra context")


class ErrorResponse(BaseModel):
    """Error half of the envelope (documentation only; built by core.errors)."""

    success: bool = False
    error: ErrorBody


class MessageData(ApiModel):
    message: str


class PaginationInfo(ApiModel):
    """Pagination block returned with every list."""

    total: int = Field(description="Total number of items matching filters")
    page: int = Field(description="Current page number (1-indexed)")
    limit: int = Field(description="Items per page")
    total_pages: int = Field(description="Total number of pages")

    @classmethod
    def from_pagination(cls, p: Pagination) -> "PaginationInfo":
        return cls(total=p.total, page=p.page, limit=p.limit, total_pages=p.total_pages)


class UserSummary(ApiModel):
    """Minimal user reference embedded in other resources."""

    id: int
    name: str


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error / invalid request / duplicate entry"},
    401: {"model": ErrorResponse, "description": "Missing, invalid or expired credentials"},
    403: {"model": ErrorResponse, "description": "Insufficient role or not the owner"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
    409: {"model": ErrorResponse, "description": "Blocked by related records"},
    500: {"model": ErrorResponse, "description": "Internal error"},
}
