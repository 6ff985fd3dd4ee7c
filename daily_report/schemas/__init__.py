"""
Pydantic schemas for API request/response validation.

These schemas provide:
- Input validation (trimming, length bounds, formats, enums, date rules)
- Output serialization (camelCase JSON inside the success envelope)
- OpenAPI documentation generation
"""

from daily_report.schemas.auth import (
    LoginRequest,
    LoginResponse,
    PasswordChangeRequest,
    AuthUser,
)
from daily_report.schemas.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    UserListData,
)
from daily_report.schemas.report import (
    VisitInput,
    ReportCreate,
    ReportUpdate,
    ReportDetail,
    ReportListData,
)
from daily_report.schemas.comment import (
    CommentCreate,
    CommentResponse,
    CommentListData,
)
from daily_report.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerListData,
)
from daily_report.schemas.common import (
    Envelope,
    ErrorResponse,
    MessageData,
    PaginationInfo,
)

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    "PasswordChangeRequest",
    "AuthUser",
    # User
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserListData",
    # Report
    "VisitInput",
    "ReportCreate",
    "ReportUpdate",
    "ReportDetail",
    "ReportListData",
    # Comment
    "CommentCreate",
    "CommentResponse",
    "CommentListData",
    # Customer
    "CustomerCreate",
    "CustomerUpdate",
    "CustomerResponse",
    "CustomerListData",
    # Common
    "Envelope",
    "ErrorResponse",
    "MessageData",
    "PaginationInfo",
]
