"""
Authentication-related schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from daily_report.models.user import Role
from daily_report.schemas.common import ApiModel, Password, validate_email


class LoginRequest(BaseModel):
    """Login request with email and password."""

    email: str = Field(description="User email address")
    password: str = Field(min_length=1, max_length=128, description="User password")

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)


class PasswordChangeRequest(BaseModel):
    """Request to change a user's password."""

    current_password: str = Field(min_length=1, max_length=128)
    new_password: Password


class AuthUser(ApiModel):
    """The authenticated user as returned by login and /auth/me."""

    id: int
    email: str
    name: str
    role: Role
    department: Optional[str] = None


class LoginResponse(ApiModel):
    token: str = Field(description="Session token (also set as the auth cookie)")
    expires_in: int = Field(description="Token lifetime in seconds")
    user: AuthUser
