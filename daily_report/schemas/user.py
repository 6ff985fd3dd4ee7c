"""
User-related schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from daily_report.models.user import Role, User
from daily_report.schemas.common import (
    ApiModel,
    OptionalText,
    PaginationInfo,
    Password,
    RequiredText,
    blank_to_none,
    reject_null,
    validate_email,
)


class UserCreate(BaseModel):
    """Schema for creating a new user."""

    name: RequiredText(50)
    email: str
    password: Password
    department: OptionalText(50) = None
    role: Role

    @field_validator("department", mode="before")
    @classmethod
    def blank_department(cls, v):
        return blank_to_none(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)


class UserUpdate(BaseModel):
    """Schema for updating a user. Omitted fields are left unchanged."""

    name: Optional[RequiredText(50)] = None
    email: Optional[str] = None
    department: OptionalText(50) = None
    role: Optional[Role] = None

    @field_validator("department", mode="before")
    @classmethod
    def blank_department(cls, v):
        return blank_to_none(v)

    @field_validator("name", "email", "role", mode="before")
    @classmethod
    def required_when_given(cls, v):
        return reject_null(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)


class UserResponse(ApiModel):
    """Schema for user response (no credentials)."""

    id: int
    name: str
    email: str
    department: Optional[str] = None
    role: Role
    created_at: datetime
    updated_at: datetime


class UserListData(ApiModel):
    users: List[UserResponse]
    pagination: PaginationInfo


def user_to_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user)
