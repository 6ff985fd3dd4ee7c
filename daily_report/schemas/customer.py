"""
Customer schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from daily_report.schemas.common import (
    ApiModel,
    OptionalText,
    PaginationInfo,
    RequiredText,
    blank_to_none,
    reject_null,
    validate_phone,
)


class CustomerCreate(BaseModel):
    name: RequiredText(100)
    address: OptionalText(200) = None
    phone: OptionalText(20) = None
    contact_person: OptionalText(50) = None

    @field_validator("address", "phone", "contact_person", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        return validate_phone(v)


class CustomerUpdate(BaseModel):
    """Omitted fields are left unchanged; optional fields may be cleared with null or ""."""

    name: Optional[RequiredText(100)] = None
    address: OptionalText(200) = None
    phone: OptionalText(20) = None
    contact_person: OptionalText(50) = None

    @field_validator("name", mode="before")
    @classmethod
    def name_required_when_given(cls, v):
        return reject_null(v)

    @field_validator("address", "phone", "contact_person", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        return validate_phone(v)


class CustomerResponse(ApiModel):
    id: int
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    contact_person: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CustomerListData(ApiModel):
    customers: List[CustomerResponse]
    pagination: PaginationInfo
