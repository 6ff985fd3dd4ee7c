"""
Daily report schemas.

Validation rules:
- report_date must be a real calendar date and not later than today
- a report carries at least one visit
- free-text sections are trimmed and length-bounded
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from daily_report.core.dates import is_future
from daily_report.models.report import TargetType
from daily_report.schemas.common import (
    VISIT_TIME_PATTERN,
    ApiModel,
    OptionalText,
    PaginationInfo,
    RequiredText,
    UserSummary,
    blank_to_none,
)


class VisitInput(BaseModel):
    """One customer visit inside a report payload."""

    customer_id: int = Field(ge=1)
    visit_time: Optional[str] = Field(default=None, pattern=VISIT_TIME_PATTERN, description="HH:MM (24h)")
    content: RequiredText(1000)

    @field_validator("visit_time", mode="before")
    @classmethod
    def blank_visit_time(cls, v):
        v = blank_to_none(v)
        return v.strip() if isinstance(v, str) else v


def _require_visits(visits: Optional[List[VisitInput]]) -> Optional[List[VisitInput]]:
    if visits is not None and len(visits) < 1:
        raise ValueError("At least one visit is required")
    return visits


class ReportCreate(BaseModel):
    """Schema for creating a daily report."""

    report_date: date
    visits: List[VisitInput]
    problem: OptionalText(2000) = None
    plan: OptionalText(2000) = None

    @field_validator("report_date")
    @classmethod
    def not_in_future(cls, v: date) -> date:
        if is_future(v):
            raise ValueError("Report date cannot be in the future")
        return v

    @field_validator("visits")
    @classmethod
    def at_least_one_visit(cls, v: List[VisitInput]) -> List[VisitInput]:
        return _require_visits(v)

    @field_validator("problem", "plan", mode="before")
    @classmethod
    def blank_sections(cls, v):
        return blank_to_none(v)


class ReportUpdate(BaseModel):
    """
    Schema for updating a daily report.

    Only fields present in the payload change; `visits`, when present,
    replaces every visit of the report.
    """

    visits: Optional[List[VisitInput]] = None
    problem: OptionalText(2000) = None
    plan: OptionalText(2000) = None

    @field_validator("visits")
    @classmethod
    def at_least_one_visit(cls, v: Optional[List[VisitInput]]) -> Optional[List[VisitInput]]:
        return _require_visits(v)

    @field_validator("problem", "plan", mode="before")
    @classmethod
    def blank_sections(cls, v):
        return blank_to_none(v)


# =============================================================================
# Responses
# =============================================================================

class CustomerRef(ApiModel):
    id: int
    name: str


class VisitResponse(ApiModel):
    id: int
    customer: CustomerRef
    visit_time: Optional[str] = None
    content: str


class CommentResponse(ApiModel):
    id: int
    target_type: TargetType
    content: str
    user: UserSummary
    created_at: datetime


class ReportUser(ApiModel):
    id: int
    name: str
    department: Optional[str] = None


class ReportDetail(ApiModel):
    id: int
    report_date: date
    user: ReportUser
    visits: List[VisitResponse]
    problem: Optional[str] = None
    plan: Optional[str] = None
    comments: List[CommentResponse]
    created_at: datetime
    updated_at: datetime


class ReportListItem(ApiModel):
    id: int
    report_date: date
    user: UserSummary
    visit_count: int
    comment_count: int
    created_at: datetime


class ReportListData(ApiModel):
    reports: List[ReportListItem]
    pagination: PaginationInfo
