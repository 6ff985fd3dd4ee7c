"""
Comment schemas.
"""

from typing import List

from pydantic import BaseModel

from daily_report.models.report import TargetType
from daily_report.schemas.common import ApiModel, RequiredText
from daily_report.schemas.report import CommentResponse


class CommentCreate(BaseModel):
    """A comment on the PROBLEM or PLAN section of a report."""

    target_type: TargetType
    content: RequiredText(1000)


class CommentListData(ApiModel):
    comments: List[CommentResponse]


__all__ = ["CommentCreate", "CommentListData", "CommentResponse"]
