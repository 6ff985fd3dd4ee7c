"""
Report comment endpoints.

Mounted under /reports/{report_id}/comments. Any authenticated user may
comment; a comment can be deleted by its author or by a manager.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from daily_report.auth.dependencies import CurrentClaim, CurrentUser, ensure_owner_or_manager
from daily_report.core.errors import ApiError
from daily_report.core.services import get_db
from daily_report.models.report import Comment, DailyReport
from daily_report.schemas.comment import CommentCreate, CommentListData, CommentResponse
from daily_report.schemas.common import ERROR_RESPONSES, Envelope, MessageData

logger = logging.getLogger(__name__)

router = APIRouter(responses={k: ERROR_RESPONSES[k] for k in (400, 401, 404)})


async def ensure_report_exists(db: AsyncSession, report_id: int) -> None:
    result = await db.execute(select(DailyReport.id).where(DailyReport.id == report_id))
    if result.scalar_one_or_none() is None:
        raise ApiError.not_found("Report not found")


async def load_comment(db: AsyncSession, comment_id: int) -> Comment:
    result = await db.execute(
        select(Comment)
        .where(Comment.id == comment_id)
        .options(selectinload(Comment.user))
    )
    comment = result.scalar_one_or_none()
    if comment is None:
        raise ApiError.not_found("Comment not found")
    return comment


@router.get("/{report_id}/comments", response_model=Envelope[CommentListData])
async def list_comments(
    report_id: int,
    claim: CurrentClaim,
    db: AsyncSession = Depends(get_db),
):
    """List a report's comments, oldest first."""
    await ensure_report_exists(db, report_id)

    result = await db.execute(
        select(Comment)
        .where(Comment.daily_report_id == report_id)
        .options(selectinload(Comment.user))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    comments = [CommentResponse.model_validate(c) for c in result.scalars().all()]

    return Envelope(data=CommentListData(comments=comments))


@router.post(
    "/{report_id}/comments",
    response_model=Envelope[CommentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    report_id: int,
    comment_data: CommentCreate,
    user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Comment on the PROBLEM or PLAN section of a report."""
    await ensure_report_exists(db, report_id)

    comment = Comment(
        daily_report_id=report_id,
        user_id=user.id,
        target_type=comment_data.target_type,
        content=comment_data.content,
    )
    db.add(comment)
    await db.commit()

    logger.info("User %s commented on report %s (comment %s)", user.id, report_id, comment.id)

    comment = await load_comment(db, comment.id)
    return Envelope(data=CommentResponse.model_validate(comment))


@router.delete(
    "/{report_id}/comments/{comment_id}",
    response_model=Envelope[MessageData],
    responses={403: ERROR_RESPONSES[403]},
)
async def delete_comment(
    report_id: int,
    comment_id: int,
    claim: CurrentClaim,
    db: AsyncSession = Depends(get_db),
):
    """Delete a comment. Author or manager only."""
    await ensure_report_exists(db, report_id)

    comment = await db.get(Comment, comment_id)
    # A comment addressed through another report's URL does not exist here
    if comment is None or comment.daily_report_id != report_id:
        raise ApiError.not_found("Comment not found")

    ensure_owner_or_manager(claim, comment.user_id, "comment")

    await db.delete(comment)
    await db.commit()

    logger.info("User %s deleted comment %s", claim.user_id, comment_id)

    return Envelope(data=MessageData(message="Comment deleted"))
