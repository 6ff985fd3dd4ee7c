"""
Daily report endpoints.

Every authenticated user may read every report. A report can be changed
or deleted only by its owner or by a manager.
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from daily_report.auth.dependencies import CurrentClaim, CurrentUser, ensure_owner_or_manager
from daily_report.core.database import commit_unique
from daily_report.core.dates import utcnow
from daily_report.core.errors import ApiError, field_error
from daily_report.core.pagination import calc_pagination
from daily_report.core.services import get_db
from daily_report.models.customer import Customer
from daily_report.models.report import Comment, DailyReport, Visit
from daily_report.schemas.common import (
    ERROR_RESPONSES,
    Envelope,
    MessageData,
    PaginationInfo,
    UserSummary,
)
from daily_report.schemas.report import (
    ReportCreate,
    ReportDetail,
    ReportListData,
    ReportListItem,
    ReportUpdate,
    VisitInput,
)

logger = logging.getLogger(__name__)

router = APIRouter(responses={k: ERROR_RESPONSES[k] for k in (400, 401, 404)})

DUPLICATE_REPORT = "A report for this date already exists"


async def load_report(db: AsyncSession, report_id: int) -> DailyReport:
    """Fetch a report with owner, visits (and their customers) and comments."""
    result = await db.execute(
        select(DailyReport)
        .where(DailyReport.id == report_id)
        .options(
            selectinload(DailyReport.user),
            selectinload(DailyReport.visits).selectinload(Visit.customer),
            selectinload(DailyReport.comments).selectinload(Comment.user),
        )
        .execution_options(populate_existing=True)
    )
    report = result.scalar_one_or_none()
    if report is None:
        raise ApiError.not_found("Report not found")
    return report


async def ensure_customers_exist(db: AsyncSession, visits: List[VisitInput]) -> None:
    """Reject visits naming unknown customers, one violation per visit."""
    wanted = {v.customer_id for v in visits}
    result = await db.execute(select(Customer.id).where(Customer.id.in_(wanted)))
    found = set(result.scalars().all())

    errors = [
        field_error(f"visits.{i}.customer_id", "Customer not found")
        for i, v in enumerate(visits)
        if v.customer_id not in found
    ]
    if errors:
        raise ApiError.validation(errors)


async def find_report_id(db: AsyncSession, user_id: int, report_date: date) -> Optional[int]:
    result = await db.execute(
        select(DailyReport.id).where(
            DailyReport.user_id == user_id,
            DailyReport.report_date == report_date,
        )
    )
    return result.scalar_one_or_none()


def build_visits(visits: List[VisitInput]) -> List[Visit]:
    return [
        Visit(customer_id=v.customer_id, visit_time=v.visit_time, content=v.content)
        for v in visits
    ]


# =============================================================================
# Report CRUD
# =============================================================================

@router.get("", response_model=Envelope[ReportListData])
async def list_reports(
    claim: CurrentClaim,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    user_id: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """
    List reports, newest date first.

    Filters: date_from / date_to (inclusive), user_id.
    """
    filters = []
    if date_from:
        filters.append(DailyReport.report_date >= date_from)
    if date_to:
        filters.append(DailyReport.report_date <= date_to)
    if user_id:
        filters.append(DailyReport.user_id == user_id)

    result = await db.execute(select(func.count(DailyReport.id)).where(*filters))
    total = result.scalar() or 0
    pagination = calc_pagination(total, page, limit)

    visit_count = (
        select(func.count(Visit.id))
        .where(Visit.daily_report_id == DailyReport.id)
        .correlate(DailyReport)
        .scalar_subquery()
    )
    comment_count = (
        select(func.count(Comment.id))
        .where(Comment.daily_report_id == DailyReport.id)
        .correlate(DailyReport)
        .scalar_subquery()
    )

    query = (
        select(DailyReport, visit_count, comment_count)
        .where(*filters)
        .options(selectinload(DailyReport.user))
        .order_by(DailyReport.report_date.desc(), DailyReport.id.desc())
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    result = await db.execute(query)

    reports = [
        ReportListItem(
            id=report.id,
            report_date=report.report_date,
            user=UserSummary.model_validate(report.user),
            visit_count=visits,
            comment_count=comments,
            created_at=report.created_at,
        )
        for report, visits, comments in result.all()
    ]

    return Envelope(data=ReportListData(
        reports=reports,
        pagination=PaginationInfo.from_pagination(pagination),
    ))


@router.get("/{report_id}", response_model=Envelope[ReportDetail])
async def get_report(
    report_id: int,
    claim: CurrentClaim,
    db: AsyncSession = Depends(get_db),
):
    """Get one report with its visits (by visit time) and comments (oldest first)."""
    report = await load_report(db, report_id)
    return Envelope(data=ReportDetail.model_validate(report))


@router.post("", response_model=Envelope[ReportDetail], status_code=status.HTTP_201_CREATED)
async def create_report(
    report_data: ReportCreate,
    user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """
    Create the caller's report for a date.

    A user has at most one report per date.
    """
    await ensure_customers_exist(db, report_data.visits)

    if await find_report_id(db, user.id, report_data.report_date) is not None:
        raise ApiError.duplicate(DUPLICATE_REPORT)

    report = DailyReport(
        user_id=user.id,
        report_date=report_data.report_date,
        problem=report_data.problem,
        plan=report_data.plan,
        visits=build_visits(report_data.visits),
    )
    db.add(report)
    await commit_unique(db, DUPLICATE_REPORT)

    logger.info("User %s created report %s for %s", user.id, report.id, report.report_date)

    report = await load_report(db, report.id)
    return Envelope(data=ReportDetail.model_validate(report))


@router.put("/{report_id}", response_model=Envelope[ReportDetail], responses={403: ERROR_RESPONSES[403]})
async def update_report(
    report_id: int,
    report_data: ReportUpdate,
    claim: CurrentClaim,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a report. Owner or manager only.

    `visits`, when given, replaces every visit of the report.
    """
    report = await load_report(db, report_id)
    ensure_owner_or_manager(claim, report.user_id, "report")

    fields = report_data.model_fields_set

    if "visits" in fields and report_data.visits is not None:
        await ensure_customers_exist(db, report_data.visits)
        report.visits = build_visits(report_data.visits)

    if "problem" in fields:
        report.problem = report_data.problem
    if "plan" in fields:
        report.plan = report_data.plan

    # Replacing only the visits leaves the report row itself untouched
    report.updated_at = utcnow()

    await db.commit()

    logger.info("User %s updated report %s", claim.user_id, report.id)

    report = await load_report(db, report.id)
    return Envelope(data=ReportDetail.model_validate(report))


@router.delete("/{report_id}", response_model=Envelope[MessageData], responses={403: ERROR_RESPONSES[403]})
async def delete_report(
    report_id: int,
    claim: CurrentClaim,
    db: AsyncSession = Depends(get_db),
):
    """Delete a report with its visits and comments. Owner or manager only."""
    report = await db.get(DailyReport, report_id)
    if report is None:
        raise ApiError.not_found("Report not found")

    ensure_owner_or_manager(claim, report.user_id, "report")

    await db.delete(report)
    await db.commit()

    logger.info("User %s deleted report %s", claim.user_id, report_id)

    return Envelope(data=MessageData(message="Report deleted"))
