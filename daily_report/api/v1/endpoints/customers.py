"""
Customer endpoints.

Reading is open to every authenticated user; creating, updating and
deleting customers requires the MANAGER role.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from daily_report.auth.dependencies import CurrentClaim, ManagerClaim
from daily_report.core.database import escape_like
from daily_report.core.errors import ApiError
from daily_report.core.pagination import calc_pagination
from daily_report.core.services import get_db
from daily_report.models.customer import Customer
from daily_report.models.report import Visit
from daily_report.schemas.common import ERROR_RESPONSES, Envelope, MessageData, PaginationInfo
from daily_report.schemas.customer import (
    CustomerCreate,
    CustomerListData,
    CustomerResponse,
    CustomerUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(responses={k: ERROR_RESPONSES[k] for k in (400, 401, 404)})

CUSTOMER_IN_USE = "Customer has visit records and cannot be deleted"


async def get_customer_or_404(db: AsyncSession, customer_id: int) -> Customer:
    customer = await db.get(Customer, customer_id)
    if customer is None:
        raise ApiError.not_found("Customer not found")
    return customer


async def count_visits(db: AsyncSession, customer_id: int) -> int:
    result = await db.execute(
        select(func.count(Visit.id)).where(Visit.customer_id == customer_id)
    )
    return result.scalar() or 0


@router.get("", response_model=Envelope[CustomerListData])
async def list_customers(
    claim: CurrentClaim,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """
    List customers ordered by name.

    `search` matches a substring of the name or the address.
    """
    query = select(Customer)
    count_query = select(func.count(Customer.id))

    if search and search.strip():
        pattern = f"%{escape_like(search.strip())}%"
        search_filter = or_(
            Customer.name.ilike(pattern, escape="\\"),
            Customer.address.ilike(pattern, escape="\\"),
        )
        query = query.where(search_filter)
        count_query = count_query.where(search_filter)

    result = await db.execute(count_query)
    total = result.scalar() or 0
    pagination = calc_pagination(total, page, limit)

    query = (
        query
        .order_by(Customer.name.asc(), Customer.id.asc())
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    result = await db.execute(query)
    customers = [CustomerResponse.model_validate(c) for c in result.scalars().all()]

    return Envelope(data=CustomerListData(
        customers=customers,
        pagination=PaginationInfo.from_pagination(pagination),
    ))


@router.get("/{customer_id}", response_model=Envelope[CustomerResponse])
async def get_customer(
    customer_id: int,
    claim: CurrentClaim,
    db: AsyncSession = Depends(get_db),
):
    customer = await get_customer_or_404(db, customer_id)
    return Envelope(data=CustomerResponse.model_validate(customer))


@router.post(
    "",
    response_model=Envelope[CustomerResponse],
    status_code=status.HTTP_201_CREATED,
    responses={403: ERROR_RESPONSES[403]},
)
async def create_customer(
    customer_data: CustomerCreate,
    claim: ManagerClaim,
    db: AsyncSession = Depends(get_db),
):
    """Create a customer. Manager only."""
    customer = Customer(**customer_data.model_dump())
    db.add(customer)
    await db.commit()

    logger.info("User %s created customer %s", claim.user_id, customer.id)

    return Envelope(data=CustomerResponse.model_validate(customer))


@router.put(
    "/{customer_id}",
    response_model=Envelope[CustomerResponse],
    responses={403: ERROR_RESPONSES[403]},
)
async def update_customer(
    customer_id: int,
    customer_data: CustomerUpdate,
    claim: ManagerClaim,
    db: AsyncSession = Depends(get_db),
):
    """Update a customer. Manager only; omitted fields are left unchanged."""
    customer = await get_customer_or_404(db, customer_id)

    for field, value in customer_data.model_dump(exclude_unset=True).items():
        setattr(customer, field, value)

    await db.commit()
    await db.refresh(customer)

    logger.info("User %s updated customer %s", claim.user_id, customer.id)

    return Envelope(data=CustomerResponse.model_validate(customer))


@router.delete(
    "/{customer_id}",
    response_model=Envelope[MessageData],
    responses={403: ERROR_RESPONSES[403], 409: ERROR_RESPONSES[409]},
)
async def delete_customer(
    customer_id: int,
    claim: ManagerClaim,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a customer. Manager only.

    A customer that appears in any visit record cannot be deleted.
    """
    customer = await get_customer_or_404(db, customer_id)

    if await count_visits(db, customer_id) > 0:
        raise ApiError.conflict(CUSTOMER_IN_USE)

    await db.delete(customer)
    try:
        await db.commit()
    except IntegrityError:
        # A visit was recorded after the check; the RESTRICT foreign key wins
        await db.rollback()
        raise ApiError.conflict(CUSTOMER_IN_USE)

    logger.info("User %s deleted customer %s", claim.user_id, customer_id)

    return Envelope(data=MessageData(message="Customer deleted"))
