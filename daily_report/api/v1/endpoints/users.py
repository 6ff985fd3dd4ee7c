"""
User management endpoints.

Listing, creating, updating and deleting users requires the MANAGER role.
A user may read their own record and change their own password; managers
may do both for anyone.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from daily_report.auth.dependencies import ManagerClaim, require_self_or_manager
from daily_report.auth.jwt import Claim
from daily_report.core.database import commit_unique
from daily_report.core.errors import ApiError
from daily_report.core.pagination import calc_pagination
from daily_report.core.services import get_db
from daily_report.models.user import Role, User
from daily_report.schemas.auth import PasswordChangeRequest
from daily_report.schemas.common import ERROR_RESPONSES, Envelope, MessageData, PaginationInfo
from daily_report.schemas.user import (
    UserCreate,
    UserListData,
    UserResponse,
    UserUpdate,
    user_to_response,
)

logger = logging.getLogger(__name__)

router = APIRouter(responses={k: ERROR_RESPONSES[k] for k in (400, 401, 403, 404)})

EMAIL_TAKEN = "Email already registered"


async def get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise ApiError.not_found("User not found")
    return user


async def ensure_email_available(db: AsyncSession, email: str, exclude_user_id: Optional[int] = None) -> None:
    query = select(User.id).where(User.email == email)
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    result = await db.execute(query)
    if result.scalar_one_or_none() is not None:
        raise ApiError.duplicate(EMAIL_TAKEN)


# =============================================================================
# User CRUD
# =============================================================================

@router.get("", response_model=Envelope[UserListData])
async def list_users(
    claim: ManagerClaim,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    role: Optional[Role] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    List users, newest first.

    Requires: MANAGER role
    """
    query = select(User)
    count_query = select(func.count(User.id))

    if role:
        query = query.where(User.role == role)
        count_query = count_query.where(User.role == role)

    result = await db.execute(count_query)
    total = result.scalar() or 0
    pagination = calc_pagination(total, page, limit)

    query = (
        query
        .order_by(User.created_at.desc(), User.id.desc())
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    result = await db.execute(query)
    users = [user_to_response(u) for u in result.scalars().all()]

    return Envelope(data=UserListData(
        users=users,
        pagination=PaginationInfo.from_pagination(pagination),
    ))


@router.post("", response_model=Envelope[UserResponse], status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    claim: ManagerClaim,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a new user.

    Requires: MANAGER role
    """
    await ensure_email_available(db, user_data.email)

    user = User(
        email=user_data.email,
        name=user_data.name,
        department=user_data.department,
        role=user_data.role,
    )
    user.set_password(user_data.password)

    db.add(user)
    await commit_unique(db, EMAIL_TAKEN)

    logger.info("User %s created user %s (%s)", claim.user_id, user.id, user.role.value)

    return Envelope(data=user_to_response(user))


@router.get("/{user_id}", response_model=Envelope[UserResponse])
async def get_user(
    user_id: int,
    claim: Claim = Depends(require_self_or_manager()),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a user by ID.

    Requires: the user themself or MANAGER role
    """
    user = await get_user_or_404(db, user_id)
    return Envelope(data=user_to_response(user))


@router.put("/{user_id}", response_model=Envelope[UserResponse])
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    claim: ManagerClaim,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a user. Omitted fields are left unchanged.

    Requires: MANAGER role
    """
    user = await get_user_or_404(db, user_id)

    update_data = user_data.model_dump(exclude_unset=True)

    if "email" in update_data and update_data["email"] != user.email:
        await ensure_email_available(db, update_data["email"], exclude_user_id=user.id)

    for field, value in update_data.items():
        setattr(user, field, value)

    await commit_unique(db, EMAIL_TAKEN)
    await db.refresh(user)

    logger.info("User %s updated user %s", claim.user_id, user.id)

    return Envelope(data=user_to_response(user))


@router.delete("/{user_id}", response_model=Envelope[MessageData])
async def delete_user(
    user_id: int,
    claim: ManagerClaim,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a user together with their reports and comments.

    Requires: MANAGER role. Managers cannot delete their own account.
    """
    if user_id == claim.user_id:
        raise ApiError.invalid_request("You cannot delete your own account")

    user = await get_user_or_404(db, user_id)

    await db.delete(user)
    await db.commit()

    logger.info("User %s deleted user %s", claim.user_id, user_id)

    return Envelope(data=MessageData(message="User deleted"))


@router.put("/{user_id}/password", response_model=Envelope[MessageData])
async def change_password(
    user_id: int,
    password_data: PasswordChangeRequest,
    claim: Claim = Depends(require_self_or_manager()),
    db: AsyncSession = Depends(get_db),
):
    """
    Change a user's password.

    Requires: the user themself or MANAGER role, and the current password.
    """
    user = await get_user_or_404(db, user_id)

    if not user.verify_password(password_data.current_password):
        logger.warning("Password change for user %s rejected: wrong current password", user.id)
        raise ApiError.unauthorized("Current password is incorrect")

    user.set_password(password_data.new_password)
    await db.commit()

    logger.info("User %s changed password of user %s", claim.user_id, user.id)

    return Envelope(data=MessageData(message="Password updated"))
