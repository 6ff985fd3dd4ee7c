"""
Authentication endpoints.

Provides:
- Login (email/password → session token, also set as the auth cookie)
- Logout (clears the auth cookie)
- Current identity
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from daily_report.auth.dependencies import CurrentClaim
from daily_report.auth.jwt import Claim
from daily_report.auth.password import burn_verification
from daily_report.core.errors import ApiError
from daily_report.core.services import Services, get_db, get_services
from daily_report.models.user import User
from daily_report.schemas.auth import AuthUser, LoginRequest, LoginResponse
from daily_report.schemas.common import ERROR_RESPONSES, Envelope, MessageData

logger = logging.getLogger(__name__)

router = APIRouter(responses={401: ERROR_RESPONSES[401]})

# Same message for unknown email and wrong password
INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/login", response_model=Envelope[LoginResponse])
async def login(
    login_data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
):
    """
    Authenticate user and return a session token.

    The token is returned in the body and set as an HttpOnly cookie.
    """
    result = await db.execute(select(User).where(User.email == login_data.email))
    user = result.scalar_one_or_none()

    if user is None:
        burn_verification(login_data.password)
        logger.warning("Login failed")
        raise ApiError.unauthorized(INVALID_CREDENTIALS)

    old_hash = user.password_hash
    if not user.verify_password(login_data.password):
        logger.warning("Login failed")
        raise ApiError.unauthorized(INVALID_CREDENTIALS)

    # verify_password upgrades outdated hashes in place
    if user.password_hash != old_hash:
        await db.commit()

    token = services.tokens.issue(Claim(user_id=user.id, email=user.email, role=user.role))
    settings = services.settings

    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
        max_age=settings.auth_cookie_max_age,
        path="/",
    )

    logger.info("User %s logged in", user.id)

    return Envelope(data=LoginResponse(
        token=token,
        expires_in=services.tokens.expires_in_seconds,
        user=AuthUser.model_validate(user),
    ))


@router.post("/logout", response_model=Envelope[MessageData])
async def logout(
    response: Response,
    services: Services = Depends(get_services),
):
    """Clear the auth cookie. Tokens are stateless, so nothing is revoked server-side."""
    settings = services.settings
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
    )
    return Envelope(data=MessageData(message="Logged out"))


@router.get("/me", response_model=Envelope[AuthUser], responses={404: ERROR_RESPONSES[404]})
async def get_me(
    claim: CurrentClaim,
    db: AsyncSession = Depends(get_db),
):
    """Get the authenticated user's profile."""
    user = await db.get(User, claim.user_id)
    if user is None:
        raise ApiError.not_found("User not found")
    return Envelope(data=AuthUser.model_validate(user))
