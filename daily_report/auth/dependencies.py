"""
FastAPI dependencies for authentication and authorization.

Provides:
- get_current_claim: verify the session token and yield the caller's Claim
- get_current_user: the caller's User row (401 once the account is gone)
- require_role / require_manager: role guards
- require_self_or_manager: guard for routes addressing a specific user
- ensure_owner_or_manager: inline ownership check for authored resources

Authentication state machine per request:
    no token            -> 401 UNAUTHORIZED
    token fails verify  -> 401 UNAUTHORIZED
    token verifies      -> Claim handed to the next dependency / handler
"""

import logging
from typing import Annotated, Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.ext.asyncio import AsyncSession

from daily_report.auth.jwt import Claim
from daily_report.core.errors import ApiError, field_error
from daily_report.core.services import Services, get_db, get_services
from daily_report.models.user import Role, User

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; a missing or non-Bearer header is not an error here
security = HTTPBearer(auto_error=False)

# Routes reachable without a session token
PUBLIC_PATHS = frozenset({"/api/auth/login", "/api/auth/logout", "/health"})


def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    cookie_name: str,
) -> Optional[str]:
    """
    Find the session token.

    Looks in:
    1. Authorization: Bearer <token> header
    2. Cookie named `cookie_name`
    """
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(cookie_name) or None


def authenticate(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    services: Services,
) -> Claim:
    """
    Resolve the caller's identity from the request.

    Raises:
        ApiError UNAUTHORIZED: no token, or the token is invalid/expired
    """
    token = extract_token(request, credentials, services.settings.auth_cookie_name)

    if not token:
        raise ApiError.unauthorized("Authentication required")

    claim = services.tokens.verify(token)
    if claim is None:
        raise ApiError.unauthorized("Token is invalid or has expired")

    return claim


def authentication_error(request: Request) -> Optional[ApiError]:
    """
    The 401 a guarded route would answer with, or None.

    For errors raised before dependencies run (an unparseable JSON body),
    so anonymous callers still see UNAUTHORIZED first.
    """
    if request.url.path in PUBLIC_PATHS:
        return None

    credentials = None
    scheme, param = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() == "bearer" and param:
        credentials = HTTPAuthorizationCredentials(scheme=scheme, credentials=param)

    try:
        authenticate(request, credentials, request.app.state.services)
    except ApiError as exc:
        return exc
    return None


async def get_current_claim(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    services: Services = Depends(get_services),
) -> Claim:
    """
    Authenticate the request and return the caller's identity.

    Raises:
        ApiError UNAUTHORIZED: no token, or the token is invalid/expired
    """
    claim = authenticate(request, credentials, services)
    request.state.user_id = claim.user_id
    return claim


CurrentClaim = Annotated[Claim, Depends(get_current_claim)]


async def get_current_user(
    claim: Claim = Depends(get_current_claim),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Load the caller's account for handlers that write rows owned by it.

    Raises:
        ApiError UNAUTHORIZED: the account was deleted after the token was issued
    """
    user = await db.get(User, claim.user_id)
    if user is None:
        logger.warning("Token for deleted user %s rejected", claim.user_id)
        raise ApiError.unauthorized("User no longer exists")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


# =============================================================================
# Guards
# =============================================================================

def authorize_role(claim: Optional[Claim], allowed_roles) -> Claim:
    """Pass if the claim's role is in `allowed_roles`."""
    if claim is None:
        raise ApiError.unauthorized()

    if claim.role not in allowed_roles:
        logger.warning(
            "Role %s rejected (allowed: %s) for user %s",
            claim.role.value, ",".join(r.value for r in allowed_roles), claim.user_id,
        )
        raise ApiError.forbidden()

    return claim


def authorize_self_or_manager(claim: Optional[Claim], target_user_id: int) -> Claim:
    """Pass if the caller is the target user or a manager."""
    if claim is None:
        raise ApiError.unauthorized()

    if claim.user_id == target_user_id or claim.is_manager:
        return claim

    logger.warning("User %s denied access to user %s", claim.user_id, target_user_id)
    raise ApiError.forbidden()


def ensure_owner_or_manager(claim: Optional[Claim], owner_id: int, resource: str = "resource") -> Claim:
    """
    Ownership check for authored resources (reports, comments).

    Mutation is allowed when the caller owns the resource or is a manager.
    """
    if claim is None:
        raise ApiError.unauthorized()

    if claim.user_id == owner_id or claim.is_manager:
        return claim

    logger.warning("User %s denied mutation of %s owned by %s", claim.user_id, resource, owner_id)
    raise ApiError.forbidden(f"You do not have permission to modify this {resource}")


def require_role(*allowed_roles: Role):
    """
    Dependency to require specific role(s).

    Usage:
        @router.post("")
        async def create_customer(claim: Claim = Depends(require_role(Role.MANAGER))):
            ...
    """
    async def role_checker(claim: Claim = Depends(get_current_claim)) -> Claim:
        return authorize_role(claim, allowed_roles)

    return role_checker


require_manager = require_role(Role.MANAGER)


def path_int(name: str) -> Callable[[Request], int]:
    """Build an extractor reading an integer path parameter."""

    def extract(request: Request) -> int:
        raw = request.path_params.get(name)
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise ApiError.validation([field_error(name, "Must be an integer")])

    return extract


def require_self_or_manager(get_target_user_id: Callable[[Request], int] = path_int("user_id")):
    """
    Dependency for routes about one user: only that user or a manager passes.

    Args:
        get_target_user_id: Reads the target user id from the request
    """
    async def self_or_manager_checker(
        request: Request,
        claim: Claim = Depends(get_current_claim),
    ) -> Claim:
        return authorize_self_or_manager(claim, get_target_user_id(request))

    return self_or_manager_checker


ManagerClaim = Annotated[Claim, Depends(require_manager)]
