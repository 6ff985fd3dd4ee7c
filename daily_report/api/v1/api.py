"""
API Router configuration.

Aggregates all v1 API endpoints with proper tagging and prefixes.
"""

from fastapi import APIRouter

from daily_report.api.v1.endpoints import (
    auth,
    comments,
    customers,
    reports,
    users,
)

api_router = APIRouter()

# Authentication (no auth required for login/logout)
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

# Daily reports (owner or manager for mutation)
api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["reports"]
)

# Comments on reports
api_router.include_router(
    comments.router,
    prefix="/reports",
    tags=["comments"]
)

# Customers (manager for mutation)
api_router.include_router(
    customers.router,
    prefix="/customers",
    tags=["customers"]
)

# User management (manager, or self for read/password)
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"]
)
