"""
Sales Daily Report API

Main FastAPI application: sales staff record their daily customer visits,
managers review and comment on reports and administer users and customers.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import func, select

from daily_report.api.v1.api import api_router
from daily_report.auth.password import generate_temp_password
from daily_report.core.config import APP_VERSION, Settings, get_settings
from daily_report.core.dates import isoformat, utcnow
from daily_report.core.errors import register_exception_handlers
from daily_report.core.logger import configure_logging
from daily_report.core.middleware import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from daily_report.core.services import Services, get_services
from daily_report.models.user import Role, User

logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifespan (startup/shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    services: Services = app.state.services
    settings = services.settings

    logger.info("Starting %s %s", settings.app_name, APP_VERSION)

    if settings.uses_default_secret:
        logger.warning(
            "JWT_SECRET is not set; tokens are signed with the development default "
            "and can be forged. Set JWT_SECRET before deploying."
        )

    await services.database.create_all()
    logger.info("Database initialized")

    if settings.bootstrap_manager:
        await create_default_manager_if_needed(services)

    yield

    logger.info("Shutting down")
    await services.database.dispose()


async def create_default_manager_if_needed(services: Services) -> None:
    """Create a MANAGER account when the users table is empty."""
    email = services.settings.bootstrap_manager_email.strip().lower()

    async with services.database.session_maker() as session:
        result = await session.execute(select(func.count(User.id)))
        if result.scalar():
            return

        temp_password = generate_temp_password()

        manager = User(email=email, name="Manager", role=Role.MANAGER)
        manager.set_password(temp_password)

        session.add(manager)
        await session.commit()

    logger.warning(
        "Default manager account created: email=%s password=%s (change this password immediately)",
        email, temp_password,
    )


# =============================================================================
# FastAPI Application
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration to run with (defaults to the environment)
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=APP_VERSION,
        description="Sales daily report management API",
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url="/redoc" if settings.enable_docs else None,
        openapi_url="/openapi.json" if settings.enable_docs else None,
    )
    app.state.services = Services.from_settings(settings)

    # Middleware (order matters - last added = outermost)
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.enable_hsts)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_allow_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["health"])
    app.include_router(api_router, prefix="/api")

    return app


async def health_check(services: Services = Depends(get_services)):
    """Health check endpoint for load balancers and monitoring."""
    db_status = "healthy"
    try:
        await services.database.ping()
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", e)
        db_status = "unhealthy"

    return {
        "success": True,
        "data": {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "database": db_status,
            "version": APP_VERSION,
            "timestamp": isoformat(utcnow()),
        },
    }


app = create_app()


# =============================================================================
# Development Server
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "daily_report.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
