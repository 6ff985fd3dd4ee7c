"""
Application service container.

Everything a handler needs beyond the request itself (settings, database,
token service) hangs off one Services value built by the app factory and
stored on app.state. Handlers reach it through the dependencies below
instead of importing module-level singletons.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from daily_report.auth.jwt import TokenService
from daily_report.core.config import Settings
from daily_report.core.database import Database


@dataclass(frozen=True)
class Services:
    settings: Settings
    database: Database
    tokens: TokenService

    @classmethod
    def from_settings(cls, settings: Settings) -> "Services":
        return cls(
            settings=settings,
            database=Database(settings.database_url, echo=settings.sql_debug),
            tokens=TokenService(
                secret=settings.jwt_secret,
                algorithm=settings.jwt_algorithm,
                expires_in=timedelta(hours=settings.jwt_expire_hours),
            ),
        )


def get_services(request: Request) -> Services:
    return request.app.state.services


async def get_db(services: Services = Depends(get_services)) -> AsyncIterator[AsyncSession]:
    """Dependency for getting database sessions."""
    async for session in services.database.session():
        yield session
