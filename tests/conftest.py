"""
Shared fixtures: an app per test on its own SQLite file, an HTTP client
bound to it, and factories for users, customers and auth headers.
"""

import itertools
from datetime import date
from typing import Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from daily_report.auth.jwt import Claim
from daily_report.auth.password import hash_password
from daily_report.core.config import Settings
from daily_report.main import create_app
from daily_report.models import Customer, Role, User

TEST_PASSWORD = "password123"
TEST_SECRET = "test-secret-not-for-production"


@pytest.fixture(scope="session")
def password_hash() -> str:
    # Argon2 is deliberately slow; hash once and share it between users
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret=TEST_SECRET,
        bootstrap_manager=False,
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def app(settings):
    app = create_app(settings)
    database = app.state.services.database
    await database.create_all()
    yield app
    await database.dispose()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def session_maker(app):
    return app.state.services.database.session_maker


@pytest.fixture
def create_user(session_maker, password_hash):
    counter = itertools.count(1)

    async def _create(
        role: Role = Role.SALES,
        name: Optional[str] = None,
        email: Optional[str] = None,
        department: Optional[str] = "Sales 1",
    ) -> User:
        n = next(counter)
        user = User(
            email=email or f"user{n}@example.com",
            name=name or f"User {n}",
            department=department,
            role=role,
            password_hash=password_hash,
        )
        async with session_maker() as session:
            session.add(user)
            await session.commit()
        return user

    return _create


@pytest.fixture
def create_customer(session_maker):
    async def _create(name: str = "Acme Corp", address: Optional[str] = "1-2-3 Chiyoda, Tokyo") -> Customer:
        customer = Customer(name=name, address=address, phone="03-1234-5678", contact_person="Tanaka")
        async with session_maker() as session:
            session.add(customer)
            await session.commit()
        return customer

    return _create


@pytest_asyncio.fixture
async def manager(create_user) -> User:
    return await create_user(role=Role.MANAGER, name="Manager", email="manager@example.com", department=None)


@pytest_asyncio.fixture
async def sales(create_user) -> User:
    return await create_user(role=Role.SALES, name="Sato", email="sato@example.com")


@pytest_asyncio.fixture
async def other_sales(create_user) -> User:
    return await create_user(role=Role.SALES, name="Suzuki", email="suzuki@example.com")


@pytest_asyncio.fixture
async def customer(create_customer) -> Customer:
    return await create_customer()


@pytest.fixture
def auth_headers(app):
    """Build an Authorization header for a user, signed by the app's token service."""

    def _headers(user: User) -> Dict[str, str]:
        token = app.state.services.tokens.issue(
            Claim(user_id=user.id, email=user.email, role=user.role)
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


def report_payload(customer_id: int, report_date: Optional[date] = None, **overrides) -> dict:
    payload = {
        "report_date": (report_date or date.today()).isoformat(),
        "visits": [{"customer_id": customer_id, "visit_time": "10:00", "content": "Product demo"}],
        "problem": "Pricing concerns",
        "plan": "Send a revised quote",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_report(client, auth_headers):
    """Create a report through the API and return its data."""

    async def _create(user: User, customer_id: int, report_date: Optional[date] = None, **overrides) -> dict:
        response = await client.post(
            "/api/reports",
            json=report_payload(customer_id, report_date, **overrides),
            headers=auth_headers(user),
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
