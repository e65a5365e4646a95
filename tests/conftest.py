"""
Restaurant CRM Backend - Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The environment is set BEFORE restaurant_crm is imported, so the
       settings singleton and the engine point at a throwaway SQLite file
       and bcrypt uses its cheapest cost.

Fixtures:
    Session-scoped:
    └── app: the FastAPI app under the standard access policy

    Function-scoped:
    ├── database: creates the schema before the test, drops it after
    ├── client: authenticated AsyncClient (admin / admin)
    ├── anonymous_client: AsyncClient without credentials
    ├── client_for / admin_auth: clients for apps built inside a test
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    └── customer_payload: a valid create/update body
"""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="restaurant_crm_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["ACCESS_POLICY"] = "standard"
os.environ["AUTH_USERNAME"] = "admin"
os.environ["AUTH_PASSWORD"] = "admin"
os.environ["AUTH_BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from restaurant_crm.database import Base, engine  # noqa: E402
from restaurant_crm.main import create_app  # noqa: E402
from restaurant_crm.models.customer import Customer  # noqa: E402,F401

ADMIN_AUTH = ("admin", "admin")


def make_client(app: FastAPI, auth=None) -> AsyncClient:
    """
    AsyncClient wired straight to the ASGI app.

    raise_app_exceptions=False: for the 500 catch-all, Starlette sends the
    response and then re-raises; the client should see the response.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    return AsyncClient(transport=transport, base_url="http://test", auth=auth)


@pytest.fixture
def admin_auth():
    return ADMIN_AUTH


@pytest.fixture
def client_for():
    """For apps built inside a test: `async with client_for(app, auth) as c:`"""
    return make_client


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return create_app()


@pytest_asyncio.fixture
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(app, database):
    async with make_client(app, auth=ADMIN_AUTH) as c:
        yield c


@pytest_asyncio.fixture
async def anonymous_client(app, database):
    async with make_client(app) as c:
        yield c


@pytest.fixture
def mock_db_session():
    """
    AsyncMock simulating AsyncSession.

    Usage:
        mock_db_session.get.return_value = None
        with pytest.raises(ResourceNotFoundError):
            await customer_service.get_customer(mock_db_session, 1)
    """
    session = AsyncMock()
    session.get = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def customer_payload():
    return {
        "name": "Anton Ego",
        "phone": "+33 1 23 45 67 89",
        "email": "anton.ego@example.com",
        "allergies": "Shellfish",
        "visitCount": 0,
        "notes": "Prefers a quiet table. Orders the ratatouille.",
        "michelinStatus": "SUSPICIOUS",
    }
