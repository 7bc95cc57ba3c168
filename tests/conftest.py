"""
Test fixtures for the Book API test suite.

This module provides shared fixtures used across all test files:

  - settings: Test configuration (in-memory SQLite, fast password hashing)
  - app: A fresh application per test, tables already created
  - db_session: Async session bound to the test application's database
  - hasher / token_service: The services the application was built with
  - client: Async HTTP test client (unauthenticated)
  - user_token: Token of a registered regular user ("alice")
  - admin_token: Token of an admin ("admin"), registered then promoted

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database.
  - create_app() receives the test Settings object directly, so nothing
    needs to be overridden: the application reads its engine, hasher and
    token service from app.state exactly as in production.
  - The admin_token fixture signs up normally and then updates the role in
    the database, mirroring how admins are provisioned by an operator.
    It logs in again afterwards because the role is baked into the token.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import update

from book_api.config import Settings
from book_api.database import Base
from book_api.main import create_app
from book_api.models.user import Role, User


API = "/api"

USER_CREDENTIALS = {
    "username": "alice",
    "email": "a@x.com",
    "password": "Abc123!",
    "fullName": "Alice",
}

ADMIN_CREDENTIALS = {
    "username": "admin",
    "email": "admin@example.com",
    "password": "AdminPass123!",
    "fullName": "Admin User",
}


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        SECRET_KEY="test-secret-key",
        DATABASE_URL="sqlite+aiosqlite://",
        PASSWORD_HASH_TIME_COST=1,
        API_PREFIX=API,
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings):
    """Build the application and create all tables in its in-memory database."""
    application = create_app(settings)
    engine = application.state.engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield application
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(app):
    async with app.state.sessionmaker() as session:
        yield session


@pytest.fixture
def hasher(app):
    return app.state.password_hasher


@pytest.fixture
def token_service(app):
    return app.state.token_service


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def set_role(app, username: str, role: Role) -> None:
    """Change a user's role directly in the database."""
    async with app.state.sessionmaker() as session:
        await session.execute(
            update(User).where(User.username == username).values(role=role)
        )
        await session.commit()


@pytest_asyncio.fixture
async def user_token(client):
    response = await client.post(f"{API}/register", json=USER_CREDENTIALS)
    assert response.status_code == 201, f"Register failed: {response.text}"
    return response.json()["token"]


@pytest_asyncio.fixture
async def admin_token(app, client):
    response = await client.post(f"{API}/register", json=ADMIN_CREDENTIALS)
    assert response.status_code == 201, f"Register failed: {response.text}"

    await set_role(app, ADMIN_CREDENTIALS["username"], Role.ADMIN)

    login_response = await client.post(
        f"{API}/login",
        json={
            "username": ADMIN_CREDENTIALS["username"],
            "password": ADMIN_CREDENTIALS["password"],
        },
    )
    assert login_response.status_code == 200
    return login_response.json()["token"]
