"""Shared pytest fixtures: settings, an in-memory database, services and an HTTP client."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import Database
from app.main import create_app
from app.models.user import UserRole
from app.repositories.unit_of_work import UnitOfWork
from app.services.password_service import PasswordHasher
from app.services.token_service import TokenService
from app.services.user_service import UserService

TEST_SECRET = "unit-test-signing-key-0123456789abcdef"
TEST_AUDIENCE = "api://userhub-tests"
TEST_ISSUER = "https://issuer.test"
TEST_CLIENT_ID = "test-client"
STRONG_PASSWORD = "Abcdef1!"


def make_settings(**overrides: Any) -> Settings:
    values = {
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "jwt_secret": TEST_SECRET,
        "jwt_audience": TEST_AUDIENCE,
        "jwt_issuer": TEST_ISSUER,
        "client_id": TEST_CLIENT_ID,
        "site_mode": "production",
        "environment": "test",
        "debug": True,
        "password_hash_rounds": 4,
        "rate_limit_enabled": False,
        "log_dir": "",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret=TEST_SECRET, audience=TEST_AUDIENCE, issuer=TEST_ISSUER)


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory database with all tables."""
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_factory() as s:
        yield s


@pytest.fixture
def uow(session: AsyncSession) -> UnitOfWork:
    return UnitOfWork(session)


@pytest.fixture
def user_service(uow: UnitOfWork, hasher: PasswordHasher) -> UserService:
    return UserService(uow, hasher)


@pytest.fixture
def app_factory() -> Callable[..., Any]:
    def _make_app(**overrides: Any):
        return create_app(make_settings(**overrides))

    return _make_app


@pytest.fixture
def client(app_factory) -> Generator[TestClient, None, None]:
    """HTTP client with the client id header set and the lifespan running."""
    app = app_factory()
    with TestClient(app, headers={"clientid": TEST_CLIENT_ID}) as c:
        yield c


def register(client: TestClient, email: str, password: str = STRONG_PASSWORD, **fields: Any):
    return client.post("/api/auth/register", json={"email": email, "password": password, **fields})


def login(client: TestClient, email: str, password: str = STRONG_PASSWORD) -> str:
    response = client.post("/api/auth/login", json={"email": email, "password": password, "rememberMe": False})
    assert response.status_code == 200, response.text
    return response.json()["data"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def set_role(client: TestClient, user_id: str, role: UserRole) -> None:
    """Change a role directly in the app's database, inside the app's event loop."""

    async def _update():
        async with client.app.state.database.session_factory() as s:
            await UnitOfWork(s).users.update_role(user_id, role)
            await s.commit()

    client.portal.call(_update)


@pytest.fixture
def admin_token(client: TestClient) -> str:
    user_id = register(client, "root@example.com").json()["data"]["id"]
    set_role(client, user_id, UserRole.ADMIN)
    return login(client, "root@example.com")
