import pytest
from sqlalchemy import text

from app.database import Database
from app.models.user import UserRole
from app.repositories.unit_of_work import UnitOfWork
from app.scripts.create_admin import AdminSetupError, create_admin
from app.scripts.initialize_db import initialize_db
from conftest import STRONG_PASSWORD


@pytest.mark.asyncio
async def test_create_admin(database, hasher):
    async with database.session_factory() as session:
        created = await create_admin(UnitOfWork(session), hasher, "admin@example.com", STRONG_PASSWORD)

    async with database.session_factory() as session:
        admin = await UnitOfWork(session).users.find_by_email("admin@example.com")

    assert created is True
    assert admin.role == UserRole.ADMIN
    assert await hasher.verify(STRONG_PASSWORD, admin.password_hash)


@pytest.mark.asyncio
async def test_create_admin_is_idempotent(database, hasher):
    async with database.session_factory() as session:
        await create_admin(UnitOfWork(session), hasher, "admin@example.com", STRONG_PASSWORD)
    async with database.session_factory() as session:
        created = await create_admin(UnitOfWork(session), hasher, "ADMIN@example.com", STRONG_PASSWORD)

    assert created is False


@pytest.mark.asyncio
async def test_create_admin_requires_credentials(uow, hasher):
    with pytest.raises(AdminSetupError):
        await create_admin(uow, hasher, "", STRONG_PASSWORD)


@pytest.mark.asyncio
async def test_create_admin_enforces_password_policy(uow, hasher):
    with pytest.raises(AdminSetupError) as exc_info:
        await create_admin(uow, hasher, "admin@example.com", "weak")

    assert "Password must be at least 8 characters long" in exc_info.value.problems


@pytest.fixture
def file_database_url(tmp_path):
    """File-backed SQLite, so alembic's own engine sees the same database."""
    return f"sqlite+aiosqlite:///{tmp_path / 'userhub.db'}"


@pytest.mark.asyncio
async def test_initialize_db_creates_and_stamps(file_database_url):
    database = Database(file_database_url)
    try:
        assert await initialize_db(database) is True
        assert await initialize_db(database) is False

        async with database.engine.connect() as conn:
            version = (await conn.execute(text("SELECT version_num FROM alembic_version"))).scalar()
            users = (await conn.execute(text("SELECT COUNT(*) FROM users"))).scalar()
    finally:
        await database.close()

    assert version == "3f9c2a7d4b10"
    assert users == 0
