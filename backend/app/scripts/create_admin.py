"""
Create Admin User Script
Creates an administrator from ADMIN_EMAIL / ADMIN_PASSWORD if it does not already exist.
Usage: python -m app.scripts.create_admin
"""

import asyncio
import logging
import os
from typing import List, Optional

from app.config import get_settings
from app.database import Database
from app.models.user import AuthProvider, UserRole
from app.repositories.unit_of_work import UnitOfWork
from app.services.password_service import PasswordHasher
from app.utils.password_policy import validate_password

logger = logging.getLogger(__name__)


class AdminSetupError(Exception):
    def __init__(self, message: str, problems: Optional[List[str]] = None):
        super().__init__(message)
        self.problems = problems or []


async def create_admin(uow: UnitOfWork, hasher: PasswordHasher, email: str, password: str) -> bool:
    """
    Returns False when a user with that email already exists.
    Promotes nothing: an existing account keeps its role.
    """
    if not email or not password:
        raise AdminSetupError("ADMIN_EMAIL and ADMIN_PASSWORD are required to create the admin user.")

    errors = validate_password(password)
    if errors:
        raise AdminSetupError("ADMIN_PASSWORD does not meet password policy", errors)

    async with uow.transaction():
        if await uow.users.find_by_email(email):
            logger.info(f"User {email} already exists.")
            return False

        await uow.users.create({
            "email": email,
            "password_hash": await hasher.hash(password),
            "role": UserRole.ADMIN,
            "provider": AuthProvider.CREDENTIALS,
            "is_active": True,
        })

    logger.info(f"Successfully created admin user: {email}")
    return True


async def main():
    settings = get_settings()
    database = Database(settings.database_url)
    try:
        async with database.session_factory() as session:
            await create_admin(
                UnitOfWork(session),
                PasswordHasher(rounds=settings.password_hash_rounds),
                os.getenv("ADMIN_EMAIL", ""),
                os.getenv("ADMIN_PASSWORD", ""),
            )
    except AdminSetupError as e:
        logger.error(str(e))
        for problem in e.problems:
            logger.error(f"- {problem}")
        raise SystemExit(1)
    finally:
        await database.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
