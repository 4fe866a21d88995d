"""
Unit of Work
Groups the repositories that share one AsyncSession and owns its transaction.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.user_repository import UserRepository


class UnitOfWork:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["UnitOfWork"]:
        """
        Run several repository operations as one atomic unit.
        Nested inside an open transaction this becomes a savepoint.
        """
        if self.session.in_transaction():
            async with self.session.begin_nested():
                yield self
        else:
            async with self.session.begin():
                yield self
