"""
Password Service
Salted bcrypt hashing and verification.
"""

from typing import Optional

from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

DEFAULT_ROUNDS = 10


class PasswordHasher:
    """bcrypt work happens in the threadpool so the event loop keeps serving."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    async def hash(self, password: str) -> str:
        """Generate bcrypt hash of password."""
        return await run_in_threadpool(self.context.hash, password)

    async def verify(self, password: str, hashed_password: Optional[str]) -> bool:
        """Check if plain password matches hashed version. Never raises on mismatch."""
        if not password or not hashed_password:
            return False
        try:
            return await run_in_threadpool(self.context.verify, password, hashed_password)
        except (ValueError, TypeError):
            # Unrecognised or corrupt hash
            return False
