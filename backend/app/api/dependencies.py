"""
API Dependencies
Reusable FastAPI dependencies: service wiring, authentication and authorization.
"""

import logging
from typing import Any, Dict

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from app.models.user import UserRole
from app.repositories.unit_of_work import UnitOfWork
from app.schemas.user import UserDto
from app.services.token_service import TokenService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_uow(db: AsyncSession = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db)


async def get_user_service(request: Request, uow: UnitOfWork = Depends(get_uow)) -> UserService:
    return UserService(uow, request.app.state.password_hasher)


def _bearer_token(request: Request) -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Missing or invalid token")
    return token.strip()


async def get_current_claims(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """
    Authentication: verify the bearer token and expose its claims.
    The claims are also attached to request.state.user for downstream consumers.
    """
    token = _bearer_token(request)
    claims = tokens.verify(token)

    request.state.user = claims
    request.state.token = token
    return claims


def require_roles(*roles: UserRole):
    """
    Authorization: the caller's current role (re-read from the database,
    not from the token) must be one of `roles`.
    """
    allowed = set(roles)

    async def dependency(
        claims: Dict[str, Any] = Depends(get_current_claims),
        users: UserService = Depends(get_user_service),
    ) -> UserDto:
        user = await users.find_by_id(claims.get("id", ""))
        if not user:
            raise NotFoundError("User not found")
        if user.role not in allowed:
            logger.warning(f"User {user.id} with role {user.role.value} denied; requires {sorted(r.value for r in allowed)}")
            raise ForbiddenError("Not enough permissions")
        return user

    return dependency


require_admin = require_roles(UserRole.ADMIN)
require_staff = require_roles(UserRole.ADMIN, UserRole.STAFF)
