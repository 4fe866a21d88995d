"""
Authentication Router
Endpoints for login, registration, token refresh and logout.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.api.dependencies import get_current_claims, get_token_service, get_user_service
from app.exceptions import UnauthorizedError
from app.models.user import UserRole
from app.schemas.common import ApiResponse
from app.schemas.user import RefreshTokenRequest, UserCreate, UserDto, UserLogin
from app.services.token_service import TokenService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.post("/login", response_model=ApiResponse[str])
@limiter.limit("5/15minutes")
async def login(
    request: Request,
    login_data: UserLogin,
    users: UserService = Depends(get_user_service),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Authenticate with email and password and return a signed bearer token.
    """
    user = await users.authenticate(login_data.email, login_data.password)
    if not user:
        logger.info(f"Failed login for {login_data.email}")
        raise UnauthorizedError("Invalid username or password")

    if not user.is_active:
        raise UnauthorizedError("User account is deactivated")

    token = tokens.issue(TokenService.claims_for(user))
    logger.info(f"User {user.id} logged in")
    return ApiResponse[str](success=True, message="Login successful", data=token)


@router.post("/register", response_model=ApiResponse[UserDto], status_code=status.HTTP_201_CREATED)
@limiter.limit("10/hour")
async def register(
    request: Request,
    user_data: UserCreate,
    users: UserService = Depends(get_user_service),
):
    """
    Register a new account. Role is always `user`, provider `credentials`.
    """
    user = await users.create(user_data, UserRole.USER)
    return ApiResponse[UserDto](success=True, message="User created successfully", data=user)


@router.post("/refresh-token", response_model=ApiResponse[str], dependencies=[Depends(get_current_claims)])
async def refresh_token(
    body: RefreshTokenRequest,
    tokens: TokenService = Depends(get_token_service),
):
    """
    Exchange a still-valid token for a new one with a fresh lifetime.
    The previous token is not revoked.
    """
    new_token = tokens.refresh(body.token)
    return ApiResponse[str](success=True, message="Token refreshed successfully", data=new_token)


@router.post("/logout", response_model=ApiResponse[None])
async def logout(claims: Dict[str, Any] = Depends(get_current_claims)):
    """
    Stateless: tokens stay valid until they expire; clients discard theirs.
    """
    logger.info(f"User {claims.get('id')} logged out")
    return ApiResponse[None](success=True, message="Logout successful")
