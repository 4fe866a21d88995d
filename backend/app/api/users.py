"""
Users Router
Endpoints for reading and managing user accounts.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic.alias_generators import to_snake

from app.api.dependencies import get_current_claims, get_user_service, require_admin, require_staff
from app.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.models.user import AuthProvider, UserRole
from app.schemas.common import ApiResponse, PaginatedResponse
from app.schemas.user import (
    AdminUserCreate,
    PasswordChange,
    RoleCount,
    RoleUpdate,
    StatusUpdate,
    UserDto,
    UserFilterParams,
    UserUpdate,
)
from app.services.user_service import UserService

router = APIRouter()


def _found(user: Optional[UserDto]) -> UserDto:
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("", response_model=ApiResponse[PaginatedResponse[UserDto]], dependencies=[Depends(require_staff)])
async def list_users(
    email: Optional[str] = None,
    phone_number: Optional[str] = Query(None, alias="phoneNumber"),
    role: Optional[UserRole] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    provider: Optional[AuthProvider] = None,
    is_email_verified: Optional[bool] = Query(None, alias="isEmailVerified"),
    is_phone_verified: Optional[bool] = Query(None, alias="isPhoneVerified"),
    two_factor_enabled: Optional[bool] = Query(None, alias="twoFactorEnabled"),
    first_name: Optional[str] = Query(None, alias="firstName"),
    last_name: Optional[str] = Query(None, alias="lastName"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    users: UserService = Depends(get_user_service),
):
    """
    List users with filters and pagination (admin and staff).
    """
    filters = UserFilterParams(
        email=email,
        phone_number=phone_number,
        role=role,
        is_active=is_active,
        provider=provider,
        is_email_verified=is_email_verified,
        is_phone_verified=is_phone_verified,
        two_factor_enabled=two_factor_enabled,
        first_name=first_name,
        last_name=last_name,
        search=search,
    )
    result = await users.find_all(filters, page, limit, to_snake(sort_by), sort_order)
    return ApiResponse[PaginatedResponse[UserDto]](success=True, data=result)


@router.get("/created", response_model=ApiResponse[PaginatedResponse[UserDto]], dependencies=[Depends(require_staff)])
async def list_users_created_between(
    start: datetime,
    end: datetime,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    users: UserService = Depends(get_user_service),
):
    """
    Users created within [start, end], newest first (admin and staff).
    """
    if start > end:
        raise BadRequestError("start must not be after end")
    result = await users.find_by_date_range(start, end, page, limit)
    return ApiResponse[PaginatedResponse[UserDto]](success=True, data=result)


@router.get("/stats/roles", response_model=ApiResponse[List[RoleCount]], dependencies=[Depends(require_admin)])
async def count_users_by_role(users: UserService = Depends(get_user_service)):
    """Number of users per role (admin only)."""
    return ApiResponse[List[RoleCount]](success=True, data=await users.count_by_role())


@router.post("", response_model=ApiResponse[UserDto], status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_user(
    user_data: AdminUserCreate,
    users: UserService = Depends(get_user_service),
):
    """
    Create a user with an explicit role (admin only).
    """
    user = await users.create(user_data, user_data.role)
    return ApiResponse[UserDto](success=True, message="User created successfully", data=user)


@router.get("/me", response_model=ApiResponse[UserDto])
async def get_me(
    claims: Dict[str, Any] = Depends(get_current_claims),
    users: UserService = Depends(get_user_service),
):
    """Profile of the authenticated user."""
    user = _found(await users.find_by_id(claims.get("id", "")))
    return ApiResponse[UserDto](success=True, data=user)


@router.put("/me/password", response_model=ApiResponse[UserDto])
async def change_password(
    body: PasswordChange,
    claims: Dict[str, Any] = Depends(get_current_claims),
    users: UserService = Depends(get_user_service),
):
    """Change the authenticated user's password; the current one must match."""
    user = await users.change_password(claims.get("id", ""), body.current_password, body.new_password)
    return ApiResponse[UserDto](success=True, message="Password updated", data=_found(user))


@router.get("/getbyemail", response_model=ApiResponse[UserDto])
async def get_user_by_email(
    email: Optional[str] = None,
    users: UserService = Depends(get_user_service),
):
    if not email:
        raise BadRequestError("Email is required")
    user = _found(await users.find_by_email(email))
    return ApiResponse[UserDto](success=True, data=user)


@router.get("/{user_id}", response_model=ApiResponse[UserDto])
async def get_user_by_id(user_id: str, users: UserService = Depends(get_user_service)):
    user = _found(await users.find_by_id(user_id))
    return ApiResponse[UserDto](success=True, data=user)


@router.put("/{user_id}", response_model=ApiResponse[UserDto])
async def update_user(
    user_id: str,
    update_data: UserUpdate,
    claims: Dict[str, Any] = Depends(get_current_claims),
    users: UserService = Depends(get_user_service),
):
    """
    Update profile fields. Users may edit themselves; admins may edit anyone.
    """
    if claims.get("id") != user_id:
        caller = await users.find_by_id(claims.get("id", ""))
        if not caller or caller.role != UserRole.ADMIN:
            raise ForbiddenError("Not enough permissions")

    user = _found(await users.update(user_id, update_data))
    return ApiResponse[UserDto](success=True, data=user)


async def _ensure_not_last_admin(users: UserService, message: str):
    counts = {row.role: row.count for row in await users.count_by_role()}
    if counts.get(UserRole.ADMIN, 0) <= 1:
        raise BadRequestError(message)


@router.delete("/{user_id}", response_model=ApiResponse[UserDto])
async def delete_user(
    user_id: str,
    admin: UserDto = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    """
    Delete a user (admin only). Cannot delete self.
    """
    if user_id == admin.id:
        raise BadRequestError("Cannot delete your own account")

    user = _found(await users.delete(user_id))
    return ApiResponse[UserDto](success=True, message="User deleted", data=user)


@router.patch("/{user_id}/role", response_model=ApiResponse[UserDto])
async def update_user_role(
    user_id: str,
    body: RoleUpdate,
    admin: UserDto = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    """
    Change a user's role (admin only). The last administrator cannot be downgraded.
    """
    target = _found(await users.find_by_id(user_id))
    if target.role == UserRole.ADMIN and body.role != UserRole.ADMIN:
        await _ensure_not_last_admin(users, "Cannot downgrade the last administrator")

    user = _found(await users.update_role(user_id, body.role))
    return ApiResponse[UserDto](success=True, data=user)


@router.patch("/{user_id}/status", response_model=ApiResponse[UserDto])
async def update_user_status(
    user_id: str,
    body: StatusUpdate,
    admin: UserDto = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    """
    Activate or deactivate a user (admin only). Admins cannot deactivate themselves.
    """
    if user_id == admin.id and not body.is_active:
        raise BadRequestError("Cannot deactivate your own account")

    user = _found(await users.set_active_status(user_id, body.is_active))
    return ApiResponse[UserDto](success=True, data=user)
