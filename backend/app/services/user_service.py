"""
User Service
Business rules on top of the user repository; returns DTOs, never ORM rows.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from app.exceptions import BadRequestError, ConflictError
from app.models.user import AuthProvider, User, UserRole
from app.repositories.unit_of_work import UnitOfWork
from app.schemas.common import PaginatedResponse
from app.schemas.user import RoleCount, UserCreate, UserDto, UserFilterParams, UserUpdate
from app.services.password_service import PasswordHasher

logger = logging.getLogger(__name__)


def to_dto(user: User, include_password: bool = False) -> UserDto:
    """
    Convert a persisted user to its public shape.
    The password hash and two-factor secret are stripped unless include_password is set.
    """
    dto = UserDto.model_validate(user)
    if include_password:
        return dto
    return dto.model_copy(update={"password_hash": None, "two_factor_secret": None})


class UserService:
    def __init__(self, uow: UnitOfWork, hasher: PasswordHasher):
        self.uow = uow
        self.hasher = hasher

    async def find_by_id(self, user_id: str) -> Optional[UserDto]:
        user = await self.uow.users.find_by_id(user_id)
        return to_dto(user) if user else None

    async def find_by_email(self, email: str, include_password: bool = False) -> Optional[UserDto]:
        user = await self.uow.users.find_by_email(email)
        return to_dto(user, include_password) if user else None

    async def find_by_phone_number(self, phone_number: str) -> Optional[UserDto]:
        user = await self.uow.users.find_by_phone_number(phone_number)
        return to_dto(user) if user else None

    async def find_by_provider_id(self, provider_id: str, provider: AuthProvider) -> Optional[UserDto]:
        user = await self.uow.users.find_by_provider_id(provider_id, provider)
        return to_dto(user) if user else None

    async def find_all(
        self,
        filters: Optional[UserFilterParams] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> PaginatedResponse[UserDto]:
        result = await self.uow.users.find_all(filters, page, limit, sort_by, sort_order)
        return self._to_page(result)

    async def find_by_date_range(
        self, start_date: datetime, end_date: datetime, page: int = 1, limit: int = 10
    ) -> PaginatedResponse[UserDto]:
        result = await self.uow.users.find_by_date_range(start_date, end_date, page, limit)
        return self._to_page(result)

    async def authenticate(self, email: str, password: str) -> Optional[UserDto]:
        """Return the user when the credentials match, otherwise None."""
        user = await self.find_by_email(email, include_password=True)
        if not user or not user.password_hash:
            return None
        if not await self.hasher.verify(password, user.password_hash):
            return None
        return user.model_copy(update={"password_hash": None, "two_factor_secret": None})

    async def create(self, data: UserCreate, role: UserRole = UserRole.USER) -> UserDto:
        """
        Register a credentials user.
        Raises ConflictError when the email (or phone number) is already taken.
        """
        if await self.uow.users.find_by_email(data.email):
            raise ConflictError("User already exists")
        if data.phone_number and await self.uow.users.find_by_phone_number(data.phone_number):
            raise ConflictError("Phone number already in use")

        values = {
            "email": data.email,
            "password_hash": await self.hasher.hash(data.password),
            "first_name": data.first_name,
            "last_name": data.last_name,
            "phone_number": data.phone_number,
            "phone_country_code": data.phone_country_code,
            "is_email_verified": False,
            "is_phone_verified": False,
            "two_factor_enabled": False,
            "role": role,
            "provider": AuthProvider.CREDENTIALS,
            "is_active": True,
        }
        try:
            user = await self.uow.users.create(values)
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            await self.uow.rollback()
            raise ConflictError("User already exists") from e

        logger.info(f"Created user {user.id} with role {role.value}")
        return to_dto(user)

    async def update(self, user_id: str, data: UserUpdate) -> Optional[UserDto]:
        changes = data.model_dump(exclude_unset=True)
        phone_number = changes.get("phone_number")
        if phone_number:
            owner = await self.uow.users.find_by_phone_number(phone_number)
            if owner and owner.id != user_id:
                raise ConflictError("Phone number already in use")

        try:
            user = await self.uow.users.update(user_id, changes)
        except IntegrityError as e:
            await self.uow.rollback()
            raise ConflictError("Phone number already in use") from e
        return to_dto(user) if user else None

    async def delete(self, user_id: str) -> Optional[UserDto]:
        user = await self.uow.users.delete(user_id)
        if not user:
            return None
        logger.info(f"Deleted user {user_id}")
        return to_dto(user)

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> Optional[UserDto]:
        user = await self.uow.users.find_by_id(user_id)
        if not user:
            return None
        if not await self.hasher.verify(current_password, user.password_hash):
            raise BadRequestError("Current password is incorrect")
        user = await self.uow.users.update_password(user_id, await self.hasher.hash(new_password))
        logger.info(f"Password changed for user {user_id}")
        return to_dto(user)

    async def verify_email(self, user_id: str) -> Optional[UserDto]:
        user = await self.uow.users.verify_email(user_id)
        return to_dto(user) if user else None

    async def verify_phone(self, user_id: str) -> Optional[UserDto]:
        user = await self.uow.users.verify_phone(user_id)
        return to_dto(user) if user else None

    async def set_two_factor_enabled(
        self, user_id: str, enabled: bool, secret: Optional[str] = None
    ) -> Optional[UserDto]:
        if enabled and not secret:
            raise BadRequestError("A two-factor secret is required to enable two-factor authentication")
        user = await self.uow.users.set_two_factor_enabled(user_id, enabled, secret)
        return to_dto(user) if user else None

    async def update_role(self, user_id: str, role: UserRole) -> Optional[UserDto]:
        user = await self.uow.users.update_role(user_id, role)
        if user:
            logger.info(f"Role of user {user_id} set to {role.value}")
        return to_dto(user) if user else None

    async def set_active_status(self, user_id: str, is_active: bool) -> Optional[UserDto]:
        user = await self.uow.users.set_active_status(user_id, is_active)
        if user:
            logger.info(f"User {user_id} {'activated' if is_active else 'deactivated'}")
        return to_dto(user) if user else None

    async def count_by_role(self) -> List[RoleCount]:
        rows = await self.uow.users.count_by_role()
        return [RoleCount(**row) for row in rows]

    @staticmethod
    def _to_page(result: Dict[str, Any]) -> PaginatedResponse[UserDto]:
        return PaginatedResponse[UserDto](
            items=[to_dto(user) for user in result["items"]],
            total=result["total"],
            page=result["page"],
            limit=result["limit"],
            total_pages=result["total_pages"],
        )
