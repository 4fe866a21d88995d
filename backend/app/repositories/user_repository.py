"""
User Repository
Translates user operations into SQLAlchemy queries.
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, or_, asc, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import AuthProvider, User, UserRole
from app.schemas.user import UserFilterParams

# Columns callers may never overwrite through update()
_PROTECTED_COLUMNS = {"id", "created_at"}
# Secrets are never a sort key
_UNSORTABLE_COLUMNS = {"password_hash", "two_factor_secret"}


class UserRepository:
    """Data access for the users table. Writes flush; the caller owns the commit."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive exact match."""
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalars().first()

    async def find_by_phone_number(self, phone_number: str) -> Optional[User]:
        """Case-insensitive exact match."""
        result = await self.session.execute(
            select(User).where(func.lower(User.phone_number) == phone_number.lower())
        )
        return result.scalars().first()

    async def find_by_provider_id(self, provider_id: str, provider: AuthProvider) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(
                func.lower(User.provider_id) == provider_id.lower(),
                User.provider == provider,
            )
        )
        return result.scalars().first()

    async def create(self, data: Dict[str, Any]) -> User:
        user = User(**data)
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user_id: str, data: Dict[str, Any]) -> Optional[User]:
        """Apply column values; unknown keys, id and created_at are ignored."""
        user = await self.find_by_id(user_id)
        if not user:
            return None

        columns = set(User.__table__.columns.keys()) - _PROTECTED_COLUMNS
        for key, value in data.items():
            if key in columns:
                setattr(user, key, value)

        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def delete(self, user_id: str) -> Optional[User]:
        """Hard delete. Returns the removed row, or None when it did not exist."""
        user = await self.find_by_id(user_id)
        if not user:
            return None
        await self.session.delete(user)
        await self.session.flush()
        return user

    async def update_password(self, user_id: str, password_hash: str) -> Optional[User]:
        return await self.update(user_id, {"password_hash": password_hash})

    async def verify_email(self, user_id: str) -> Optional[User]:
        return await self.update(user_id, {"is_email_verified": True})

    async def verify_phone(self, user_id: str) -> Optional[User]:
        return await self.update(user_id, {"is_phone_verified": True})

    async def set_two_factor_enabled(self, user_id: str, enabled: bool, secret: Optional[str] = None) -> Optional[User]:
        # The secret only survives while two-factor is on
        return await self.update(user_id, {
            "two_factor_enabled": enabled,
            "two_factor_secret": secret if enabled else None,
        })

    async def update_role(self, user_id: str, role: UserRole) -> Optional[User]:
        return await self.update(user_id, {"role": role})

    async def set_active_status(self, user_id: str, is_active: bool) -> Optional[User]:
        return await self.update(user_id, {"is_active": is_active})

    async def count_by_role(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(User.role, func.count(User.id)).group_by(User.role)
        )
        return [{"role": role, "count": count} for role, count in result.all()]

    async def find_by_date_range(
        self,
        start_date: datetime,
        end_date: datetime,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """Users created within [start_date, end_date], newest first."""
        conditions = [User.created_at >= start_date, User.created_at <= end_date]
        return await self._paginate(conditions, page, limit, User.created_at, "desc")

    async def find_all(
        self,
        filters: Optional[UserFilterParams] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Dict[str, Any]:
        """
        Paginated listing with composable filters.

        Exact filters: role, is_active, provider, verification and two-factor flags.
        Substring (case-insensitive) filters: email, phone_number, first_name, last_name.
        `search` matches first name, last name or email.
        """
        conditions = []
        if filters:
            if filters.email:
                conditions.append(User.email.icontains(filters.email, autoescape=True))
            if filters.phone_number:
                conditions.append(User.phone_number.icontains(filters.phone_number, autoescape=True))
            if filters.role is not None:
                conditions.append(User.role == filters.role)
            if filters.is_active is not None:
                conditions.append(User.is_active == filters.is_active)
            if filters.provider is not None:
                conditions.append(User.provider == filters.provider)
            if filters.is_email_verified is not None:
                conditions.append(User.is_email_verified == filters.is_email_verified)
            if filters.is_phone_verified is not None:
                conditions.append(User.is_phone_verified == filters.is_phone_verified)
            if filters.two_factor_enabled is not None:
                conditions.append(User.two_factor_enabled == filters.two_factor_enabled)
            if filters.first_name:
                conditions.append(User.first_name.icontains(filters.first_name, autoescape=True))
            if filters.last_name:
                conditions.append(User.last_name.icontains(filters.last_name, autoescape=True))
            if filters.search:
                term = filters.search
                conditions.append(or_(
                    User.first_name.icontains(term, autoescape=True),
                    User.last_name.icontains(term, autoescape=True),
                    User.email.icontains(term, autoescape=True),
                ))

        if sort_by in _UNSORTABLE_COLUMNS:
            sort_by = "created_at"
        sort_column = User.__table__.columns.get(sort_by, User.__table__.c.created_at)
        return await self._paginate(conditions, page, limit, sort_column, sort_order)

    async def _paginate(self, conditions, page: int, limit: int, sort_column, sort_order: str) -> Dict[str, Any]:
        page = max(page, 1)
        limit = max(limit, 1)

        count_stmt = select(func.count(User.id))
        stmt = select(User)
        if conditions:
            count_stmt = count_stmt.where(*conditions)
            stmt = stmt.where(*conditions)

        total = (await self.session.execute(count_stmt)).scalar_one()

        direction = asc if sort_order.lower() == "asc" else desc
        # id as tiebreaker keeps page boundaries stable
        stmt = stmt.order_by(direction(sort_column), direction(User.id))
        stmt = stmt.offset((page - 1) * limit).limit(limit)
        result = await self.session.execute(stmt)

        return {
            "items": list(result.scalars().all()),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }
