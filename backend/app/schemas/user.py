"""
User Schemas
Pydantic models for user-related data.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, model_serializer

from app.models.user import AuthProvider, UserRole
from app.schemas.common import CamelModel
from app.utils.password_policy import validate_password


def _check_password(v: str) -> str:
    errors = validate_password(v)
    if errors:
        raise ValueError("; ".join(errors))
    return v


class UserDto(CamelModel):
    """Public representation of a user. Secrets appear only when populated."""
    id: str
    email: str
    password_hash: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    phone_country_code: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    profile_image_url: Optional[str] = None
    provider: AuthProvider = AuthProvider.CREDENTIALS
    provider_id: Optional[str] = None
    is_email_verified: bool = False
    is_phone_verified: bool = False
    two_factor_enabled: bool = False
    two_factor_secret: Optional[str] = None
    role: UserRole = UserRole.USER
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None

    @model_serializer(mode="wrap")
    def _omit_missing_secrets(self, handler):
        payload = handler(self)
        for key in ("password_hash", "passwordHash", "two_factor_secret", "twoFactorSecret"):
            if key in payload and payload[key] is None:
                del payload[key]
        return payload


class UserCreate(CamelModel):
    """Registration payload."""
    email: EmailStr
    password: str
    first_name: Optional[str] = Field(None, max_length=200)
    last_name: Optional[str] = Field(None, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=20)
    phone_country_code: Optional[str] = Field(None, max_length=10)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return _check_password(v)


class AdminUserCreate(UserCreate):
    """User creation by an administrator, role chosen explicitly."""
    role: UserRole = UserRole.USER


class UserUpdate(CamelModel):
    """Profile fields a user may change."""
    first_name: Optional[str] = Field(None, max_length=200)
    last_name: Optional[str] = Field(None, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=20)
    phone_country_code: Optional[str] = Field(None, max_length=10)
    date_of_birth: Optional[datetime] = None
    profile_image_url: Optional[str] = None


class UserLogin(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    remember_me: bool


class RefreshTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)


class PasswordChange(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return _check_password(v)


class RoleUpdate(BaseModel):
    role: UserRole


class StatusUpdate(CamelModel):
    is_active: bool


class RoleCount(BaseModel):
    role: UserRole
    count: int


class UserFilterParams(BaseModel):
    """Composable filters for user listings."""
    email: Optional[str] = None
    phone_number: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    provider: Optional[AuthProvider] = None
    is_email_verified: Optional[bool] = None
    is_phone_verified: Optional[bool] = None
    two_factor_enabled: Optional[bool] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    search: Optional[str] = None  # first name, last name or email
