"""
User Model
Stores credentials, profile, federation and authorization data for a user.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Boolean, DateTime, Enum, Text, Index, func
from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    """Authorization role of a user."""
    ADMIN = "admin"
    STAFF = "staff"
    USER = "user"


class AuthProvider(str, enum.Enum):
    """Where the account authenticates."""
    CREDENTIALS = "credentials"
    GOOGLE = "google"
    FACEBOOK = "facebook"
    APPLE = "apple"


class User(Base):
    """
    User model for authentication and profile data.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Credentials
    email = Column(String(300), nullable=False)
    password_hash = Column(Text, nullable=True)  # NULL for external providers
    phone_number = Column(String(20), nullable=True)

    # Profile
    first_name = Column(String(200), nullable=True)
    last_name = Column(String(200), nullable=True)
    phone_country_code = Column(String(10), nullable=True)
    date_of_birth = Column(DateTime(timezone=True), nullable=True)
    profile_image_url = Column(Text, nullable=True)

    # Federation
    provider = Column(
        Enum(AuthProvider, name="auth_provider"),
        default=AuthProvider.CREDENTIALS,
        nullable=False,
    )
    provider_id = Column(String(100), nullable=True)

    # Verification / security
    is_email_verified = Column(Boolean, default=False, nullable=False)
    is_phone_verified = Column(Boolean, default=False, nullable=False)
    two_factor_enabled = Column(Boolean, default=False, nullable=False)
    two_factor_secret = Column(Text, nullable=True)

    # Authorization
    role = Column(Enum(UserRole, name="user_role"), default=UserRole.USER, nullable=False, index=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    __table_args__ = (
        Index("uq_users_email_lower", func.lower(email), unique=True),
        Index("uq_users_phone_number_lower", func.lower(phone_number), unique=True),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
