"""
UserHub Configuration Module
Loads settings from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


ALLOWED_JWT_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "UserHub"
    environment: str = "production"  # "development" exposes raw error messages
    debug: bool = False  # creates tables at startup
    port: int = 3001

    # Authentication
    jwt_secret: str = Field(..., min_length=32)  # Required, no default
    jwt_audience: str = Field(..., min_length=1)
    jwt_issuer: str = Field(..., min_length=1)
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 30
    password_hash_rounds: int = 10

    # Client identification
    client_id: str = ""
    site_mode: str = "production"  # "local" disables the clientid check

    # Rate Limiting
    rate_limit_enabled: bool = True  # login: 5/15minutes, register: 10/hour

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")
    db_isolation_level: Optional[str] = None
    db_echo: bool = False

    # Logging
    log_dir: str = "logs"
    log_level: str = "INFO"

    # API Settings
    api_prefix: str = "/api"

    @field_validator('jwt_secret')
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Validate that the signing secret is secure."""
        if not v or len(v) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters long")

        # Check for common insecure values
        insecure_values = [
            "change-me-in-production",
            "changeme",
            "password",
        ]
        if any(bad in v.lower() for bad in insecure_values):
            raise ValueError(
                "JWT_SECRET appears to be insecure. Generate a secure key with: "
                "python -c 'import secrets; print(secrets.token_hex(32))'"
            )

        return v

    @field_validator('jwt_algorithm')
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Only symmetric HMAC algorithms are supported."""
        if v not in ALLOWED_JWT_ALGORITHMS:
            raise ValueError(f"JWT_ALGORITHM must be one of {', '.join(ALLOWED_JWT_ALGORITHMS)}")
        return v

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def is_local(self) -> bool:
        return self.site_mode.lower() == "local"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
