"""
UserHub FastAPI Application
Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI

from app.api import auth, health, users
from app.api.errors import register_error_handlers
from app.api.middleware import ClientIdMiddleware
from app.config import Settings, get_settings
from app.database import Database
from app.logging_config import setup_logging
from app.services.password_service import PasswordHasher
from app.services.token_service import TokenService

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and cleanup on shutdown.
    """
    settings: Settings = app.state.settings
    setup_logging(log_dir=settings.log_dir, log_level=settings.log_level)
    logger.info(f"Starting {settings.app_name} backend ({settings.environment})")

    # Create tables directly in debug mode; use Alembic migrations otherwise
    if settings.debug:
        await app.state.database.create_all()
        logger.info("Database initialized (debug mode)")

    yield

    logger.info(f"Shutting down {settings.app_name} backend")
    await app.state.database.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application and its service graph.
    Everything request handlers need hangs off app.state.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="User management API: registration, login, JWT authentication and role-based access.",
        version="0.1.0",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = Database(
        settings.database_url,
        echo=settings.db_echo,
        isolation_level=settings.db_isolation_level,
    )
    app.state.password_hasher = PasswordHasher(rounds=settings.password_hash_rounds)
    app.state.token_service = TokenService(
        secret=settings.jwt_secret,
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(days=settings.access_token_expire_days),
    )

    # Configure rate limiting
    auth.limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = auth.limiter

    app.add_middleware(ClientIdMiddleware)
    register_error_handlers(app)

    app.include_router(health.router, prefix=f"{settings.api_prefix}/health", tags=["Health"])
    app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["Auth"])
    app.include_router(users.router, prefix=f"{settings.api_prefix}/users", tags=["Users"])

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=_settings.port,
        reload=_settings.debug,
    )
