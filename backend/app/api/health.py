"""
Health Router
Liveness and database connectivity checks.
"""

import logging

from fastapi import APIRouter, Request
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/check")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "UP"}


@router.get("/db")
async def database_health(request: Request):
    """Database connectivity check."""
    try:
        await request.app.state.database.ping()
        return {"status": "UP", "database": "connected"}
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        return {"status": "DOWN", "database": "disconnected", "error": str(e)}
