"""
Health Check Endpoints
---------------------
Health monitoring endpoints for the service and its database.
"""

from datetime import datetime, timezone
from fastapi import APIRouter
from loguru import logger

from auth_service.models.health_models import HealthStatus, DependencyHealth
from auth_service.core.config_manager import settings
from auth_service.core.database_connection import db_manager


router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("/", response_model=HealthStatus)
async def health_check():
    """
    Basic health check endpoint.
    Returns service status and version information.
    """
    logger.debug("Health check requested")

    return HealthStatus(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
    )


@router.get("/dependencies", response_model=DependencyHealth, status_code=200)
async def check_dependencies():
    """
    Check PostgreSQL connectivity.

    Always answers 200; an unreachable database is reported as
    ``status="unhealthy"`` in the body.
    """
    logger.debug("Dependency health check requested")

    postgresql_healthy = await _check_database()
    status = "healthy" if postgresql_healthy else "unhealthy"

    if not postgresql_healthy:
        logger.warning("Infrastructure health check detected issues: postgresql=False")

    return DependencyHealth(
        postgresql=postgresql_healthy,
        status=status,
        timestamp=datetime.now(timezone.utc),
    )


async def _check_database() -> bool:
    """
    Check PostgreSQL database connectivity.

    Returns:
        bool: True if database is accessible
    """
    try:
        return await db_manager.ping()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
