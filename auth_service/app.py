"""
FastAPI Application Entry Point
-------------------------------
Main application initialization and configuration.
Registers routers, middleware, exception handlers and lifecycle handlers.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from auth_service.api import auth_endpoints, health_endpoints, role_endpoints
from auth_service.api.error_handlers import register_exception_handlers
from auth_service.api.providers import get_roles_service
from auth_service.auth.dependencies import get_access_token_codec
from auth_service.core.config_manager import settings
from auth_service.core.database_connection import db_manager
from auth_service.core.logger_setup import configure_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    A missing signing secret aborts startup with ConfigError before any
    request is served.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Debug mode: {settings.debug}")

    codec = get_access_token_codec()
    logger.info(
        f"Access tokens: {codec.algorithm}, lifetime {codec.expires_in}s; "
        f"refresh tokens: {settings.jwt_refresh_token_expire_days} day(s)"
    )

    await db_manager.initialize()

    if settings.rbac_seed_default_roles:
        logger.info("Seeding default roles")
        await get_roles_service().seed_default_roles()

    logger.info("[SUCCESS] Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application")
    try:
        await db_manager.close()
        logger.info("Application shutdown complete")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Authentication, token lifecycle and role-based access control",
        lifespan=lifespan,
        debug=settings.debug,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        swagger_ui_parameters={"displayRequestDuration": True},
    )

    # CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)

    # Register routers
    application.include_router(health_endpoints.router)
    application.include_router(auth_endpoints.router)
    application.include_router(role_endpoints.router)

    @application.get("/")
    async def root():
        """Root endpoint with basic information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "docs": "/api/docs",
            "redoc": "/api/redoc",
            "openapi": "/api/openapi.json",
        }

    return application


configure_logger()
app = create_app()
