"""
Roadkill API Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and provides a test-friendly application
factory.

Design Goals
------------
- Deterministic startup
- Centralized router registration
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import logging
from fastapi import FastAPI

from .config import settings
from .core.errors import StorageError, storage_exception_handler, unhandled_exception_handler
from .db import async_engine, create_schema

from .api import (
    authorization_routes,
    health_routes,
    page_versions_routes,
    pages_routes,
    users_routes,
)


logger = logging.getLogger("roadkill.app")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    This factory pattern allows:
    - Clean test instantiation
    - Controlled dependency overrides in pytest

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="roadkill",
        version="3.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(StorageError, storage_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(authorization_routes.router)
    app.include_router(users_routes.router)
    app.include_router(pages_routes.router)
    app.include_router(page_versions_routes.router)

    # --------------------------------------------------------------
    # Startup Validation Hook
    # --------------------------------------------------------------

    @app.on_event("startup")
    async def _startup() -> None:
        """
        Fail-fast validation at application startup, then make sure the
        collections exist.
        """
        logger.info("Starting roadkill API v%s", settings.api_version)

        # Touch critical secrets to force validation now (not at first use)
        _ = settings.jwt_secret.get_secret_value()

        await create_schema()
        logger.info("Database schema ready")

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        logger.info("Shutting down roadkill API")
        await async_engine.dispose()

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
