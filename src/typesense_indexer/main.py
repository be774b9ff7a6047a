"""
Indexer Service Entry Point

This module defines the FastAPI application instance, registers all routers
and configures global exception handling.

Design Goals
------------
- Centralized router registration
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .config import settings
from .core.errors import (
    ConfigurationError,
    ConnectivityError,
    configuration_exception_handler,
    connectivity_exception_handler,
    unhandled_exception_handler,
)
from .api import (
    health_routes,
    reindex_routes,
    search_routes,
)


logger = logging.getLogger("indexer.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Log the effective configuration at startup.
    """
    logger.info(
        "Starting typesense-indexer (typesense=%s, contentserver=%s, indices=%s)",
        settings.typesense_url,
        settings.contentserver_url,
        ", ".join(settings.collections) or "none",
    )
    if not settings.collections:
        logger.warning("No collections configured; reindex requests will fail")
    yield
    logger.info("Shutting down typesense-indexer")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="typesense-indexer",
        version="1.0.0",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(ConnectivityError, connectivity_exception_handler)
    app.add_exception_handler(ConfigurationError, configuration_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(search_routes.router)
    app.include_router(reindex_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn)
# ---------------------------------------------------------------------

app = create_app()
