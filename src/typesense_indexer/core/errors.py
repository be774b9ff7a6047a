"""
Error Taxonomy and Global Error Handling

This module defines the exception hierarchy shared by every layer of the
indexer, plus the exception handlers registered on the HTTP surface.

Taxonomy
--------
- ConnectivityError: a remote call was rejected or never reached the service.
  Fatal to the current phase, never retried here.
- ConfigurationError: missing or contradictory configuration. Fatal.
- ExtractionError: the content tree could not be turned into descriptors.
- Partial-item failures are NOT exceptions; they are logged and counted by
  the component that encounters them.
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("indexer.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class IndexerError(RuntimeError):
    """Base exception for all indexer failures."""


class ConnectivityError(IndexerError):
    """Raised when a remote collaborator cannot be reached or rejects a call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(IndexerError):
    """Raised when required configuration is absent or invalid."""


class ExtractionError(IndexerError):
    """Raised when documents cannot be extracted for an index."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

def _error_payload(error: str, detail: str) -> Dict[str, Any]:
    return {"error": error, "detail": detail}


async def connectivity_exception_handler(
    request: Request,
    exc: ConnectivityError,
) -> JSONResponse:
    """
    Map collaborator outages to 502 Bad Gateway.
    """
    logger.error(
        "Upstream failure during request %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )
    return JSONResponse(
        status_code=502,
        content=_error_payload("upstream_unavailable", "Upstream service failure"),
    )


async def configuration_exception_handler(
    request: Request,
    exc: ConfigurationError,
) -> JSONResponse:
    """
    Map configuration errors to 400 with the error message.

    Configuration messages never contain secrets, so they are safe to return.
    """
    logger.warning(
        "Configuration error during request %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )
    return JSONResponse(
        status_code=400,
        content=_error_payload("configuration_error", str(exc)),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.
    """

    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content=_error_payload("internal_server_error", "Internal server error"),
    )
