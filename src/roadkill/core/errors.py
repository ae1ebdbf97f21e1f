"""
Error Taxonomy & Global Error Handling

This module defines the exceptions raised by the stores and services, and the
application-wide exception handlers registered on the FastAPI app.

Design Goals
------------
- Business-rule failures (not found, conflict, locked out) are typed and are
  converted to HTTP responses by the route handlers
- Infrastructure failures never leak internal details to clients
- Full stack traces are logged internally for debugging
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("roadkill.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class RoadkillError(Exception):
    """Base class for all errors raised by Roadkill stores and services."""


class NotFoundError(RoadkillError):
    """Raised when a mutation or lookup targets an entity that does not exist."""


class ConflictError(RoadkillError):
    """Raised when a change conflicts with existing state."""


class EmailExistsError(ConflictError):
    """Raised when provisioning a user whose email is already registered."""


class UserIsLockedOutError(ConflictError):
    """Raised when locking out a user that is already locked out."""


class ForbiddenError(RoadkillError):
    """
    Raised when authentication is rejected.

    The message is generic: callers must not be able to tell a
    wrong password apart from a locked-out account.
    """


class ValidationError(RoadkillError):
    """Raised when input is malformed."""


class StorageError(RoadkillError):
    """Raised when the underlying store fails (connectivity, serialization)."""


# ---------------------------------------------------------------------
# Response Messages
# ---------------------------------------------------------------------

EMAIL_EXISTS_MESSAGE = "The email address already exists."
EMAIL_DOES_NOT_EXIST_MESSAGE = "The email address does not exist."
USER_IS_LOCKED_OUT_MESSAGE = "The user with the email address is already locked out."


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

def _internal_error_response() -> JSONResponse:
    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )


async def storage_exception_handler(
    request: Request,
    exc: StorageError,
) -> JSONResponse:
    """
    Handler for store failures that reached the application boundary.

    The driver-level cause is logged but never returned to the client.
    """
    logger.error(
        "Storage failure during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return _internal_error_response()


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    This handler should be registered with FastAPI as the final safety net
    for any exception not otherwise handled by route-level or framework-level
    handlers.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled Roadkill exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    return _internal_error_response()
