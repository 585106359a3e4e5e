"""Error taxonomy for period tracking and its HTTP rendering.

Client-triggerable errors carry their own status code and message and are
returned to the caller verbatim.  Anything else is logged and rendered as an
opaque 500 so storage details never leak into responses.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("cycletrack.errors")


class CycleTrackError(Exception):
    """Base class for errors a caller can trigger and correct."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CycleTrackError):
    """Malformed or out-of-range input (bad dates, unknown enum value)."""

    status_code = 422


class OverlapError(CycleTrackError):
    """Candidate interval intersects an existing entry of the same user."""

    status_code = 409

    def __init__(self, message: str = "Period entry overlaps with existing entry") -> None:
        super().__init__(message)


class NotFoundError(CycleTrackError):
    """Entry missing, or owned by someone else."""

    status_code = 404

    def __init__(self, message: str = "Period entry not found") -> None:
        super().__init__(message)


async def _handle_client_error(request: Request, exc: CycleTrackError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CycleTrackError, _handle_client_error)
    app.add_exception_handler(Exception, _handle_unexpected)
