"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from cycletrack.config import Settings, get_settings
from cycletrack.services.entry_store import EntryStore


@dataclass(frozen=True)
class AuthContext:
    """Authenticated user context extracted from the access token."""

    user_id: str  # opaque owner key for every period entry


async def get_current_user(request: Request) -> AuthContext:
    """Extract the authenticated user from the request state.

    The auth middleware sets ``request.state.auth`` before routes run.
    """
    auth: AuthContext | None = getattr(request.state, "auth", None)
    if auth is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return auth


async def get_entry_store(request: Request) -> EntryStore:
    """The process-wide store created in the app lifespan."""
    return request.app.state.entry_store


# Annotated shortcuts for route signatures
CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Store = Annotated[EntryStore, Depends(get_entry_store)]
