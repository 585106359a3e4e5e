"""JWT verification middleware for FastAPI.

Accepts an HS256 access token from the ``Authorization: Bearer`` header or,
for browser clients, the ``accessToken`` cookie.  Validates it, extracts the
owner id, and sets ``request.state.auth`` for ``get_current_user``.  Token
issuance belongs to the identity service; this side only verifies.
"""

from __future__ import annotations

import logging
from typing import Any

import jwt as pyjwt
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from cycletrack.config import Settings, get_settings
from cycletrack.dependencies import AuthContext

logger = logging.getLogger("cycletrack.auth")

# Paths that do not require authentication
PUBLIC_PATHS: set[str] = {
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}


def _is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc")


def _unauthorized(detail: str) -> Response:
    return Response(
        content=f'{{"detail":"{detail}"}}',
        status_code=401,
        media_type="application/json",
    )


class JWTAuthMiddleware(BaseHTTPMiddleware):
    """Verify access tokens and populate request.state.auth."""

    def __init__(self, app: Any, settings: Settings | None = None) -> None:
        super().__init__(app)
        self._settings = settings or get_settings()

    def _extract_token(self, request: Request) -> str | None:
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            return auth_header.removeprefix("Bearer ").strip()
        return request.cookies.get(self._settings.auth_cookie_name)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if _is_public(request.url.path):
            return await call_next(request)

        # OPTIONS requests pass through (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        token = self._extract_token(request)
        if not token:
            return _unauthorized("Access token required")

        try:
            payload = pyjwt.decode(
                token,
                self._settings.jwt_secret,
                algorithms=[self._settings.jwt_algorithm],
            )
        except pyjwt.ExpiredSignatureError:
            return _unauthorized("Token expired")
        except pyjwt.InvalidTokenError as exc:
            logger.warning("JWT validation failed: %s", exc)
            return _unauthorized("Invalid token")

        user_id = payload.get("userId") or payload.get("sub")
        if not user_id:
            logger.warning("JWT without a user claim rejected")
            return _unauthorized("Invalid token")

        request.state.auth = AuthContext(user_id=str(user_id))

        return await call_next(request)
