"""
Authentication middleware - resolves the acting user for every request.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any

from fastapi import HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response

from .jwt_auth import PocketBaseTokenValidator, extract_bearer_token

logger = logging.getLogger(__name__)

PUBLIC_PATHS = frozenset({"/health"})
DEV_USER_HEADER = "X-Dev-User"


def _is_docker_environment() -> bool:
    """Detect if running inside a Docker container."""
    if Path("/.dockerenv").exists():
        return True
    if os.getenv("DOCKER_CONTAINER") == "true":
        return True
    try:
        with open("/proc/1/cgroup") as f:
            return "docker" in f.read()
    except (FileNotFoundError, PermissionError):
        pass
    return False


class AuthUser:
    """Represents an authenticated user."""

    def __init__(self, user_id: str, email: str = "", display_name: str = ""):
        self.user_id = user_id
        self.email = email
        self.display_name = display_name

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "display_name": self.display_name,
        }


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Middleware for handling authentication.

    Supports two modes:
    - bypass: act as DEV_USER_ID, or the X-Dev-User header (development only)
    - production: validate PocketBase user tokens
    """

    def __init__(self, app: Any, auth_mode: str, pocketbase_url: str, dev_user_id: str = ""):
        super().__init__(app)
        self.auth_mode = auth_mode.lower()
        self.dev_user_id = dev_user_id

        if self.auth_mode not in ["bypass", "production"]:
            raise ValueError(f"Invalid AUTH_MODE: {auth_mode}. Must be bypass or production")

        if self.auth_mode == "bypass" and _is_docker_environment():
            raise ValueError(
                "SECURITY ERROR: AUTH_MODE=bypass is not allowed in Docker containers. "
                "Docker deployments must use AUTH_MODE=production."
            )

        self.token_validator: PocketBaseTokenValidator | None = None
        if self.auth_mode == "production":
            self.token_validator = PocketBaseTokenValidator(pocketbase_url)

        logger.info(f"Authentication middleware initialized in {self.auth_mode} mode")

    def _bypass_user(self, request: Request) -> AuthUser | None:
        user_id = request.headers.get(DEV_USER_HEADER) or self.dev_user_id
        if not user_id:
            return None
        return AuthUser(user_id=user_id, display_name=f"Dev {user_id}")

    async def _extract_user_from_token(self, request: Request) -> AuthUser | None:
        token = extract_bearer_token(request.headers.get("Authorization"))
        if not token or self.token_validator is None:
            logger.debug("No bearer token found in Authorization header")
            return None

        claims = await asyncio.to_thread(self.token_validator.validate_token, token)
        if not claims or not claims.get("sub"):
            return None

        return AuthUser(
            user_id=claims["sub"],
            email=claims.get("email", ""),
            display_name=claims.get("name", ""),
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        if self.auth_mode == "bypass":
            user = self._bypass_user(request)
        else:
            user = await self._extract_user_from_token(request)

        if not user:
            # Allow OPTIONS requests for CORS
            if request.method == "OPTIONS":
                return await call_next(request)

            logger.warning(f"Unauthenticated request to {request.url.path} in {self.auth_mode} mode")
            # BaseHTTPMiddleware turns raised HTTPExceptions into 500s
            return JSONResponse(status_code=401, content={"detail": "Authentication required"})

        request.state.user = user
        logger.debug(f"Authenticated request from {user.user_id} to {request.url.path}")
        return await call_next(request)


def get_current_user(request: Request) -> AuthUser:
    """
    Dependency to get the current authenticated user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthUser = Depends(get_current_user)):
            return {"message": f"Hello {user.user_id}"}
    """
    user = getattr(request.state, "user", None)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user
