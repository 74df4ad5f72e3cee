#!/usr/bin/env python3
"""
EduShelf API - HTTP API for the student book exchange.

This FastAPI application is the backend-for-frontend for the exchange UI.
It serves:
- The public feed of requestable listings
- The exchange request workflow (send, approve, reject)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shelf.auth_middleware import AuthMiddleware, AuthUser, get_current_user
from shelf.logging_config import configure_logging, get_logger

from .dependencies import authenticate_pb
from .settings import get_settings

# Format: 2026-01-06T14:05:52Z [api] LEVEL message
configure_logging(source="api")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Authenticate against PocketBase before serving requests."""
    settings = get_settings()

    if not settings.skip_pb_auth:
        await authenticate_pb()
    else:
        logger.warning("Skipping PocketBase authentication (SKIP_PB_AUTH=true)")

    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="EduShelf API", description="Student book exchange API", lifespan=lifespan)

    settings = get_settings()
    auth_mode = settings.get_effective_auth_mode()

    # CORS is added last so it wraps authentication and answers preflights
    app.add_middleware(
        AuthMiddleware,
        auth_mode=auth_mode,
        pocketbase_url=settings.pocketbase_url,
        dev_user_id=settings.dev_user_id,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    from .routers import feed, requests

    app.include_router(feed.router)
    app.include_router(requests.router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "edushelf-api"}

    @app.get("/api/user/me")
    async def get_current_user_info(user: AuthUser = Depends(get_current_user)) -> dict[str, Any]:
        """Get current user information."""
        return user.to_dict()

    return app


# Create app instance for uvicorn
app = create_app()
