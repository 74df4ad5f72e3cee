"""Fixtures for API router tests: an app wired to the in-memory stores."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, HTTPException, Request
from fastapi.testclient import TestClient

from api.dependencies import get_listing_store, get_profile_store, get_request_store
from api.routers import feed, requests
from shelf.auth_middleware import AuthUser, get_current_user

USER_HEADER = "X-Test-User"


def _current_user(request: Request) -> AuthUser:
    user_id = request.headers.get(USER_HEADER)
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return AuthUser(user_id=user_id)


@pytest.fixture
def app(store) -> FastAPI:
    app = FastAPI()
    app.include_router(feed.router)
    app.include_router(requests.router)

    app.dependency_overrides[get_current_user] = _current_user
    app.dependency_overrides[get_listing_store] = lambda: store.listings
    app.dependency_overrides[get_request_store] = lambda: store.requests
    app.dependency_overrides[get_profile_store] = lambda: store.profiles
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def as_user():
    """Headers identifying the acting user."""

    def _headers(user_id: str) -> dict[str, str]:
        return {USER_HEADER: user_id}

    return _headers
