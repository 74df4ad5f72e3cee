"""
Shared dependencies for the EduShelf API.

This module provides:
- PocketBase client management (one process-wide client, superuser-authenticated on startup)
- FastAPI dependency providers for repositories and the request workflow

Routers never touch the client directly; they receive stores through these
providers, which tests replace via ``app.dependency_overrides``.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import Depends

from pocketbase import PocketBase
from shelf.repositories import ListingRepository, ProfileRepository, RequestRepository
from shelf.repositories.base import ListingStore, ProfileStore, RequestStore
from shelf.workflow import RequestWorkflow

from .settings import get_settings

logger = logging.getLogger(__name__)

# ========================================
# PocketBase Client
# ========================================

_settings = get_settings()
pb_url = _settings.pocketbase_url
pb = PocketBase(pb_url)


async def authenticate_pb() -> None:
    """Authenticate with PocketBase as superuser."""
    settings = get_settings()
    try:
        await asyncio.to_thread(
            pb.collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


def get_pb_client() -> PocketBase:
    """FastAPI dependency to get the authenticated PocketBase client."""
    return pb


# ========================================
# Stores and workflow
# ========================================


def get_listing_store(client: PocketBase = Depends(get_pb_client)) -> ListingStore:
    return ListingRepository(client)


def get_request_store(client: PocketBase = Depends(get_pb_client)) -> RequestStore:
    return RequestRepository(client)


def get_profile_store(client: PocketBase = Depends(get_pb_client)) -> ProfileStore:
    return ProfileRepository(client)


def get_workflow(
    requests: RequestStore = Depends(get_request_store),
    listings: ListingStore = Depends(get_listing_store),
) -> RequestWorkflow:
    return RequestWorkflow(requests=requests, listings=listings)


__all__ = [
    "pb",
    "pb_url",
    "authenticate_pb",
    "get_pb_client",
    "get_listing_store",
    "get_request_store",
    "get_profile_store",
    "get_workflow",
]
