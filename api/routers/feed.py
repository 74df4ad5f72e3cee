"""
Feed Router - the listings a browsing student can request.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from shelf.auth_middleware import AuthUser, get_current_user
from shelf.errors import StoreOperationError
from shelf.feed import feed_for_viewer, subjects
from shelf.repositories.base import ListingStore, RequestStore

from ..dependencies import get_listing_store, get_request_store
from ..schemas.listings import FeedResponse, ListingResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["feed"])


@router.get("/feed", response_model=FeedResponse)
async def get_feed(
    user: AuthUser = Depends(get_current_user),
    listings: ListingStore = Depends(get_listing_store),
    requests: RequestStore = Depends(get_request_store),
) -> FeedResponse:
    """Available listings not yet promised to anyone, excluding the caller's own."""
    try:
        available = await listings.list_available()
        all_requests = await requests.list_all()
    except StoreOperationError as e:
        logger.error(f"Failed to load feed: {e}")
        raise HTTPException(status_code=502, detail="Failed to load books")

    visible = feed_for_viewer(available, all_requests, user.user_id)
    logger.debug(f"Feed for {user.user_id}: {len(visible)} of {len(available)} available listings")
    return FeedResponse(
        listings=[ListingResponse.from_listing(listing) for listing in visible],
        subjects=subjects(visible),
        total=len(visible),
    )
