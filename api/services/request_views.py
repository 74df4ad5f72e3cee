"""Composed views of a user's received and sent exchange requests.

Each request is shown with a summary of the listing it refers to and the
requester's profile. Those follow-up reads are best-effort: a failed or
missing lookup leaves the field as None instead of failing the whole view.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from shelf.errors import StoreOperationError
from shelf.models import ExchangeRequest, Listing, Profile
from shelf.repositories.base import ListingStore, ProfileStore, RequestStore

from ..schemas.exchange_requests import (
    ExchangeRequestResponse,
    ExchangeRequestView,
    ListingSummary,
    ReceivedRequestsResponse,
    RequesterSummary,
    SentRequestsResponse,
)

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)


class RequestViewService:
    """Builds the received/sent request views for one user."""

    def __init__(self, requests: RequestStore, listings: ListingStore, profiles: ProfileStore) -> None:
        self.requests = requests
        self.listings = listings
        self.profiles = profiles

    async def list_received(self, owner_id: str) -> ReceivedRequestsResponse:
        """Requests for the owner's listings, newest first."""
        requests = await self.requests.list_for_owner(owner_id)
        views = await self._compose(requests)
        pending_count = sum(1 for r in requests if r.is_pending)
        return ReceivedRequestsResponse(requests=views, pending_count=pending_count)

    async def list_sent(self, requester_id: str) -> SentRequestsResponse:
        """Requests the user has sent, newest first."""
        requests = await self.requests.list_for_requester(requester_id)
        return SentRequestsResponse(requests=await self._compose(requests))

    async def _compose(self, requests: list[ExchangeRequest]) -> list[ExchangeRequestView]:
        listing_cache: dict[str, Listing | None] = {}
        profile_cache: dict[str, Profile | None] = {}

        views = []
        for request in sorted(requests, key=lambda r: r.created_at or _OLDEST, reverse=True):
            if request.listing_id not in listing_cache:
                listing_cache[request.listing_id] = await self._lookup_listing(request.listing_id)
            if request.requester_id not in profile_cache:
                profile_cache[request.requester_id] = await self._lookup_profile(request.requester_id)

            listing = listing_cache[request.listing_id]
            profile = profile_cache[request.requester_id]
            base = ExchangeRequestResponse.from_request(request)
            views.append(
                ExchangeRequestView(
                    **base.model_dump(),
                    listing=ListingSummary(title=listing.title, author=listing.author, image_url=listing.cover_image)
                    if listing
                    else None,
                    requester=RequesterSummary(name=profile.name, email=profile.email) if profile else None,
                )
            )
        return views

    async def _lookup_listing(self, listing_id: str) -> Listing | None:
        if not listing_id:
            return None
        try:
            return await self.listings.get(listing_id)
        except StoreOperationError as e:
            logger.warning(f"Could not load listing {listing_id} for request view: {e}")
            return None

    async def _lookup_profile(self, user_id: str) -> Profile | None:
        if not user_id:
            return None
        try:
            return await self.profiles.get(user_id)
        except StoreOperationError as e:
            logger.warning(f"Could not load profile {user_id} for request view: {e}")
            return None
