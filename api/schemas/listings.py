"""
Pydantic schemas for listing and feed endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from shelf.models import Listing


class ListingResponse(BaseModel):
    """Response model for a listing in the feed."""

    id: str
    title: str
    author: str | None = None
    subject: str
    regulation: str | None = None
    description: str
    price: float | None = None
    is_free: bool
    condition: str | None = None
    image_urls: list[str]
    is_available: bool
    owner_id: str
    created_at: datetime | None = None

    @classmethod
    def from_listing(cls, listing: Listing) -> ListingResponse:
        return cls(
            id=listing.id,
            title=listing.title,
            author=listing.author,
            subject=listing.subject,
            regulation=listing.regulation,
            description=listing.description,
            price=listing.price,
            is_free=listing.is_free,
            condition=listing.condition.value if listing.condition else None,
            image_urls=listing.image_urls,
            is_available=listing.is_available,
            owner_id=listing.owner_id,
            created_at=listing.created_at,
        )


class FeedResponse(BaseModel):
    """Visible feed for the calling user."""

    listings: list[ListingResponse]
    subjects: list[str]
    total: int
