"""Listing repository for data access.

Read-only access to the ``books`` collection. Listings are created, edited
and deleted by the owner's client directly against the store."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ..errors import StoreOperationError
from ..models import Condition, Listing, parse_price, parse_timestamp
from ._pocketbase import field, is_not_found

logger = logging.getLogger(__name__)


class ListingRepository:
    """Repository for Listing data access"""

    COLLECTION_NAME = "books"

    def __init__(self, pb: PocketBase) -> None:
        """Initialize repository with PocketBase client.

        Args:
            pb: PocketBase client instance
        """
        self.pb = pb

    async def get(self, listing_id: str) -> Listing | None:
        """Fetch a single listing, or None if it does not exist."""
        try:
            record = await asyncio.to_thread(self.pb.collection(self.COLLECTION_NAME).get_one, listing_id)
        except ClientResponseError as e:
            if is_not_found(e):
                return None
            logger.error(f"Error fetching listing {listing_id}: {e}")
            raise StoreOperationError("get listing", e) from e
        return self._map_from_db(record)

    async def list_available(self) -> list[Listing]:
        """Fetch every listing whose owner has marked it available."""
        try:
            records = await asyncio.to_thread(
                self.pb.collection(self.COLLECTION_NAME).get_full_list,
                query_params={"filter": "is_available = true"},
            )
        except ClientResponseError as e:
            logger.error(f"Error fetching available listings: {e}")
            raise StoreOperationError("list available listings", e) from e
        return [self._map_from_db(r) for r in records]

    def _map_from_db(self, record: Any) -> Listing:
        """Map a ``books`` record to a Listing"""
        image_urls = field(record, "image_urls") or []
        # Older records carry a single image_url instead of the list
        if not image_urls and field(record, "image_url"):
            image_urls = [field(record, "image_url")]

        return Listing(
            id=field(record, "id"),
            title=field(record, "title", "") or "",
            owner_id=field(record, "owner_id", "") or "",
            is_available=bool(field(record, "is_available", False)),
            subject=field(record, "subject", "") or "",
            description=field(record, "description", "") or "",
            price=parse_price(field(record, "price")),
            condition=Condition.parse(field(record, "condition")),
            image_urls=list(image_urls),
            created_at=parse_timestamp(field(record, "created_at")),
            author=field(record, "author") or None,
            regulation=field(record, "regulation") or None,
            year=field(record, "year") or None,
        )
