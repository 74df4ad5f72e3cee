"""Store capabilities required by the exchange workflow and views.

The workflow only depends on these protocols, so it can run against the
PocketBase repositories in production and an in-memory fake in tests."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from ..models import ExchangeRequest, Listing, Profile, RequestStatus


class ListingStore(Protocol):
    async def get(self, listing_id: str) -> Listing | None: ...

    async def list_available(self) -> list[Listing]: ...


class RequestStore(Protocol):
    async def get(self, request_id: str) -> ExchangeRequest | None: ...

    async def list_all(self) -> list[ExchangeRequest]: ...

    async def list_for_owner(self, owner_id: str) -> list[ExchangeRequest]: ...

    async def list_for_requester(self, requester_id: str) -> list[ExchangeRequest]: ...

    async def list_for_listing(
        self, listing_id: str, status: RequestStatus | None = None
    ) -> list[ExchangeRequest]: ...

    async def find_existing(self, listing_id: str, requester_id: str) -> ExchangeRequest | None: ...

    async def insert(self, request: ExchangeRequest) -> ExchangeRequest: ...

    async def update_status(self, request_id: str, status: RequestStatus, updated_at: datetime) -> None: ...

    async def commit_approval(
        self,
        request_id: str,
        listing_id: str,
        sibling_ids: list[str],
        updated_at: datetime,
    ) -> None:
        """Approve a request, close its listing and reject siblings in one transaction."""
        ...


class ProfileStore(Protocol):
    async def get(self, user_id: str) -> Profile | None: ...
