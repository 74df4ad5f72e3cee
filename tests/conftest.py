"""
Root test configuration and fixtures for EduShelf.

Provides:
- create_mock_pocketbase(): a MagicMock shaped like the PocketBase SDK client
- InMemoryStore: listing/request/profile stores kept in dicts, implementing the
  same store protocols as the PocketBase repositories
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from shelf.errors import DuplicateRequestError, StoreOperationError  # noqa: E402
from shelf.models import ExchangeRequest, Listing, Profile, RequestStatus  # noqa: E402


def create_mock_pocketbase() -> MagicMock:
    """Create a mock PocketBase client whose collection() returns one shared mock."""
    mock_pb = MagicMock()
    mock_collection = MagicMock()

    mock_list_response = MagicMock()
    mock_list_response.items = []
    mock_list_response.total_items = 0

    mock_collection.get_full_list.return_value = []
    mock_collection.get_list.return_value = mock_list_response
    mock_pb.collection.return_value = mock_collection
    return mock_pb


class _RoundTrip:
    """Mixin: every store call yields to the event loop once, like a network hop.

    Operations named in ``fail_on`` raise StoreOperationError.
    """

    fail_on: set[str]

    async def _roundtrip(self, operation: str) -> None:
        await asyncio.sleep(0)
        if operation in self.fail_on:
            raise StoreOperationError(operation, RuntimeError("simulated store outage"))


class InMemoryListingStore(_RoundTrip):
    def __init__(self) -> None:
        self.records: dict[str, Listing] = {}
        self.fail_on = set()

    def add(self, listing: Listing) -> Listing:
        self.records[listing.id] = listing
        return listing

    async def get(self, listing_id: str) -> Listing | None:
        await self._roundtrip("get")
        listing = self.records.get(listing_id)
        return replace(listing) if listing else None

    async def list_available(self) -> list[Listing]:
        await self._roundtrip("list_available")
        return [replace(listing) for listing in self.records.values() if listing.is_available]


class InMemoryRequestStore(_RoundTrip):
    """Reads return snapshots; writes apply to the stored records."""

    def __init__(self, listings: InMemoryListingStore) -> None:
        self.records: dict[str, ExchangeRequest] = {}
        self.listings = listings
        self.fail_on = set()
        self.approval_batches: list[dict] = []

    def add(self, request: ExchangeRequest) -> ExchangeRequest:
        assert request.id
        self.records[request.id] = request
        return request

    def _select(self, predicate) -> list[ExchangeRequest]:
        return [replace(r) for r in self.records.values() if predicate(r)]

    async def get(self, request_id: str) -> ExchangeRequest | None:
        await self._roundtrip("get")
        request = self.records.get(request_id)
        return replace(request) if request else None

    async def list_all(self) -> list[ExchangeRequest]:
        await self._roundtrip("list_all")
        return self._select(lambda r: True)

    async def list_for_owner(self, owner_id: str) -> list[ExchangeRequest]:
        await self._roundtrip("list_for_owner")
        return self._select(lambda r: r.owner_id == owner_id)

    async def list_for_requester(self, requester_id: str) -> list[ExchangeRequest]:
        await self._roundtrip("list_for_requester")
        return self._select(lambda r: r.requester_id == requester_id)

    async def list_for_listing(self, listing_id: str, status: RequestStatus | None = None) -> list[ExchangeRequest]:
        await self._roundtrip("list_for_listing")
        return self._select(lambda r: r.listing_id == listing_id and (status is None or r.status == status))

    async def find_existing(self, listing_id: str, requester_id: str) -> ExchangeRequest | None:
        await self._roundtrip("find_existing")
        matches = self._select(lambda r: r.listing_id == listing_id and r.requester_id == requester_id)
        return matches[0] if matches else None

    async def insert(self, request: ExchangeRequest) -> ExchangeRequest:
        await self._roundtrip("insert")
        if request.id in self.records:
            raise DuplicateRequestError(request.listing_id, request.requester_id)
        self.records[request.id] = replace(request)
        return replace(request)

    async def update_status(self, request_id: str, status: RequestStatus, updated_at: datetime) -> None:
        await self._roundtrip("update_status")
        record = self.records[request_id]
        record.status = status
        record.updated_at = updated_at

    async def commit_approval(
        self,
        request_id: str,
        listing_id: str,
        sibling_ids: list[str],
        updated_at: datetime,
    ) -> None:
        await self._roundtrip("commit_approval")
        self.approval_batches.append(
            {"request_id": request_id, "listing_id": listing_id, "sibling_ids": list(sibling_ids)}
        )
        self.records[request_id].status = RequestStatus.APPROVED
        self.records[request_id].updated_at = updated_at
        self.listings.records[listing_id].is_available = False
        for sibling_id in sibling_ids:
            self.records[sibling_id].status = RequestStatus.REJECTED
            self.records[sibling_id].updated_at = updated_at


class InMemoryProfileStore(_RoundTrip):
    def __init__(self) -> None:
        self.records: dict[str, Profile] = {}
        self.fail_on = set()

    def add(self, profile: Profile) -> Profile:
        self.records[profile.id] = profile
        return profile

    async def get(self, user_id: str) -> Profile | None:
        await self._roundtrip("get")
        return self.records.get(user_id)


class InMemoryStore:
    """All three stores sharing one in-memory dataset."""

    def __init__(self) -> None:
        self.listings = InMemoryListingStore()
        self.requests = InMemoryRequestStore(self.listings)
        self.profiles = InMemoryProfileStore()


class StepClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 9, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        value = self.current
        self.current = value + timedelta(minutes=1)
        return value


@pytest.fixture
def mock_pocketbase() -> MagicMock:
    return create_mock_pocketbase()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def make_listing():
    """Factory for listings with sensible defaults."""

    def _make(listing_id: str = "book1", owner_id: str = "u1", **kwargs) -> Listing:
        defaults = {"title": f"Title {listing_id}", "subject": "Physics", "is_available": True}
        defaults.update(kwargs)
        return Listing(id=listing_id, owner_id=owner_id, **defaults)

    return _make


@pytest.fixture
def make_request():
    """Factory for stored exchange requests."""

    def _make(
        request_id: str,
        listing_id: str = "book1",
        requester_id: str = "u2",
        owner_id: str = "u1",
        status: RequestStatus = RequestStatus.PENDING,
        **kwargs,
    ) -> ExchangeRequest:
        return ExchangeRequest(
            id=request_id,
            listing_id=listing_id,
            requester_id=requester_id,
            owner_id=owner_id,
            status=status,
            **kwargs,
        )

    return _make
