"""Exchange request workflow.

A request is a one-shot offer/accept handshake between a requester and a
listing owner:

    pending --approve--> approved
    pending --reject---> rejected

``completed`` exists in the stored schema but nothing transitions into it, and
a requester cannot withdraw a request.

Two ways of writing a decision are provided:

- set_status() is the plain single-document overwrite. It is last-write-wins,
  checks neither the actor nor the current state, and has no side effects on
  the listing or on other requests.
- approve() / reject() validate the acting user and the current state first
  and raise TransitionRejected instead of overwriting. approve() additionally
  closes the listing and rejects competing pending requests in the same
  store transaction. Decisions on the same listing are serialized with a
  per-listing lock, so two of them never pass their checks on the same state.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import weakref
from collections.abc import Callable
from datetime import datetime

from .errors import DuplicateRequestError, RejectionReason, TransitionRejected
from .models import DECISION_STATUSES, ExchangeRequest, RequestStatus, utc_now
from .repositories.base import ListingStore, RequestStore

logger = logging.getLogger(__name__)

# PocketBase record ids are 15 characters from [a-z0-9]
REQUEST_KEY_LENGTH = 15


def request_key(listing_id: str, requester_id: str) -> str:
    """Deterministic record id for the (listing, requester) pair.

    A second request for the same pair maps to the same id, so the store's
    primary key rejects it even when two inserts race.
    """
    digest = hashlib.sha256(f"{listing_id}:{requester_id}".encode()).hexdigest()
    return digest[:REQUEST_KEY_LENGTH]


# Listing id -> lock held while a decision on one of its requests is checked
# and written. Entries disappear once no coroutine holds or awaits the lock.
_decision_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()


def decision_lock(listing_id: str) -> asyncio.Lock:
    """Lock serializing approve/reject on one listing within this process."""
    lock = _decision_locks.get(listing_id)
    if lock is None:
        lock = asyncio.Lock()
        _decision_locks[listing_id] = lock
    return lock


class RequestWorkflow:
    """Creates exchange requests and records owner decisions on them."""

    def __init__(
        self,
        requests: RequestStore,
        listings: ListingStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.requests = requests
        self.listings = listings
        self.clock = clock

    async def create_request(
        self,
        listing_id: str,
        requester_id: str,
        owner_id: str,
        message: str | None = "",
    ) -> ExchangeRequest:
        """Send a request for a listing on behalf of requester_id.

        The new request is always pending. The listing itself is not touched.

        Raises:
            DuplicateRequestError: requester_id already requested this listing
            StoreOperationError: the insert failed
        """
        existing = await self.requests.find_existing(listing_id, requester_id)
        if existing is not None:
            raise DuplicateRequestError(listing_id, requester_id)

        request = ExchangeRequest(
            id=request_key(listing_id, requester_id),
            listing_id=listing_id,
            requester_id=requester_id,
            owner_id=owner_id,
            status=RequestStatus.PENDING,
            message=(message or "").strip(),
            created_at=self.clock(),
        )
        created = await self.requests.insert(request)
        logger.info(f"User {requester_id} requested listing {listing_id} (request {created.id})")
        return created

    async def set_status(self, request_id: str, new_status: RequestStatus | str) -> datetime:
        """Overwrite a request's status unconditionally.

        No ownership or current-state check is made: calling this twice with
        different decisions leaves the later one in place.

        Returns:
            The updated_at timestamp that was written
        """
        status = RequestStatus(new_status)
        if status not in DECISION_STATUSES:
            raise ValueError(f"Cannot set request status to {status.value!r}; expected approved or rejected")

        updated_at = self.clock()
        await self.requests.update_status(request_id, status, updated_at)
        logger.info(f"Request {request_id} set to {status.value}")
        return updated_at

    async def approve(self, request_id: str, acting_user_id: str) -> ExchangeRequest:
        """Approve a pending request as the listing owner.

        In one transaction the request is approved, the listing is marked
        unavailable and every other pending request for it is rejected.

        Raises:
            TransitionRejected: not found, not the owner, not pending, or the
                listing is gone or already unavailable
            StoreOperationError: a read or the transaction failed
        """
        listing_id = (await self._get_request(request_id)).listing_id
        async with decision_lock(listing_id):
            request = await self._load_for_decision(request_id, acting_user_id)

            listing = await self.listings.get(listing_id)
            if listing is None or not listing.is_available:
                raise TransitionRejected(
                    RejectionReason.LISTING_UNAVAILABLE,
                    request_id,
                    f"Listing {listing_id} is no longer available",
                )

            pending = await self.requests.list_for_listing(listing_id, RequestStatus.PENDING)
            sibling_ids = [r.id for r in pending if r.id and r.id != request_id]

            updated_at = self.clock()
            await self.requests.commit_approval(request_id, listing_id, sibling_ids, updated_at)

        logger.info(
            f"Request {request_id} approved by {acting_user_id}; listing {listing_id} closed, "
            f"{len(sibling_ids)} competing request(s) rejected"
        )
        request.status = RequestStatus.APPROVED
        request.updated_at = updated_at
        return request

    async def reject(self, request_id: str, acting_user_id: str) -> ExchangeRequest:
        """Reject a pending request as the listing owner.

        Raises:
            TransitionRejected: not found, not the owner, or not pending
            StoreOperationError: a read or the write failed
        """
        listing_id = (await self._get_request(request_id)).listing_id
        async with decision_lock(listing_id):
            request = await self._load_for_decision(request_id, acting_user_id)
            request.updated_at = await self.set_status(request_id, RequestStatus.REJECTED)
        request.status = RequestStatus.REJECTED
        return request

    async def _get_request(self, request_id: str) -> ExchangeRequest:
        request = await self.requests.get(request_id)
        if request is None:
            raise TransitionRejected(RejectionReason.NOT_FOUND, request_id, f"Request {request_id} not found")
        return request

    async def _load_for_decision(self, request_id: str, acting_user_id: str) -> ExchangeRequest:
        """Re-read the request under the listing's lock and check it can be decided."""
        request = await self._get_request(request_id)
        if request.owner_id != acting_user_id:
            logger.warning(f"User {acting_user_id} tried to decide request {request_id} owned by {request.owner_id}")
            raise TransitionRejected(
                RejectionReason.NOT_OWNER, request_id, "Only the listing owner can approve or reject a request"
            )
        if not request.is_pending:
            raise TransitionRejected(
                RejectionReason.NOT_PENDING,
                request_id,
                f"Request {request_id} is already {request.status.value}",
            )
        return request
