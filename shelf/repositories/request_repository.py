"""Request repository for data access.

Handles all database operations related to ExchangeRequest records."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ..errors import DuplicateRequestError, StoreOperationError
from ..logging_config import TRACE
from ..models import ExchangeRequest, RequestStatus, format_timestamp, parse_timestamp
from ._pocketbase import field, is_id_conflict, is_not_found, quote

logger = logging.getLogger(__name__)


class RequestRepository:
    """Repository for ExchangeRequest data access"""

    COLLECTION_NAME = "exchange_requests"
    LISTINGS_COLLECTION = "books"

    def __init__(self, pb: PocketBase) -> None:
        """Initialize repository with PocketBase client.

        Args:
            pb: PocketBase client instance
        """
        self.pb = pb

    async def get(self, request_id: str) -> ExchangeRequest | None:
        """Fetch a request by id, or None if it does not exist."""
        try:
            record = await asyncio.to_thread(self.pb.collection(self.COLLECTION_NAME).get_one, request_id)
        except ClientResponseError as e:
            if is_not_found(e):
                return None
            logger.error(f"Error fetching request {request_id}: {e}")
            raise StoreOperationError("get request", e) from e
        return self._map_from_db(record)

    async def list_all(self) -> list[ExchangeRequest]:
        return await self._list(None, "list requests")

    async def list_for_owner(self, owner_id: str) -> list[ExchangeRequest]:
        """Requests received by a listing owner."""
        return await self._list(f"owner_id = {quote(owner_id)}", "list received requests")

    async def list_for_requester(self, requester_id: str) -> list[ExchangeRequest]:
        """Requests sent by a user."""
        return await self._list(f"requester_id = {quote(requester_id)}", "list sent requests")

    async def list_for_listing(self, listing_id: str, status: RequestStatus | None = None) -> list[ExchangeRequest]:
        """Requests referencing a listing, optionally narrowed to one status."""
        filter_str = f"book_id = {quote(listing_id)}"
        if status is not None:
            filter_str += f" && status = {quote(status.value)}"
        return await self._list(filter_str, "list listing requests")

    async def find_existing(self, listing_id: str, requester_id: str) -> ExchangeRequest | None:
        """Find a request already sent by requester_id for listing_id.

        This is a read-then-write check; the deterministic record id used by
        insert() is what actually prevents duplicates.
        """
        filter_str = f"book_id = {quote(listing_id)} && requester_id = {quote(requester_id)}"
        try:
            result = await asyncio.to_thread(
                self.pb.collection(self.COLLECTION_NAME).get_list,
                page=1,
                per_page=1,
                query_params={"filter": filter_str},
            )
        except ClientResponseError as e:
            logger.error(f"Error finding existing request: {e}")
            raise StoreOperationError("find existing request", e) from e

        if result.items:
            return self._map_from_db(result.items[0])
        return None

    async def insert(self, request: ExchangeRequest) -> ExchangeRequest:
        """Create a request using request.id as the record id."""
        data = self._map_to_db(request)
        if request.id:
            data["id"] = request.id
        try:
            record = await asyncio.to_thread(self.pb.collection(self.COLLECTION_NAME).create, data)
        except ClientResponseError as e:
            if is_id_conflict(e):
                raise DuplicateRequestError(request.listing_id, request.requester_id) from e
            logger.error(
                f"Error creating exchange request: {e} "
                f"(listing={request.listing_id}, requester={request.requester_id})"
            )
            raise StoreOperationError("create request", e) from e
        return self._map_from_db(record)

    async def update_status(self, request_id: str, status: RequestStatus, updated_at: datetime) -> None:
        """Overwrite status and updated_at on a single request."""
        data = {"status": status.value, "updated_at": format_timestamp(updated_at)}
        try:
            await asyncio.to_thread(self.pb.collection(self.COLLECTION_NAME).update, request_id, data)
        except ClientResponseError as e:
            logger.error(f"Error updating request {request_id}: {e}")
            raise StoreOperationError("update request status", e) from e

    async def commit_approval(
        self,
        request_id: str,
        listing_id: str,
        sibling_ids: list[str],
        updated_at: datetime,
    ) -> None:
        """Approve a request transactionally via the PocketBase batch API.

        In one transaction: the request becomes approved, the listing is marked
        unavailable and every sibling request is rejected. Either all writes
        land or none do.
        """
        stamp = format_timestamp(updated_at)
        batch = self.pb.create_batch()
        batch.collection(self.COLLECTION_NAME).update(
            request_id, {"status": RequestStatus.APPROVED.value, "updated_at": stamp}
        )
        batch.collection(self.LISTINGS_COLLECTION).update(listing_id, {"is_available": False})
        for sibling_id in sibling_ids:
            batch.collection(self.COLLECTION_NAME).update(
                sibling_id, {"status": RequestStatus.REJECTED.value, "updated_at": stamp}
            )

        logger.log(TRACE, f"Sending approval batch with {2 + len(sibling_ids)} writes for request {request_id}")
        try:
            await asyncio.to_thread(batch.send)
        except ClientResponseError as e:
            logger.error(f"Approval transaction for request {request_id} failed: {e}")
            raise StoreOperationError("approve request", e) from e

    async def _list(self, filter_str: str | None, operation: str) -> list[ExchangeRequest]:
        query_params = {"filter": filter_str} if filter_str else {}
        try:
            records = await asyncio.to_thread(
                self.pb.collection(self.COLLECTION_NAME).get_full_list,
                query_params=query_params,
            )
        except ClientResponseError as e:
            logger.error(f"Error during {operation}: {e}")
            raise StoreOperationError(operation, e) from e
        return [self._map_from_db(r) for r in records]

    def _map_to_db(self, request: ExchangeRequest) -> dict[str, Any]:
        """Map ExchangeRequest model to database format

        Note: the listing reference is stored as ``book_id``.
        """
        return {
            "book_id": request.listing_id,
            "requester_id": request.requester_id,
            "owner_id": request.owner_id,
            "message": request.message,
            "status": request.status.value,
            "created_at": format_timestamp(request.created_at),
            "updated_at": format_timestamp(request.updated_at),
        }

    def _map_from_db(self, record: Any) -> ExchangeRequest:
        """Map database record to ExchangeRequest model"""
        raw_status = field(record, "status") or RequestStatus.PENDING.value
        try:
            status = RequestStatus(raw_status)
        except ValueError:
            logger.warning(f"Request {field(record, 'id')} has unknown status {raw_status!r}, treating as pending")
            status = RequestStatus.PENDING

        return ExchangeRequest(
            id=field(record, "id"),
            listing_id=field(record, "book_id", "") or "",
            requester_id=field(record, "requester_id", "") or "",
            owner_id=field(record, "owner_id", "") or "",
            status=status,
            message=field(record, "message") or "",
            created_at=parse_timestamp(field(record, "created_at")),
            updated_at=parse_timestamp(field(record, "updated_at")),
        )
