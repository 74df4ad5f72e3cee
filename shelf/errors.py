"""Exchange workflow error classes.

Store failures are not differentiated: network failures, permission
denials and server errors all surface as StoreOperationError.
"""

from __future__ import annotations

from enum import Enum


class ShelfError(Exception):
    """Base exception for exchange errors."""

    pass


class StoreOperationError(ShelfError):
    """Raised when a read or write against the document store fails."""

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Store operation failed ({operation}){detail}")


class DuplicateRequestError(ShelfError):
    """Raised when the requester already has a request for the listing."""

    def __init__(self, listing_id: str, requester_id: str):
        self.listing_id = listing_id
        self.requester_id = requester_id
        super().__init__(f"User {requester_id} has already requested listing {listing_id}")


class RejectionReason(Enum):
    """Why a guarded status transition was refused"""

    NOT_FOUND = "not_found"
    NOT_OWNER = "not_owner"
    NOT_PENDING = "not_pending"
    LISTING_UNAVAILABLE = "listing_unavailable"


class TransitionRejected(ShelfError):
    """Raised when an approve/reject is not allowed for the acting user."""

    def __init__(self, reason: RejectionReason, request_id: str, detail: str = ""):
        self.reason = reason
        self.request_id = request_id
        super().__init__(detail or f"Cannot update request {request_id}: {reason.value}")
