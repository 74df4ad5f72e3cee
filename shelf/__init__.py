"""
Shelf - Core business logic for the student book exchange.

This package contains:
- models: Domain models (Listing, ExchangeRequest, Profile)
- workflow: Exchange request lifecycle (create, approve, reject)
- feed: Public feed composition and request statistics
- repositories: PocketBase-backed data access
"""

from shelf.errors import (
    DuplicateRequestError,
    RejectionReason,
    StoreOperationError,
    TransitionRejected,
)
from shelf.feed import compute_visible_feed, feed_for_viewer, subjects, summarize_requests
from shelf.models import Condition, ExchangeRequest, Listing, Profile, RequestStatus
from shelf.workflow import RequestWorkflow, request_key

__all__ = [
    "Condition",
    "DuplicateRequestError",
    "ExchangeRequest",
    "Listing",
    "Profile",
    "RejectionReason",
    "RequestStatus",
    "RequestWorkflow",
    "StoreOperationError",
    "TransitionRejected",
    "compute_visible_feed",
    "feed_for_viewer",
    "request_key",
    "subjects",
    "summarize_requests",
]
