"""
Pydantic schemas for the EduShelf API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .exchange_requests import (
    ExchangeRequestCreate,
    ExchangeRequestResponse,
    ExchangeRequestView,
    ListingSummary,
    ReceivedRequestsResponse,
    RequesterSummary,
    RequestStatsResponse,
    SentRequestsResponse,
)
from .listings import FeedResponse, ListingResponse

__all__ = [
    # Exchange requests
    "ExchangeRequestCreate",
    "ExchangeRequestResponse",
    "ExchangeRequestView",
    "ListingSummary",
    "ReceivedRequestsResponse",
    "RequesterSummary",
    "RequestStatsResponse",
    "SentRequestsResponse",
    # Listings
    "FeedResponse",
    "ListingResponse",
]
