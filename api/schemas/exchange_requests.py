"""
Pydantic schemas for exchange request endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from shelf.models import ExchangeRequest


class ExchangeRequestCreate(BaseModel):
    """Request body for sending an exchange request."""

    listing_id: str = Field(min_length=1)
    message: str = Field(default="", max_length=2000)


class ExchangeRequestResponse(BaseModel):
    """Response model for a single exchange request."""

    id: str
    listing_id: str
    requester_id: str
    owner_id: str
    status: str
    message: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_request(cls, request: ExchangeRequest) -> ExchangeRequestResponse:
        return cls(
            id=request.id or "",
            listing_id=request.listing_id,
            requester_id=request.requester_id,
            owner_id=request.owner_id,
            status=request.status.value,
            message=request.message,
            created_at=request.created_at,
            updated_at=request.updated_at,
        )


class ListingSummary(BaseModel):
    """The parts of a listing shown next to a request."""

    title: str
    author: str | None = None
    image_url: str | None = None


class RequesterSummary(BaseModel):
    name: str
    email: str


class ExchangeRequestView(ExchangeRequestResponse):
    """A request composed with its listing and requester.

    Either composed field is null when its lookup failed or the record is gone.
    """

    listing: ListingSummary | None = None
    requester: RequesterSummary | None = None


class ReceivedRequestsResponse(BaseModel):
    requests: list[ExchangeRequestView]
    pending_count: int


class SentRequestsResponse(BaseModel):
    requests: list[ExchangeRequestView]


class RequestStatsResponse(BaseModel):
    """Request counts per status."""

    total: int
    by_status: dict[str, int]
    stranded_request_ids: list[str]
