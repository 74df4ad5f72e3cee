"""
Requests Router - Exchange request endpoints.

Requesters send requests for listings; listing owners approve or reject them.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from shelf.auth_middleware import AuthUser, get_current_user
from shelf.errors import DuplicateRequestError, RejectionReason, StoreOperationError, TransitionRejected
from shelf.feed import summarize_requests
from shelf.repositories.base import ListingStore, ProfileStore, RequestStore
from shelf.workflow import RequestWorkflow

from ..dependencies import get_listing_store, get_profile_store, get_request_store, get_workflow
from ..schemas.exchange_requests import (
    ExchangeRequestCreate,
    ExchangeRequestResponse,
    ReceivedRequestsResponse,
    RequestStatsResponse,
    SentRequestsResponse,
)
from ..services.request_views import RequestViewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/requests", tags=["requests"])

REJECTION_STATUS_CODES = {
    RejectionReason.NOT_FOUND: 404,
    RejectionReason.NOT_OWNER: 403,
    RejectionReason.NOT_PENDING: 409,
    RejectionReason.LISTING_UNAVAILABLE: 409,
}


def get_request_view_service(
    requests: RequestStore = Depends(get_request_store),
    listings: ListingStore = Depends(get_listing_store),
    profiles: ProfileStore = Depends(get_profile_store),
) -> RequestViewService:
    return RequestViewService(requests=requests, listings=listings, profiles=profiles)


def _rejection_to_http(error: TransitionRejected) -> HTTPException:
    return HTTPException(status_code=REJECTION_STATUS_CODES[error.reason], detail=str(error))


@router.post("", response_model=ExchangeRequestResponse, status_code=201)
async def create_request(
    body: ExchangeRequestCreate,
    user: AuthUser = Depends(get_current_user),
    listings: ListingStore = Depends(get_listing_store),
    workflow: RequestWorkflow = Depends(get_workflow),
) -> ExchangeRequestResponse:
    """Send an exchange request for a listing.

    The listing owner is copied onto the request from the listing itself.
    """
    try:
        listing = await listings.get(body.listing_id)
        if listing is None:
            raise HTTPException(status_code=404, detail=f"Listing '{body.listing_id}' not found")
        if listing.owner_id == user.user_id:
            raise HTTPException(status_code=400, detail="You cannot request your own listing")
        if not listing.is_available:
            raise HTTPException(status_code=409, detail="This listing is no longer available")

        created = await workflow.create_request(
            listing_id=listing.id,
            requester_id=user.user_id,
            owner_id=listing.owner_id,
            message=body.message,
        )
    except DuplicateRequestError:
        raise HTTPException(status_code=409, detail="You have already requested this book")
    except StoreOperationError as e:
        logger.error(f"Failed to send request for listing {body.listing_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to send request")

    return ExchangeRequestResponse.from_request(created)


@router.get("/received", response_model=ReceivedRequestsResponse)
async def list_received_requests(
    user: AuthUser = Depends(get_current_user),
    views: RequestViewService = Depends(get_request_view_service),
) -> ReceivedRequestsResponse:
    """Requests other students have sent for the caller's listings."""
    try:
        return await views.list_received(user.user_id)
    except StoreOperationError as e:
        logger.error(f"Failed to load received requests for {user.user_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to load requests")


@router.get("/sent", response_model=SentRequestsResponse)
async def list_sent_requests(
    user: AuthUser = Depends(get_current_user),
    views: RequestViewService = Depends(get_request_view_service),
) -> SentRequestsResponse:
    """Requests the caller has sent."""
    try:
        return await views.list_sent(user.user_id)
    except StoreOperationError as e:
        logger.error(f"Failed to load sent requests for {user.user_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to load requests")


@router.get("/stats", response_model=RequestStatsResponse)
async def request_stats(
    user: AuthUser = Depends(get_current_user),
    requests: RequestStore = Depends(get_request_store),
) -> RequestStatsResponse:
    """Counts per status of requests on the caller's listings, plus stranded pending ones.

    The system-wide report is left to scripts/request_stats.py.
    """
    try:
        received = await requests.list_for_owner(user.user_id)
    except StoreOperationError as e:
        logger.error(f"Failed to load requests for stats of {user.user_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to load requests")

    summary = summarize_requests(received)
    return RequestStatsResponse(
        total=summary.total,
        by_status=summary.by_status,
        stranded_request_ids=summary.stranded_request_ids,
    )


@router.post("/{request_id}/approve", response_model=ExchangeRequestResponse)
async def approve_request(
    request_id: str,
    user: AuthUser = Depends(get_current_user),
    workflow: RequestWorkflow = Depends(get_workflow),
) -> ExchangeRequestResponse:
    """Approve a pending request; closes the listing and rejects competing requests."""
    try:
        approved = await workflow.approve(request_id, user.user_id)
    except TransitionRejected as e:
        raise _rejection_to_http(e)
    except StoreOperationError as e:
        logger.error(f"Failed to approve request {request_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to update request status")
    return ExchangeRequestResponse.from_request(approved)


@router.post("/{request_id}/reject", response_model=ExchangeRequestResponse)
async def reject_request(
    request_id: str,
    user: AuthUser = Depends(get_current_user),
    workflow: RequestWorkflow = Depends(get_workflow),
) -> ExchangeRequestResponse:
    """Reject a pending request."""
    try:
        rejected = await workflow.reject(request_id, user.user_id)
    except TransitionRejected as e:
        raise _rejection_to_http(e)
    except StoreOperationError as e:
        logger.error(f"Failed to reject request {request_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to update request status")
    return ExchangeRequestResponse.from_request(rejected)
