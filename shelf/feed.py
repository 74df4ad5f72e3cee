"""Feed composition and request statistics.

Pure functions over already-fetched listings and requests. No store access
happens here, so the results are deterministic for a given input.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from .models import ExchangeRequest, Listing, RequestStatus


def approved_listing_ids(requests: Iterable[ExchangeRequest]) -> set[str]:
    """Listings that have been promised to someone."""
    return {r.listing_id for r in requests if r.status == RequestStatus.APPROVED}


def compute_visible_feed(listings: Iterable[Listing], requests: Iterable[ExchangeRequest]) -> list[Listing]:
    """Listings eligible for the public feed.

    A listing is visible iff it is available and no request referencing it
    has been approved. Input order is preserved.
    """
    promised = approved_listing_ids(requests)
    return [listing for listing in listings if listing.is_available and listing.id not in promised]


def feed_for_viewer(
    listings: Iterable[Listing],
    requests: Iterable[ExchangeRequest],
    viewer_id: str | None,
) -> list[Listing]:
    """The visible feed minus the viewer's own listings."""
    visible = compute_visible_feed(listings, requests)
    if not viewer_id:
        return visible
    return [listing for listing in visible if listing.owner_id != viewer_id]


def subjects(listings: Iterable[Listing]) -> list[str]:
    """Distinct non-empty subjects, in first-seen order."""
    return list(dict.fromkeys(listing.subject for listing in listings if listing.subject))


@dataclass
class RequestSummary:
    """Counts of requests per status."""

    total: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    # Pending requests on a listing that already has an approved request
    stranded_request_ids: list[str] = field(default_factory=list)


def summarize_requests(requests: Iterable[ExchangeRequest]) -> RequestSummary:
    all_requests = list(requests)
    counts = Counter(r.status.value for r in all_requests)
    promised = approved_listing_ids(all_requests)

    return RequestSummary(
        total=len(all_requests),
        by_status={status.value: counts.get(status.value, 0) for status in RequestStatus},
        stranded_request_ids=[
            r.id for r in all_requests if r.id and r.is_pending and r.listing_id in promised
        ],
    )
