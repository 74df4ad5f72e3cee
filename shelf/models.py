"""Core domain models for the book exchange.

These models represent listings, exchange requests and user profiles
independently of the document store they are persisted in."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class Condition(Enum):
    """Physical condition of a listed book"""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @classmethod
    def parse(cls, value: Any) -> Condition | None:
        """Parse a stored condition, tolerating the capitalised form ("Good").

        Returns None for missing or unrecognised values.
        """
        if isinstance(value, Condition):
            return value
        if not value or not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.debug(f"Unrecognised listing condition: {value!r}")
            return None


class RequestStatus(Enum):
    """Status of an exchange request

    COMPLETED is part of the stored schema but no operation produces it.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


# Statuses an owner may write onto a request
DECISION_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED})


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp as stored by clients.

    Accepts datetimes (returned as-is, assumed UTC when naive), ISO strings
    with a trailing ``Z`` or offset, and the space-separated form PocketBase
    uses for its autodate fields. Empty values yield None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if not isinstance(value, str):
        return None
    text = value.strip().replace(" ", "T", 1)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Unparseable timestamp: {value!r}")
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def parse_price(value: Any) -> float | None:
    """Parse a stored price. Missing, zero or non-numeric values yield None."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Unparseable listing price: {value!r}")
        return None
    return price or None


def format_timestamp(value: datetime | None) -> str | None:
    """Format a datetime the way it is stored: ISO-8601 UTC with ``Z``."""
    if value is None:
        return None
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


@dataclass
class Listing:
    """A book or set of notes offered by one student"""

    id: str
    title: str
    owner_id: str
    is_available: bool = True
    subject: str = ""
    description: str = ""
    price: float | None = None
    condition: Condition | None = None
    image_urls: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    author: str | None = None
    regulation: str | None = None
    year: str | None = None

    @property
    def is_free(self) -> bool:
        """A listing without a price (or priced at zero) is given away."""
        return not self.price

    @property
    def cover_image(self) -> str | None:
        return self.image_urls[0] if self.image_urls else None


@dataclass
class ExchangeRequest:
    """A proposal from one student to acquire another student's listing"""

    listing_id: str
    requester_id: str
    owner_id: str
    status: RequestStatus = RequestStatus.PENDING
    message: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


@dataclass
class Profile:
    """Public part of a user profile, used when showing who sent a request"""

    id: str
    name: str = ""
    email: str = ""
