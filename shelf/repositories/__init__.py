"""Data access for listings, exchange requests and profiles."""

from .base import ListingStore, ProfileStore, RequestStore
from .listing_repository import ListingRepository
from .profile_repository import ProfileRepository
from .request_repository import RequestRepository

__all__ = [
    "ListingRepository",
    "ListingStore",
    "ProfileRepository",
    "ProfileStore",
    "RequestRepository",
    "RequestStore",
]
