"""Profile repository - read-only lookups in the ``users`` auth collection."""

from __future__ import annotations

import asyncio
import logging

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ..errors import StoreOperationError
from ..models import Profile
from ._pocketbase import field, is_not_found

logger = logging.getLogger(__name__)


class ProfileRepository:
    """Repository for Profile data access"""

    COLLECTION_NAME = "users"

    def __init__(self, pb: PocketBase) -> None:
        self.pb = pb

    async def get(self, user_id: str) -> Profile | None:
        try:
            record = await asyncio.to_thread(self.pb.collection(self.COLLECTION_NAME).get_one, user_id)
        except ClientResponseError as e:
            if is_not_found(e):
                return None
            raise StoreOperationError("get profile", e) from e

        return Profile(
            id=field(record, "id"),
            name=field(record, "name", "") or "",
            email=field(record, "email", "") or "",
        )
