"""
Token validation for PocketBase-issued user tokens.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, cast

import httpx
import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

logger = logging.getLogger(__name__)

# PocketBase's fixed collection id for _superusers
SUPERUSERS_COLLECTION_IDS = frozenset({"pbc_3142635823", "_superusers"})


def decode_unverified_claims(token: str) -> dict[str, Any]:
    """Decode claims WITHOUT verifying the signature. For inspection only.

    Expiry is still checked so stale tokens never cost a round trip.

    Raises:
        ExpiredSignatureError: if the token's exp claim is in the past
        InvalidTokenError: if the token is malformed
    """
    return cast(
        dict[str, Any],
        jwt.decode(token, options={"verify_signature": False, "verify_exp": True}),
    )


class PocketBaseTokenValidator:
    """Validates PocketBase user tokens by calling the auth-refresh endpoint."""

    def __init__(self, pocketbase_url: str, collection: str = "users", cache_ttl: float = 60):
        self.pocketbase_url = pocketbase_url.rstrip("/")
        self.collection = collection
        self._validation_cache: dict[str, tuple[dict[str, Any], float]] = {}  # token_hash -> (claims, expiry)
        self._cache_ttl = cache_ttl

    def validate_token(self, token: str) -> dict[str, Any] | None:
        """Validate a token and return user claims, or None if invalid."""
        try:
            unverified = decode_unverified_claims(token)
        except ExpiredSignatureError:
            logger.debug("Token has expired")
            return None
        except InvalidTokenError as e:
            logger.debug(f"Malformed token: {e}")
            return None

        if unverified.get("collectionId", "") in SUPERUSERS_COLLECTION_IDS:
            logger.warning("SECURITY: Rejecting _superusers admin token for API authentication")
            return None

        cache_key = hashlib.sha256(token.encode()).hexdigest()[:32]
        cached = self._validation_cache.get(cache_key)
        if cached is not None:
            claims, expiry = cached
            if time.time() < expiry:
                logger.debug("Using cached PocketBase token validation")
                return claims

        try:
            response = httpx.post(
                f"{self.pocketbase_url}/api/collections/{self.collection}/auth-refresh",
                headers={"Authorization": f"Bearer {token}"},
                timeout=5.0,
            )
        except httpx.TimeoutException:
            logger.warning("PocketBase token validation timed out")
            return None
        except httpx.HTTPError as e:
            logger.error(f"Error validating PocketBase token: {type(e).__name__}: {e}")
            return None

        if response.status_code != 200:
            logger.debug(f"PocketBase auth-refresh returned status {response.status_code}")
            return None

        record = response.json().get("record", {})
        claims = {
            "sub": record.get("id", ""),
            "email": record.get("email", ""),
            "name": record.get("name", ""),
        }
        self._validation_cache[cache_key] = (claims, time.time() + self._cache_ttl)
        logger.debug(f"PocketBase token validated for user {claims['sub']}")
        return claims


def extract_bearer_token(authorization_header: str | None) -> str | None:
    """Extract bearer token from Authorization header."""
    if not authorization_header:
        return None

    parts = authorization_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]
