"""Helpers shared by the PocketBase-backed repositories."""

from __future__ import annotations

from typing import Any

from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]


def quote(value: str) -> str:
    """Quote a string literal for a PocketBase filter expression."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from an SDK record or a plain dict."""
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def is_not_found(error: ClientResponseError) -> bool:
    return getattr(error, "status", None) == 404


def is_id_conflict(error: ClientResponseError) -> bool:
    """True when a create was refused because the record id already exists."""
    if getattr(error, "status", None) != 400:
        return False
    payload = getattr(error, "data", None) or {}
    field_errors = payload.get("data", {}) if isinstance(payload, dict) else {}
    return isinstance(field_errors, dict) and "id" in field_errors
