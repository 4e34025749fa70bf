"""Coercion of loosely typed database rows into the API record shapes.

Rows come back from the database as key/value mappings whose values may be
``None``, numbers stored as strings, and so on. Every function here is total:
each field is converted explicitly and falls back to a fixed default, so the
rest of the code never has to guess at a row's structure.
"""
import time
import uuid
from collections.abc import Mapping
from typing import Any, Optional


def generate_id() -> str:
    return uuid.uuid4().hex


def _string(value: Any, default: str = "") -> str:
    return default if value is None else str(value)


def _optional_string(value: Any) -> Optional[str]:
    return str(value) if value else None


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _capacity(value: Any) -> Optional[int]:
    capacity = _optional_int(value)
    if capacity is None or capacity < 1:
        return None
    return capacity


def current_time_millis() -> int:
    return int(time.time() * 1000)


def transform_event_row(row: Mapping) -> dict:
    """Event row -> event dict. ``created_at`` is in seconds."""
    if not isinstance(row, Mapping):
        raise ValueError("Invalid event row data")

    description = row.get("description")
    # Descriptions imported from seed files carry escaped newlines
    description = description.replace("\\n", "\n") if isinstance(description, str) else ""

    return {
        "id": _string(row.get("id")),
        "title": _string(row.get("title")),
        "date": _string(row.get("date")),
        "location": _string(row.get("location")),
        "description": description,
        "image_url": _optional_string(row.get("image_url")),
        "capacity": _capacity(row.get("capacity")),
        "creator_id": _optional_string(row.get("creator_id")),
        "created_at": _optional_int(row.get("created_at")),
    }


def transform_attendee_row(row: Mapping) -> dict:
    """Attendee row -> attendee dict. ``created_at`` is in milliseconds."""
    if not isinstance(row, Mapping):
        raise ValueError("Invalid attendee row data")

    created_at = _optional_int(row.get("created_at"))
    return {
        "id": _string(row.get("id")),
        "event_id": _string(row.get("event_id")),
        "email": _string(row.get("email")),
        "user_id": _optional_string(row.get("user_id")),
        "created_at": created_at if created_at is not None else current_time_millis(),
    }


def transform_user_row(row: Mapping) -> dict:
    if not isinstance(row, Mapping):
        raise ValueError("Invalid user row data")

    created_at = row.get("created_at")
    updated_at = row.get("updated_at")
    return {
        "id": _string(row.get("id")),
        "email": _string(row.get("email")),
        "name": _optional_string(row.get("name")),
        "image": _optional_string(row.get("image")),
        "email_verified": bool(row.get("email_verified")),
        "is_anonymous": bool(row.get("is_anonymous")),
        "created_at": created_at.isoformat() if hasattr(created_at, "isoformat") else _optional_string(created_at),
        "updated_at": updated_at.isoformat() if hasattr(updated_at, "isoformat") else _optional_string(updated_at),
    }


def with_attendee_count(event: dict, count: Any) -> dict:
    return {**event, "attendees": _optional_int(count) or 0}
