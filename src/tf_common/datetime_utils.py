"""Datetime helpers for API payloads."""

from datetime import UTC, datetime


def to_iso(dt: datetime | None) -> str | None:
    """ISO 8601 in UTC; naive values are taken to be UTC. None passes through."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()
