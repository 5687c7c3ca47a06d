"""Helpers for historical lookups and document timestamps."""

from __future__ import annotations

from datetime import date, datetime, timezone


def parse_date(value: str | date) -> date:
    """Parse a date string in ISO format to :class:`date`."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def to_datetime(timestamp: float | None) -> datetime | None:
    """Return an aware UTC datetime for epoch seconds (``None`` passes through)."""

    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


__all__ = ["parse_date", "to_datetime"]
