"""Timestamp helpers for the GitHub REST wire format.

GitHub returns timestamps as ``YYYY-MM-DDTHH:MM:SSZ``: UTC, whole seconds and a
literal ``Z`` suffix. Anything else is treated as malformed data.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .errors import DataValidationError

WIRE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse a wire-format timestamp into a timezone-aware UTC datetime.

    Raises:
        DataValidationError: If ``value`` is missing or does not match the
            wire format exactly.
    """
    if not value:
        raise DataValidationError("Missing required timestamp value.")

    try:
        parsed = datetime.strptime(value, WIRE_FORMAT)
    except (TypeError, ValueError) as exc:
        raise DataValidationError(
            f"Malformed timestamp {value!r}: expected format YYYY-MM-DDTHH:MM:SSZ."
        ) from exc

    return parsed.replace(tzinfo=timezone.utc)


def parse_optional_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp that GitHub reports as ``null`` when absent."""
    if value is None:
        return None
    return parse_timestamp(value)


def format_timestamp(value: datetime) -> str:
    """Format a datetime in the wire format, converting aware values to UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(WIRE_FORMAT)


def seconds_between(start: datetime, end: datetime) -> int:
    """Return the signed number of whole seconds from ``start`` to ``end``."""
    return int((end - start).total_seconds())
