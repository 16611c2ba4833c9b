"""
Conversion between stored nanosecond timestamps and display strings.

Timestamps are stored as integer nanoseconds since the Unix epoch, derived
from millisecond-resolution datetimes (milliseconds x 1_000_000). Display
strings are ISO-8601 in UTC with millisecond precision, e.g.
``2025-06-01T08:30:00.000Z``.
"""

import threading
import time
import uuid
from datetime import UTC, datetime, timedelta

NANOS_PER_MILLI = 1_000_000
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MILLI = timedelta(milliseconds=1)


def parse_date(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime string. Naive values are taken as UTC.

    Raises:
        ValueError: if the string is not a valid calendar date.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("date must be a non-empty string")
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    try:
        return parsed.astimezone(UTC)
    except OverflowError as e:
        raise ValueError(f"date out of range: {value}") from e


def to_nanos(moment: datetime) -> int:
    """Store a datetime; anything below millisecond resolution is truncated."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    millis = (moment - EPOCH) // _ONE_MILLI
    return millis * NANOS_PER_MILLI


def from_nanos(nanos: int) -> datetime:
    return EPOCH + timedelta(milliseconds=nanos // NANOS_PER_MILLI)


def display_time(nanos: int) -> str:
    return from_nanos(nanos).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def store_date_string(value: str) -> int:
    return to_nanos(parse_date(value))


class SystemClock:
    """Wall clock in nanoseconds that never goes backwards."""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            self._last = max(self._last, time.time_ns())
            return self._last


def new_id() -> str:
    return str(uuid.uuid4())
