"""Timestamp helpers shared by positions, pages and records.

Notion reports ``created_time``/``last_edited_time`` as ISO 8601 strings with
minute precision (``2024-01-15T10:30:00.000Z``). Everything in this package is
handled as timezone-aware UTC datetimes.
"""

from __future__ import annotations

import datetime
import re

# Zero value of a watermark: nothing has been read yet.
ZERO_TIME = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


# Fractional seconds of a timestamp
_FRACTION = re.compile(r"(?<=\d\d:\d\d:\d\d)\.(\d+)")


def _six_digit_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def parse_iso8601(timestamp: str) -> datetime.datetime:
    """Parse ISO 8601 timestamp strings into timezone-aware datetime objects.

    Handles multiple timestamp formats:
    - Date-only: "YYYY-MM-DD"
    - ISO 8601 with Z: "2024-01-15T10:30:00Z"
    - ISO 8601 with offset: "2024-01-15T10:30:00+00:00"
    - ISO 8601 without timezone: "2024-01-15T10:30:00"

    Always returns datetime with UTC timezone for consistent comparison.
    """
    timestamp_str = timestamp.strip()

    if len(timestamp_str) == 10 and "T" not in timestamp_str:
        date_obj = datetime.date.fromisoformat(timestamp_str)
        return datetime.datetime(date_obj.year, date_obj.month, date_obj.day, tzinfo=datetime.timezone.utc)

    if timestamp_str.endswith("Z"):
        timestamp_str = timestamp_str[:-1] + "+00:00"

    # fromisoformat() before Python 3.11 only takes 3 or 6 fraction digits,
    # while RFC 3339 allows any number (Go writes up to 9)
    timestamp_str = _FRACTION.sub(_six_digit_fraction, timestamp_str, count=1)

    datetime_object = datetime.datetime.fromisoformat(timestamp_str)

    if datetime_object.tzinfo is None:
        return datetime_object.replace(tzinfo=datetime.timezone.utc)

    return datetime_object.astimezone(datetime.timezone.utc)


def format_rfc3339(value: datetime.datetime) -> str:
    """Format a datetime as RFC 3339 in UTC with a ``Z`` suffix.

    Microseconds are written (as six digits) only when non-zero, so the output
    parses back with `parse_iso8601` to the same value and re-formats to the
    same string.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    value = value.astimezone(datetime.timezone.utc)

    # isoformat() omits microseconds when they are zero
    return value.replace(tzinfo=None).isoformat() + "Z"


def truncate_to_minute(value: datetime.datetime) -> datetime.datetime:
    return value.replace(second=0, microsecond=0)
