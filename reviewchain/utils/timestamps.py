"""
Timestamp helpers.

Every timestamp the service produces is UTC with millisecond precision and
is rendered as ``2024-05-01T12:30:45.123Z``. The rendering is part of the
review-hash input, so it must not change between capture, storage and
response.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current UTC time truncated to whole milliseconds."""
    now = datetime.now(UTC)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def format_timestamp(value: datetime) -> str:
    """
    Render a datetime as ISO-8601 UTC with milliseconds and a ``Z`` suffix.

    Naive datetimes are assumed to already be UTC (SQLite drops tzinfo).
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
