"""Datetime utility functions."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time as a naive datetime.

    AX stores CREATEDDATETIME in UTC without an offset.
    """
    return datetime.now(UTC).replace(tzinfo=None)
