"""Utility functions and helpers."""

from order_intake.utils.datetime_utils import utc_now

__all__ = [
    "utc_now",
]
