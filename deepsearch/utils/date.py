"""Utility functions for date and time handling."""

from datetime import datetime
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Current timezone-aware UTC datetime."""
    return datetime.now(ZoneInfo("UTC"))


def get_current_datetime() -> str:
    """
    Get current date and time in ISO format.

    Returns:
        Current datetime string in ISO format
    """
    return utc_now().isoformat()


def compact_timestamp(moment: datetime) -> str:
    """Render ``moment`` as ``YYYYMMDDHHMM`` for file names."""
    return moment.strftime("%Y%m%d%H%M")
