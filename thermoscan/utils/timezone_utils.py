"""
Centralized timezone utilities for consistent datetime handling across the application.

All timestamps are handled in UTC with proper timezone awareness.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get current UTC time with timezone awareness.

    This should be used instead of datetime.now() or datetime.utcnow()
    throughout the application to ensure consistency.

    Returns:
        datetime: Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)
