"""
Timestamps are stored as naive UTC datetimes so that ordering and lockout
comparisons behave the same on every database backend.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

# Lockout end assigned to deleted users.
NEVER_EXPIRES = datetime.max


def utc_now() -> datetime:
    """Return the current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
