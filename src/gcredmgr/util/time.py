from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def now_utc() -> datetime:
    """Return current time as tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """
    Return dt as a tz-aware UTC datetime.

    google-auth reports credential expiry as a naive datetime in UTC, so naive
    values are interpreted as UTC rather than rejected.
    """
    if not isinstance(dt, datetime):
        raise TypeError("dt must be a datetime")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def expiry_from_ttl(ttl_seconds: float, now: Optional[datetime] = None) -> datetime:
    """Return the tz-aware UTC instant ttl_seconds after now."""
    base = as_utc(now) if now is not None else now_utc()
    return base + timedelta(seconds=ttl_seconds)


def ttl_from_expiry(
    expiry: Optional[datetime],
    now: Optional[datetime] = None,
) -> Optional[float]:
    """
    Return remaining lifetime in seconds of a token expiring at expiry.

    Returns None when expiry is unknown. Never negative.
    """
    if expiry is None:
        return None
    base = as_utc(now) if now is not None else now_utc()
    return max(0.0, (as_utc(expiry) - base).total_seconds())
