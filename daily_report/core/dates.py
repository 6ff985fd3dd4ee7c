"""
Calendar-date helpers.

Report dates are plain calendar dates in the server's local time zone.
"""

from datetime import date, datetime, timezone
from typing import Optional


def today() -> date:
    return date.today()


def is_future(value: date, reference: Optional[date] = None) -> bool:
    """True if `value` falls on a later calendar day than `reference` (default today).

    Any time on the current day counts as "not in the future".
    """
    return value > (reference or today())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """ISO 8601 with an explicit UTC offset; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
