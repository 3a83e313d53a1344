from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

import pytz

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp. A trailing 'Z' is accepted as UTC."""
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    return datetime.fromisoformat(v)


def to_site_local(value: datetime, timezone_str: str) -> datetime:
    """Convert an aware timestamp to naive local time in the given timezone.

    Naive timestamps are assumed to be local already and returned unchanged.
    """
    if value.tzinfo is None:
        return value
    tz = pytz.timezone(timezone_str)
    return value.astimezone(tz).replace(tzinfo=None)


def parse_range_bound(value: Optional[str], *, end: bool, timezone_str: str) -> Optional[datetime]:
    """Parse a report bound. A bare date covers the whole day on either side."""
    if not value:
        return None
    v = value.strip()
    if len(v) == 10:
        d = parse_iso_date(v)
        return datetime.combine(d, time.max if end else time.min)
    return to_site_local(parse_iso_datetime(v), timezone_str)


def now_local(timezone_str: Optional[str] = None) -> datetime:
    """Current local time, naive.

    With `timezone_str` the wall clock of that zone is returned, otherwise the
    host's. Note: Wrapped so tests can patch/mocked easier.
    """
    if timezone_str:
        return datetime.now(pytz.timezone(timezone_str)).replace(tzinfo=None)
    return datetime.now()


def parse_request_timestamp(value: Optional[str], timezone_str: str, *, field_name: str = "timestamp") -> datetime:
    """Parse an API timestamp into naive site-local time."""
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    try:
        return to_site_local(parse_iso_datetime(str(value)), timezone_str)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp")
