"""Distance and time-of-day math shared by the validators.

Uses the haversine formula for great-circle distance between two points.
"""
from __future__ import annotations

import math
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal

from ..core.constants import EARTH_RADIUS_METERS, HOURS_PRECISION


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in meters
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2 +
        math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def parse_hhmm(value: str) -> time:
    """Parse a 24h 'HH:MM' string into a time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def minutes_since_midnight(dt: datetime) -> int:
    """Minute-of-day of a local instant. Seconds are ignored."""
    return dt.hour * 60 + dt.minute


def weekday_index(d: date) -> int:
    """Weekday with 0=Sunday ... 6=Saturday (the keys used by operating hours and slots)."""
    return (d.weekday() + 1) % 7


def round_half_up(value: float, places: int = HOURS_PRECISION) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
