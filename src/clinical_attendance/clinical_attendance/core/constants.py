"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_MAX_SHIFT_HOURS = 12
DEFAULT_GRACE_MINUTES = 0
EARTH_RADIUS_METERS = 6_371_000
DEFAULT_LOCK_TIMEOUT_SECONDS = 5.0
DEFAULT_GPS_ACCURACY_RISK_M = 100
DEFAULT_LOCAL_TIMEZONE = "America/New_York"
MAX_NOTES_LENGTH = 500
HOURS_PRECISION = 2
MAX_FUTURE_SKEW_MINUTES = 5
