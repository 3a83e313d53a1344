from __future__ import annotations

from enum import Enum


class RotationStatus(str, Enum):
    """Lifecycle of a rotation: SCHEDULED -> ACTIVE -> COMPLETED | CANCELLED."""

    SCHEDULED = "SCHEDULED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class StudentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PROBATION = "PROBATION"
    SUSPENDED = "SUSPENDED"
    GRADUATED = "GRADUATED"
    WITHDRAWN = "WITHDRAWN"


class RecordStatus(str, Enum):
    """A clock record is OPEN between clock-in and clock-out, CLOSED afterwards."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class ErrorCategory(str, Enum):
    VALIDATION = "VALIDATION"
    STATE_CONFLICT = "STATE_CONFLICT"
    BUSINESS_LIMIT = "BUSINESS_LIMIT"
    SYSTEM = "SYSTEM"


class ClockErrorCode(str, Enum):
    """Structured rejection codes returned by the clock state machine."""

    OUTSIDE_HOURS = "OUTSIDE_HOURS"
    OUTSIDE_SLOT = "OUTSIDE_SLOT"
    NO_ROTATION = "NO_ROTATION"
    GEOFENCE_FAIL = "GEOFENCE_FAIL"

    DUPLICATE_OPEN = "DUPLICATE_OPEN"
    NO_OPEN_RECORD = "NO_OPEN_RECORD"
    INVALID_STATE = "INVALID_STATE"

    OVERNIGHT_NOT_ALLOWED = "OVERNIGHT_NOT_ALLOWED"
    SHIFT_TOO_LONG = "SHIFT_TOO_LONG"
    INVALID_TIME_ORDER = "INVALID_TIME_ORDER"

    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    LOCK_TIMEOUT = "LOCK_TIMEOUT"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORY_BY_CODE[self]


_CATEGORY_BY_CODE = {
    ClockErrorCode.OUTSIDE_HOURS: ErrorCategory.VALIDATION,
    ClockErrorCode.OUTSIDE_SLOT: ErrorCategory.VALIDATION,
    ClockErrorCode.NO_ROTATION: ErrorCategory.VALIDATION,
    ClockErrorCode.GEOFENCE_FAIL: ErrorCategory.VALIDATION,
    ClockErrorCode.DUPLICATE_OPEN: ErrorCategory.STATE_CONFLICT,
    ClockErrorCode.NO_OPEN_RECORD: ErrorCategory.STATE_CONFLICT,
    ClockErrorCode.INVALID_STATE: ErrorCategory.STATE_CONFLICT,
    ClockErrorCode.OVERNIGHT_NOT_ALLOWED: ErrorCategory.BUSINESS_LIMIT,
    ClockErrorCode.SHIFT_TOO_LONG: ErrorCategory.BUSINESS_LIMIT,
    ClockErrorCode.INVALID_TIME_ORDER: ErrorCategory.BUSINESS_LIMIT,
    ClockErrorCode.STORE_UNAVAILABLE: ErrorCategory.SYSTEM,
    ClockErrorCode.LOCK_TIMEOUT: ErrorCategory.SYSTEM,
}
