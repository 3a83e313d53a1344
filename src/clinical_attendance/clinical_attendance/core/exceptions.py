from __future__ import annotations

from typing import Any, Optional

from .enums import ClockErrorCode


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ClockRejected(DomainError):
    """A clock-in/clock-out check failed.

    Raised inside the state machine and converted to a ClockResult at the
    service boundary.
    """

    def __init__(self, code: ClockErrorCode, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context or {})


class SystemFault(DomainError):
    """Infrastructure failure. Callers may retry with backoff."""

    code = ClockErrorCode.STORE_UNAVAILABLE


class StoreUnavailableError(SystemFault):
    """Raised when the record store cannot be reached or fails mid-transaction."""


class LockTimeoutError(SystemFault):
    """Raised when a per-student lock cannot be acquired in time."""

    code = ClockErrorCode.LOCK_TIMEOUT
