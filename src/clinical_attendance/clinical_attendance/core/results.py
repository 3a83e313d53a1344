from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from .enums import ClockErrorCode

if TYPE_CHECKING:
    from ..clock.model import ClockRecord


@dataclass(frozen=True)
class ClockError:
    code: ClockErrorCode
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "category": self.code.category.value,
            "message": self.message,
            "context": dict(self.context),
        }


@dataclass(frozen=True)
class ClockResult:
    """Tagged result of a clock operation: either a record or an error, never both."""

    ok: bool
    record: Optional["ClockRecord"] = None
    error: Optional[ClockError] = None

    @classmethod
    def success(cls, record: "ClockRecord") -> "ClockResult":
        return cls(ok=True, record=record)

    @classmethod
    def failure(cls, code: ClockErrorCode, message: str, context: Optional[dict[str, Any]] = None) -> "ClockResult":
        return cls(ok=False, error=ClockError(code=code, message=message, context=dict(context or {})))
