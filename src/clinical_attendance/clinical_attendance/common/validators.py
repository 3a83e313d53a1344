from __future__ import annotations

from typing import Any, Optional

from ..core.constants import MAX_NOTES_LENGTH
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def require_latitude(value: float) -> float:
    if not -90 <= value <= 90:
        raise ValidationError("Latitude must be between -90 and 90")
    return value


def require_longitude(value: float) -> float:
    if not -180 <= value <= 180:
        raise ValidationError("Longitude must be between -180 and 180")
    return value


def require_accuracy(value: Optional[float]) -> Optional[float]:
    if value is not None and value <= 0:
        raise ValidationError("Accuracy must be a positive number")
    return value


def normalize_notes(value: Optional[str]) -> Optional[str]:
    notes = (value or "").strip()
    if len(notes) > MAX_NOTES_LENGTH:
        raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")
    return notes or None
