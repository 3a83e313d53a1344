from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..collaborators.location import FacilityInfo
from ..core.enums import RecordStatus


@dataclass(frozen=True)
class RequestContext:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class LocationSnapshot:
    """Coordinate captured at one end of a shift and how it fared against the geofence."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    source: Optional[str] = None
    within_geofence: bool = False
    distance_meters: Optional[float] = None
    accuracy_risk: Optional[bool] = None


@dataclass(frozen=True)
class ClockMetadata:
    clock_in: LocationSnapshot = field(default_factory=LocationSnapshot)
    clock_out: Optional[LocationSnapshot] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    facility: Optional[FacilityInfo] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "ClockMetadata":
        data = data or {}
        clock_out = data.get("clock_out")
        facility = data.get("facility")
        return cls(
            clock_in=LocationSnapshot(**(data.get("clock_in") or {})),
            clock_out=LocationSnapshot(**clock_out) if clock_out else None,
            ip_address=data.get("ip_address"),
            user_agent=data.get("user_agent"),
            facility=FacilityInfo(**facility) if facility else None,
        )


@dataclass(frozen=True)
class ClockRecord:
    """Domain entity: one attendance event pair (clock-in, then clock-out)."""

    record_id: str
    student_id: str
    rotation_id: str
    site_id: str
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime] = None
    total_hours: Optional[float] = None
    notes: Optional[str] = None
    status: RecordStatus = RecordStatus.OPEN
    metadata: ClockMetadata = field(default_factory=ClockMetadata)

    @property
    def is_open(self) -> bool:
        return self.status == RecordStatus.OPEN

    def to_dict(self) -> dict[str, Any]:
        return {
            "recordId": self.record_id,
            "studentId": self.student_id,
            "rotationId": self.rotation_id,
            "siteId": self.site_id,
            "date": self.work_date.isoformat(),
            "clockIn": self.clock_in.isoformat() if self.clock_in else None,
            "clockOut": self.clock_out.isoformat() if self.clock_out else None,
            "totalHours": self.total_hours,
            "notes": self.notes,
            "status": self.status.value,
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True)
class ClockStatus:
    clocked_in: bool
    record: Optional[ClockRecord] = None
    elapsed_hours: Optional[float] = None
