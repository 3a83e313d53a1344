from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Mapping, Optional

from ..core.constants import DEFAULT_GRACE_MINUTES, DEFAULT_MAX_SHIFT_HOURS
from ..core.enums import RotationStatus, StudentStatus


@dataclass(frozen=True)
class Program:
    """Domain entity: a school program and the credentials its students carry."""

    program_id: str
    school_id: str
    name: str
    requirements: tuple[str, ...] = ()


@dataclass(frozen=True)
class StudentProfile:
    student_id: str
    program_id: str
    full_name: str
    status: StudentStatus = StudentStatus.ACTIVE


@dataclass(frozen=True)
class SiteLocation:
    """Registered coordinate of a site and the radius a clock event must fall within.

    `strict` is informational; a strict site is configured with a tight radius.
    """

    latitude: float
    longitude: float
    radius_meters: float
    strict: bool = False


@dataclass(frozen=True)
class SiteRules:
    max_shift_hours: float = DEFAULT_MAX_SHIFT_HOURS
    allow_overnight: bool = False
    grace_minutes: int = DEFAULT_GRACE_MINUTES
    geofence_required: bool = False
    geofence_required_at_clock_out: bool = False


@dataclass(frozen=True)
class OperatingWindow:
    open: time
    close: time


@dataclass(frozen=True)
class RotationSlot:
    """Recurring weekly window during which students may attend (weekday 0=Sunday)."""

    slot_id: str
    weekday: int
    start: time
    end: time
    max_students: int
    specialty: Optional[str] = None


@dataclass(frozen=True)
class ClinicalSite:
    site_id: str
    name: str
    capacity: int
    requirements: tuple[str, ...] = ()
    specialties: tuple[str, ...] = ()
    location: Optional[SiteLocation] = None
    rules: SiteRules = field(default_factory=SiteRules)
    operating_hours: Mapping[int, OperatingWindow] = field(default_factory=dict)
    slots: tuple[RotationSlot, ...] = ()


@dataclass(frozen=True)
class RotationSchedule:
    days: tuple[int, ...]
    start: time
    end: time


@dataclass(frozen=True)
class Rotation:
    """Binds one student to one site for an inclusive date range."""

    rotation_id: str
    student_id: str
    site_id: str
    specialty: Optional[str]
    start_date: date
    end_date: date
    required_hours: float
    schedule: RotationSchedule
    status: RotationStatus
    created_at: datetime
    preceptor_id: Optional[str] = None
