from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.geo import parse_hhmm
from ..core.constants import DEFAULT_GRACE_MINUTES, DEFAULT_MAX_SHIFT_HOURS
from ..core.enums import RotationStatus, StudentStatus
from .model import (
    ClinicalSite,
    OperatingWindow,
    Program,
    Rotation,
    RotationSchedule,
    RotationSlot,
    SiteLocation,
    SiteRules,
    StudentProfile,
)
from .repository import CatalogRepository


class InMemoryCatalogRepository(CatalogRepository):
    """Catalog held in process memory.

    Used by the `memory` store backend and by tests. Rotations keep insertion
    order so lookups are deterministic.
    """

    def __init__(
        self,
        *,
        programs: Iterable[Program] = (),
        students: Iterable[StudentProfile] = (),
        sites: Iterable[ClinicalSite] = (),
        rotations: Iterable[Rotation] = (),
    ):
        self._programs = {p.program_id: p for p in programs}
        self._students = {s.student_id: s for s in students}
        self._sites = {s.site_id: s for s in sites}
        self._rotations = {r.rotation_id: r for r in rotations}

    def get_program(self, program_id: str) -> Optional[Program]:
        return self._programs.get(program_id)

    def get_student(self, student_id: str) -> Optional[StudentProfile]:
        return self._students.get(student_id)

    def get_site(self, site_id: str) -> Optional[ClinicalSite]:
        return self._sites.get(site_id)

    def list_sites(self) -> Sequence[ClinicalSite]:
        return list(self._sites.values())

    def get_rotation(self, rotation_id: str) -> Optional[Rotation]:
        return self._rotations.get(rotation_id)

    def list_rotations(
        self,
        *,
        student_id: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> Sequence[Rotation]:
        return [
            r
            for r in self._rotations.values()
            if (student_id is None or r.student_id == student_id) and (site_id is None or r.site_id == site_id)
        ]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryCatalogRepository":
        return cls(
            programs=[_program(p) for p in data.get("programs", [])],
            students=[_student(s) for s in data.get("students", [])],
            sites=[_site(s) for s in data.get("sites", [])],
            rotations=[_rotation(r) for r in data.get("rotations", [])],
        )

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InMemoryCatalogRepository":
        return cls.from_dict(json.loads(Path(path).read_text(encoding="utf-8")))


def _program(p: dict) -> Program:
    return Program(
        program_id=str(p["id"]),
        school_id=str(p.get("schoolId", "")),
        name=p.get("name", ""),
        requirements=tuple(p.get("requirements", [])),
    )


def _student(s: dict) -> StudentProfile:
    return StudentProfile(
        student_id=str(s["id"]),
        program_id=str(s["programId"]),
        full_name=s.get("name", ""),
        status=StudentStatus(s.get("status", StudentStatus.ACTIVE.value)),
    )


def _site(s: dict) -> ClinicalSite:
    loc = s.get("location")
    rules = s.get("rules") or {}
    return ClinicalSite(
        site_id=str(s["id"]),
        name=s.get("name", ""),
        capacity=int(s.get("capacity", 0)),
        requirements=tuple(s.get("requirements", [])),
        specialties=tuple(s.get("specialties", [])),
        location=SiteLocation(
            latitude=float(loc["lat"]),
            longitude=float(loc["lon"]),
            radius_meters=float(loc["radiusMeters"]),
            strict=bool(loc.get("strict", False)),
        )
        if loc
        else None,
        rules=SiteRules(
            max_shift_hours=float(rules.get("maxShiftHours", DEFAULT_MAX_SHIFT_HOURS)),
            allow_overnight=bool(rules.get("allowOvernight", False)),
            grace_minutes=int(rules.get("graceMinutes", DEFAULT_GRACE_MINUTES)),
            geofence_required=bool(rules.get("geofenceRequired", False)),
            geofence_required_at_clock_out=bool(rules.get("geofenceRequiredAtClockOut", False)),
        ),
        operating_hours={
            int(day): OperatingWindow(open=parse_hhmm(w["open"]), close=parse_hhmm(w["close"]))
            for day, w in (s.get("operatingHours") or {}).items()
        },
        slots=tuple(
            RotationSlot(
                slot_id=str(sl["id"]),
                weekday=int(sl["dayOfWeek"]),
                start=parse_hhmm(sl["startTime"]),
                end=parse_hhmm(sl["endTime"]),
                max_students=int(sl.get("maxStudents", 0)),
                specialty=sl.get("specialty") or None,
            )
            for sl in s.get("slots", [])
        ),
    )


def _rotation(r: dict) -> Rotation:
    schedule = r.get("schedule") or {}
    created = r.get("createdAt")
    return Rotation(
        rotation_id=str(r["id"]),
        student_id=str(r["studentId"]),
        site_id=str(r["siteId"]),
        specialty=r.get("specialty") or None,
        start_date=parse_iso_date(r["startDate"]),
        end_date=parse_iso_date(r["endDate"]),
        required_hours=float(r.get("requiredHours", 0)),
        schedule=RotationSchedule(
            days=tuple(int(d) for d in schedule.get("days", [])),
            start=parse_hhmm(schedule.get("startTime", "00:00")),
            end=parse_hhmm(schedule.get("endTime", "23:59")),
        ),
        status=RotationStatus(r.get("status", RotationStatus.SCHEDULED.value)),
        created_at=parse_iso_datetime(created) if created else datetime.min,
        preceptor_id=r.get("preceptorId"),
    )
