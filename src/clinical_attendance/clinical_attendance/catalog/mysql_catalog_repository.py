from __future__ import annotations

from collections import defaultdict
from typing import Optional, Sequence

from ..core.enums import RotationStatus, StudentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
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

_ROTATION_COLUMNS = """
    rotation_id, student_id, site_id, specialty, start_date, end_date, required_hours,
    schedule_days, schedule_start, schedule_end, status, preceptor_id, created_at
"""


class MySQLCatalogRepository(CatalogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_program(self, program_id: str) -> Optional[Program]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT program_id, school_id, name FROM programs WHERE program_id=%s",
                (program_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            cur.execute(
                "SELECT requirement FROM program_requirements WHERE program_id=%s ORDER BY requirement",
                (program_id,),
            )
            requirements = tuple(row["requirement"] for row in fetchall(cur))
            return Program(
                program_id=r["program_id"],
                school_id=r["school_id"],
                name=r["name"],
                requirements=requirements,
            )

    def get_student(self, student_id: str) -> Optional[StudentProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id, program_id, full_name, status FROM students WHERE student_id=%s",
                (student_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return StudentProfile(
                student_id=r["student_id"],
                program_id=r["program_id"],
                full_name=r["full_name"],
                status=StudentStatus(r["status"]),
            )

    def get_site(self, site_id: str) -> Optional[ClinicalSite]:
        sites = self._load_sites(site_id=site_id)
        return sites[0] if sites else None

    def list_sites(self) -> Sequence[ClinicalSite]:
        return self._load_sites()

    def get_rotation(self, rotation_id: str) -> Optional[Rotation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROTATION_COLUMNS} FROM rotations WHERE rotation_id=%s", (rotation_id,))
            r = fetchone(cur)
            return self._to_rotation(r) if r else None

    def list_rotations(
        self,
        *,
        student_id: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> Sequence[Rotation]:
        clauses: list[str] = []
        params: list[object] = []
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(student_id)
        if site_id is not None:
            clauses.append("site_id=%s")
            params.append(site_id)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ROTATION_COLUMNS} FROM rotations {where} ORDER BY created_at ASC, rotation_id ASC",
                tuple(params),
            )
            return [self._to_rotation(r) for r in fetchall(cur)]

    def _load_sites(self, *, site_id: Optional[str] = None) -> list[ClinicalSite]:
        where = "WHERE site_id=%s" if site_id is not None else ""
        params: tuple = (site_id,) if site_id is not None else ()

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT site_id, name, capacity, latitude, longitude, radius_meters, strict_geofence,
                       max_shift_hours, allow_overnight, grace_minutes, geofence_required,
                       geofence_required_at_clock_out
                FROM clinical_sites
                {where}
                ORDER BY site_id
                """,
                params,
            )
            site_rows = fetchall(cur)
            if not site_rows:
                return []

            requirements: dict[str, list[str]] = defaultdict(list)
            cur.execute(f"SELECT site_id, requirement FROM site_requirements {where} ORDER BY requirement", params)
            for r in fetchall(cur):
                requirements[r["site_id"]].append(r["requirement"])

            specialties: dict[str, list[str]] = defaultdict(list)
            cur.execute(f"SELECT site_id, specialty FROM site_specialties {where} ORDER BY specialty", params)
            for r in fetchall(cur):
                specialties[r["site_id"]].append(r["specialty"])

            hours: dict[str, dict[int, OperatingWindow]] = defaultdict(dict)
            cur.execute(f"SELECT site_id, weekday, open_time, close_time FROM site_operating_hours {where}", params)
            for r in fetchall(cur):
                hours[r["site_id"]][int(r["weekday"])] = OperatingWindow(
                    open=normalize_mysql_time(r["open_time"]),
                    close=normalize_mysql_time(r["close_time"]),
                )

            slots: dict[str, list[RotationSlot]] = defaultdict(list)
            cur.execute(
                f"""
                SELECT slot_id, site_id, weekday, start_time, end_time, max_students, specialty
                FROM rotation_slots
                {where}
                ORDER BY position ASC, slot_id ASC
                """,
                params,
            )
            for r in fetchall(cur):
                slots[r["site_id"]].append(
                    RotationSlot(
                        slot_id=r["slot_id"],
                        weekday=int(r["weekday"]),
                        start=normalize_mysql_time(r["start_time"]),
                        end=normalize_mysql_time(r["end_time"]),
                        max_students=int(r.get("max_students") or 0),
                        specialty=r.get("specialty") or None,
                    )
                )

        out: list[ClinicalSite] = []
        for r in site_rows:
            sid = r["site_id"]
            location = None
            if r.get("latitude") is not None and r.get("longitude") is not None and r.get("radius_meters") is not None:
                location = SiteLocation(
                    latitude=float(r["latitude"]),
                    longitude=float(r["longitude"]),
                    radius_meters=float(r["radius_meters"]),
                    strict=bool(r["strict_geofence"]),
                )
            out.append(
                ClinicalSite(
                    site_id=sid,
                    name=r["name"],
                    capacity=int(r["capacity"]),
                    requirements=tuple(requirements[sid]),
                    specialties=tuple(specialties[sid]),
                    location=location,
                    rules=SiteRules(
                        max_shift_hours=float(r["max_shift_hours"]),
                        allow_overnight=bool(r["allow_overnight"]),
                        grace_minutes=int(r["grace_minutes"]),
                        geofence_required=bool(r["geofence_required"]),
                        geofence_required_at_clock_out=bool(r["geofence_required_at_clock_out"]),
                    ),
                    operating_hours=dict(hours[sid]),
                    slots=tuple(slots[sid]),
                )
            )
        return out

    @staticmethod
    def _to_rotation(r: dict) -> Rotation:
        days = tuple(int(d) for d in (r.get("schedule_days") or "").split(",") if d.strip())
        return Rotation(
            rotation_id=r["rotation_id"],
            student_id=r["student_id"],
            site_id=r["site_id"],
            specialty=r.get("specialty") or None,
            start_date=r["start_date"],
            end_date=r["end_date"],
            required_hours=float(r.get("required_hours") or 0),
            schedule=RotationSchedule(
                days=days,
                start=normalize_mysql_time(r["schedule_start"]),
                end=normalize_mysql_time(r["schedule_end"]),
            ),
            status=RotationStatus(r["status"]),
            created_at=r["created_at"],
            preceptor_id=r.get("preceptor_id"),
        )
