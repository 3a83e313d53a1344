from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.clinical_attendance.clinical_attendance.catalog.memory_catalog_repository import InMemoryCatalogRepository
from src.clinical_attendance.clinical_attendance.catalog.model import (
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
from src.clinical_attendance.clinical_attendance.clock.memory_clock_store import InMemoryClockRecordStore
from src.clinical_attendance.clinical_attendance.clock.service import ClockService
from src.clinical_attendance.clinical_attendance.collaborators.location import CapturedLocation
from src.clinical_attendance.clinical_attendance.core.enums import RotationStatus

HOSPITAL_LAT = 40.7128
HOSPITAL_LON = -74.0060

# 200 m due north of the hospital (one degree of latitude is ~111,195 m)
FAR_LAT = HOSPITAL_LAT + 200 / 111_194.93


@pytest.fixture
def monday() -> datetime:
    # 2025-01-06 is a Monday
    return datetime(2025, 1, 6, 8, 0)


@pytest.fixture
def program() -> Program:
    return Program(
        program_id="prog_rad",
        school_id="school_metro",
        name="Radiologic Technology",
        requirements=("Basic Life Support", "Background Check", "HepB Vaccination"),
    )


@pytest.fixture
def hospital() -> ClinicalSite:
    return ClinicalSite(
        site_id="site_hospital",
        name="City Hospital",
        capacity=2,
        requirements=("Basic Life Support", "Background Check", "HepB Vaccination"),
        specialties=("General Radiology", "MRI"),
        location=SiteLocation(latitude=HOSPITAL_LAT, longitude=HOSPITAL_LON, radius_meters=120),
        rules=SiteRules(max_shift_hours=12, allow_overnight=True, grace_minutes=15, geofence_required=True),
        operating_hours={d: OperatingWindow(open=time(6, 0), close=time(22, 0)) for d in range(7)},
        slots=(
            RotationSlot("slot_mon", 1, time(7, 0), time(19, 0), 10, specialty="General Radiology"),
            RotationSlot("slot_tue", 2, time(7, 0), time(19, 0), 10),
            RotationSlot("slot_wed", 3, time(7, 0), time(19, 0), 10, specialty="MRI"),
        ),
    )


@pytest.fixture
def clinic() -> ClinicalSite:
    return ClinicalSite(
        site_id="site_clinic",
        name="Sunrise Clinic",
        capacity=5,
        requirements=("Basic Life Support",),
        location=SiteLocation(latitude=34.0522, longitude=-118.2437, radius_meters=100, strict=True),
        rules=SiteRules(max_shift_hours=12, allow_overnight=False),
        operating_hours={d: OperatingWindow(open=time(0, 0), close=time(23, 59)) for d in range(1, 6)},
        slots=(
            RotationSlot("slot_clinic_mon", 1, time(8, 0), time(17, 0), 4),
            RotationSlot("slot_clinic_tue", 2, time(8, 0), time(17, 0), 4),
        ),
    )


def _rotation(rotation_id, student_id, site_id, *, specialty=None, status=RotationStatus.ACTIVE, created=1):
    return Rotation(
        rotation_id=rotation_id,
        student_id=student_id,
        site_id=site_id,
        specialty=specialty,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 3, 31),
        required_hours=160,
        schedule=RotationSchedule(days=(1, 2, 3), start=time(7, 0), end=time(19, 0)),
        status=status,
        created_at=datetime(2024, 12, created, 9, 0),
    )


@pytest.fixture
def rotations() -> list[Rotation]:
    return [
        _rotation("rot_hospital", "stu_1", "site_hospital", specialty="General Radiology"),
        _rotation("rot_clinic", "stu_1", "site_clinic"),
        _rotation("rot_cancelled", "stu_2", "site_hospital", specialty="General Radiology", status=RotationStatus.CANCELLED),
    ]


@pytest.fixture
def catalog(program, hospital, clinic, rotations) -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository(
        programs=[program],
        students=[
            StudentProfile("stu_1", "prog_rad", "Alex Morgan"),
            StudentProfile("stu_2", "prog_rad", "Brianna Chen"),
        ],
        sites=[hospital, clinic],
        rotations=rotations,
    )


@pytest.fixture
def store() -> InMemoryClockRecordStore:
    return InMemoryClockRecordStore(lock_timeout=1.0)


@pytest.fixture
def service(catalog, store) -> ClockService:
    return ClockService(catalog, store)


@pytest.fixture
def on_site() -> CapturedLocation:
    return CapturedLocation(latitude=HOSPITAL_LAT, longitude=HOSPITAL_LON, accuracy=10.0)


@pytest.fixture
def far_away() -> CapturedLocation:
    return CapturedLocation(latitude=FAR_LAT, longitude=HOSPITAL_LON, accuracy=10.0)
