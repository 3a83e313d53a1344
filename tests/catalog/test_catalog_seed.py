from __future__ import annotations

from datetime import datetime, time
from pathlib import Path

import pytest

from src.clinical_attendance.clinical_attendance.catalog.memory_catalog_repository import InMemoryCatalogRepository
from src.clinical_attendance.clinical_attendance.collaborators.location import CapturedLocation
from src.clinical_attendance.clinical_attendance.container import build_container
from src.clinical_attendance.clinical_attendance.core.enums import ClockErrorCode, RotationStatus
from src.clinical_attendance.clinical_attendance.core.exceptions import ValidationError

SEED = Path(__file__).resolve().parents[2] / "database" / "catalog_seed.json"


def test_seed_file_loads():
    catalog = InMemoryCatalogRepository.from_json_file(SEED)

    hospital = catalog.get_site("site_city_hospital")
    assert hospital.location.radius_meters == 120
    assert hospital.rules.grace_minutes == 15
    assert hospital.operating_hours[1].open == time(0, 0)
    assert [s.slot_id for s in hospital.slots] == ["slot_city_mon", "slot_city_wed"]

    rotation = catalog.get_rotation("rot_mri_brianna")
    assert rotation.status == RotationStatus.SCHEDULED
    assert rotation.schedule.days == (3,)
    assert rotation.created_at == datetime(2024, 12, 2, 9, 0)

    assert [r.rotation_id for r in catalog.list_rotations(site_id="site_city_hospital")] == [
        "rot_radiology_alex",
        "rot_mri_brianna",
    ]


def test_from_dict_defaults():
    catalog = InMemoryCatalogRepository.from_dict(
        {
            "sites": [{"id": "s1", "name": "Annex", "capacity": 3}],
            "rotations": [
                {
                    "id": "r1",
                    "studentId": "u1",
                    "siteId": "s1",
                    "startDate": "2025-01-01",
                    "endDate": "2025-01-31",
                    "schedule": {"days": [1], "startTime": "08:00", "endTime": "16:00"},
                    "status": "ACTIVE",
                }
            ],
        }
    )
    site = catalog.get_site("s1")
    assert site.location is None
    assert site.rules.max_shift_hours == 12
    assert site.rules.grace_minutes == 0
    assert site.rules.geofence_required is False
    assert catalog.get_rotation("r1").created_at == datetime.min


def test_memory_container_runs_demo_flow():
    container = build_container(store_backend="memory", catalog_seed_path=str(SEED))
    at_door = CapturedLocation(latitude=40.7130, longitude=-74.0062, accuracy=8.0)

    assert container.clock_service.clock_in("user_s01", "site_city_hospital", datetime(2025, 1, 6, 7, 5), at_door).ok
    out = container.clock_service.clock_out("user_s01", datetime(2025, 1, 6, 15, 35), at_door)
    assert out.record.total_hours == 8.5

    # Carlos' program needs MRI Safety, which the clinic does not accept
    assert not container.eligibility_resolver.check_eligibility("user_s03", "site_sunrise_clinic").eligible

    # Sunrise Clinic is closed on Mondays before 08:00
    early = container.clock_service.clock_in("user_s03", "site_sunrise_clinic", datetime(2025, 1, 27, 7, 0), None)
    assert early.error.code == ClockErrorCode.OUTSIDE_HOURS


def test_unknown_backend_is_rejected():
    with pytest.raises(ValidationError):
        build_container(store_backend="redis")
