from __future__ import annotations

from datetime import datetime

import pytest

from src.clinical_attendance.clinical_attendance.clock.model import RequestContext
from src.clinical_attendance.clinical_attendance.clock.service import ClockService
from src.clinical_attendance.clinical_attendance.collaborators.location import CapturedLocation, FacilityInfo
from src.clinical_attendance.clinical_attendance.core.enums import ClockErrorCode, ErrorCategory, RecordStatus
from src.clinical_attendance.clinical_attendance.core.exceptions import StoreUnavailableError


def test_clock_in_creates_open_record(service, store, on_site, monday):
    result = service.clock_in(
        "stu_1",
        "site_hospital",
        monday,
        on_site,
        notes="Morning block",
        context=RequestContext(ip_address="10.0.0.7", user_agent="pytest"),
    )

    assert result.ok
    record = result.record
    assert record.status == RecordStatus.OPEN
    assert record.rotation_id == "rot_hospital"
    assert record.work_date == monday.date()
    assert record.clock_in == monday
    assert record.total_hours is None
    assert record.metadata.clock_in.within_geofence is True
    assert record.metadata.clock_in.distance_meters == 0
    assert record.metadata.ip_address == "10.0.0.7"
    assert store.find_open_record("stu_1", monday.date()) == record


def test_unknown_site_is_outside_hours(service, on_site, monday):
    result = service.clock_in("stu_1", "site_missing", monday, on_site)
    assert not result.ok
    assert result.error.code == ClockErrorCode.OUTSIDE_HOURS


def test_site_closed(service, on_site, monday):
    result = service.clock_in("stu_1", "site_hospital", monday.replace(hour=5), on_site)
    assert result.error.code == ClockErrorCode.OUTSIDE_HOURS
    assert result.error.code.category == ErrorCategory.VALIDATION


def test_no_rotation_while_site_open(service, on_site, monday):
    # stu_2 only has a cancelled rotation at the hospital
    assert service.clock_in("stu_2", "site_hospital", monday, on_site).error.code == ClockErrorCode.NO_ROTATION

    after_rotation = datetime(2025, 4, 7, 8, 0)  # a Monday past the end date
    assert service.clock_in("stu_1", "site_hospital", after_rotation, on_site).error.code == ClockErrorCode.NO_ROTATION


def test_grace_period_example(service, on_site, monday):
    early = service.clock_in("stu_1", "site_hospital", monday.replace(hour=6, minute=50), on_site)
    assert early.ok
    assert early.record.clock_in.strftime("%H:%M") == "06:50"


def test_outside_slot_beyond_grace(service, on_site, monday):
    result = service.clock_in("stu_1", "site_hospital", monday.replace(hour=6, minute=40), on_site)
    assert result.error.code == ClockErrorCode.OUTSIDE_SLOT


def test_slot_specialty_mismatch(service, on_site):
    wednesday = datetime(2025, 1, 8, 9, 0)
    assert service.clock_in("stu_1", "site_hospital", wednesday, on_site).error.code == ClockErrorCode.OUTSIDE_SLOT


def test_geofence_fail_reports_distance(service, store, far_away, monday):
    result = service.clock_in("stu_1", "site_hospital", monday, far_away)

    assert result.error.code == ClockErrorCode.GEOFENCE_FAIL
    assert result.error.context["distance_meters"] == pytest.approx(200, abs=1)
    assert result.error.context["radius_meters"] == 120
    assert store.list_for_student("stu_1") == []


def test_geofence_required_without_coordinate(service, monday):
    result = service.clock_in("stu_1", "site_hospital", monday, None)
    assert result.error.code == ClockErrorCode.GEOFENCE_FAIL
    assert result.error.context["distance_meters"] is None


def test_geofence_not_required(service, monday):
    result = service.clock_in("stu_1", "site_clinic", monday, None)
    assert result.ok
    assert result.record.metadata.clock_in.latitude is None


def test_duplicate_open_same_day(service, on_site, monday):
    assert service.clock_in("stu_1", "site_hospital", monday, on_site).ok

    second = service.clock_in("stu_1", "site_hospital", monday.replace(hour=9), on_site)
    assert second.error.code == ClockErrorCode.DUPLICATE_OPEN
    assert second.error.code.category == ErrorCategory.STATE_CONFLICT


def test_duplicate_open_across_sites(service, on_site, monday):
    assert service.clock_in("stu_1", "site_clinic", monday, None).ok
    assert service.clock_in("stu_1", "site_hospital", monday.replace(hour=9), on_site).error.code == ClockErrorCode.DUPLICATE_OPEN


def test_duplicate_open_while_overnight_shift_runs(service, store, on_site, monday):
    assert service.clock_in("stu_1", "site_hospital", monday.replace(hour=18, minute=30), on_site).ok

    next_morning = service.clock_in("stu_1", "site_hospital", datetime(2025, 1, 7, 7, 0), on_site)
    assert next_morning.error.code == ClockErrorCode.DUPLICATE_OPEN

    open_records = [r for r in store.list_for_student("stu_1") if r.status == RecordStatus.OPEN]
    assert len(open_records) == 1
    assert open_records[0].work_date == monday.date()


def test_can_clock_in_again_after_closing(service, on_site, monday):
    assert service.clock_in("stu_1", "site_hospital", monday, on_site).ok
    assert service.clock_out("stu_1", monday.replace(hour=12), on_site).ok
    assert service.clock_in("stu_1", "site_hospital", monday.replace(hour=13), on_site).ok


def test_poor_accuracy_is_flagged_not_rejected(service, monday):
    fuzzy = CapturedLocation(latitude=40.7128, longitude=-74.006, accuracy=150.0)
    result = service.clock_in("stu_1", "site_hospital", monday, fuzzy)
    assert result.ok
    assert result.record.metadata.clock_in.accuracy_risk is True


class _Facilities:
    def __init__(self, *, fail=False):
        self.fail = fail
        self.calls = 0

    def lookup(self, latitude, longitude):
        self.calls += 1
        if self.fail:
            raise RuntimeError("reverse geocoder offline")
        return FacilityInfo(name="City Hospital", address="1 Main St", confidence=0.92)


def test_facility_enrichment(catalog, store, on_site, monday):
    service = ClockService(catalog, store, facility_lookup=_Facilities())
    result = service.clock_in("stu_1", "site_hospital", monday, on_site)

    assert result.ok
    assert result.record.metadata.facility.name == "City Hospital"
    assert store.get(result.record.record_id).metadata.facility.address == "1 Main St"


def test_facility_failure_does_not_block_clock_in(catalog, store, on_site, monday):
    facilities = _Facilities(fail=True)
    service = ClockService(catalog, store, facility_lookup=facilities)
    result = service.clock_in("stu_1", "site_hospital", monday, on_site)

    assert result.ok
    assert facilities.calls == 1
    assert result.record.metadata.facility is None


def test_rejections_are_side_effect_free(service, store, far_away, monday):
    service.clock_in("stu_1", "site_hospital", monday.replace(hour=5), far_away)
    service.clock_in("stu_1", "site_hospital", monday, far_away)
    service.clock_in("stu_2", "site_hospital", monday, far_away)
    assert store.list_for_student("stu_1") == []
    assert store.list_for_student("stu_2") == []


class _BrokenStore:
    def find_open_record(self, student_id, work_date):
        raise StoreUnavailableError("connection refused")

    def insert_if_absent(self, record):
        raise StoreUnavailableError("connection refused")


def test_store_failure_becomes_system_error(catalog, on_site, monday):
    service = ClockService(catalog, _BrokenStore())
    result = service.clock_in("stu_1", "site_hospital", monday, on_site)

    assert not result.ok
    assert result.error.code == ClockErrorCode.STORE_UNAVAILABLE
    assert result.error.to_dict()["category"] == "SYSTEM"
