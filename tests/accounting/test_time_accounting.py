from __future__ import annotations

from datetime import datetime, timedelta

from src.clinical_attendance.clinical_attendance.accounting.service import TimeAccountingService
from src.clinical_attendance.clinical_attendance.clock.model import ClockRecord
from src.clinical_attendance.clinical_attendance.core.enums import RecordStatus


def test_report_sums_closed_records(service, store, on_site, monday):
    service.clock_in("stu_1", "site_hospital", monday, on_site)
    service.clock_out("stu_1", monday.replace(hour=16, minute=30), on_site)
    tuesday = monday + timedelta(days=1)
    service.clock_in("stu_1", "site_hospital", tuesday.replace(hour=7), on_site)
    service.clock_out("stu_1", tuesday.replace(hour=15, minute=20), on_site)

    report = TimeAccountingService(store).report("stu_1")

    assert report.total_hours == 16.83
    assert [r.work_date.day for r in report.records] == [6, 7]


def test_open_records_listed_but_not_counted(service, store, on_site, monday):
    service.clock_in("stu_1", "site_hospital", monday, on_site)
    service.clock_out("stu_1", monday.replace(hour=12), on_site)
    service.clock_in("stu_1", "site_hospital", monday.replace(hour=13), on_site)

    report = TimeAccountingService(store).report("stu_1")

    assert report.total_hours == 4.0
    assert [r.status for r in report.records] == [RecordStatus.CLOSED, RecordStatus.OPEN]


def test_report_filters_by_range(service, store, on_site, monday):
    service.clock_in("stu_1", "site_hospital", monday, on_site)
    service.clock_out("stu_1", monday.replace(hour=12), on_site)
    tuesday = monday + timedelta(days=1)
    service.clock_in("stu_1", "site_hospital", tuesday.replace(hour=9), on_site)
    service.clock_out("stu_1", tuesday.replace(hour=11), on_site)

    accounting = TimeAccountingService(store)
    only_tuesday = accounting.report("stu_1", tuesday.replace(hour=0), tuesday.replace(hour=23, minute=59))
    assert only_tuesday.total_hours == 2.0
    assert len(only_tuesday.records) == 1

    # bounds are inclusive on the clock-in instant
    exact = accounting.report("stu_1", monday, monday)
    assert exact.total_hours == 4.0

    assert accounting.report("stu_1", end=monday - timedelta(minutes=1)).records == []


def test_report_is_idempotent(service, store, on_site, monday):
    service.clock_in("stu_1", "site_hospital", monday, on_site)
    service.clock_out("stu_1", monday.replace(hour=14, minute=45), on_site)

    accounting = TimeAccountingService(store)
    first = accounting.report("stu_1", monday.replace(hour=0), monday.replace(hour=23))
    second = accounting.report("stu_1", monday.replace(hour=0), monday.replace(hour=23))
    assert first == second
    assert store.completed_hours("stu_1") == 6.75


def test_record_without_clock_in_uses_work_date(store, monday):
    store.insert_if_absent(
        ClockRecord(
            record_id="rec_imported",
            student_id="stu_1",
            rotation_id="rot_hospital",
            site_id="site_hospital",
            work_date=monday.date(),
            clock_in=None,
        )
    )
    accounting = TimeAccountingService(store)
    assert len(accounting.report("stu_1", datetime(2025, 1, 6), datetime(2025, 1, 6, 0, 0)).records) == 1
    assert accounting.report("stu_1", datetime(2025, 1, 6, 0, 1)).records == []


def test_csv_rows(service, store, on_site, monday):
    service.clock_in("stu_1", "site_hospital", monday, on_site, notes="Orientation")
    service.clock_out("stu_1", monday.replace(hour=9, minute=30), on_site)

    accounting = TimeAccountingService(store)
    rows = accounting.csv_rows(accounting.report("stu_1"))

    assert rows[0]["work_date"] == "2025-01-06"
    assert rows[0]["clock_in"] == "2025-01-06 08:00"
    assert rows[0]["total_hours"] == "1.50"
    assert rows[0]["notes"] == "Orientation"
