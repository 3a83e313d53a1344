from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.clinical_attendance.clinical_attendance.clock.memory_clock_store import InMemoryClockRecordStore
from src.clinical_attendance.clinical_attendance.clock.model import ClockRecord
from src.clinical_attendance.clinical_attendance.core.enums import RecordStatus
from src.clinical_attendance.clinical_attendance.core.exceptions import LockTimeoutError


def _record(record_id="rec_1", work_date=date(2025, 1, 6)):
    return ClockRecord(
        record_id=record_id,
        student_id="stu_1",
        rotation_id="rot_hospital",
        site_id="site_hospital",
        work_date=work_date,
        clock_in=datetime.combine(work_date, datetime.min.time()).replace(hour=8),
    )


def test_insert_if_absent_rejects_second_open_record():
    store = InMemoryClockRecordStore()
    assert store.insert_if_absent(_record("rec_1"))
    assert not store.insert_if_absent(_record("rec_2"))
    assert store.get("rec_2") is None

    # a date two days later is a different key
    assert store.insert_if_absent(_record("rec_3", date(2025, 1, 8)))


def test_open_record_from_previous_day_blocks_insert():
    store = InMemoryClockRecordStore()
    assert store.insert_if_absent(_record("rec_1", date(2025, 1, 6)))
    assert not store.insert_if_absent(_record("rec_2", date(2025, 1, 7)))

    closed = replace(store.get("rec_1"), status=RecordStatus.CLOSED, total_hours=10.0)
    assert store.update(closed, expected_status=RecordStatus.OPEN)
    assert store.insert_if_absent(_record("rec_2", date(2025, 1, 7)))


def test_locks_are_kept_per_student():
    store = InMemoryClockRecordStore()
    for day in range(6, 11):
        rec = _record(f"rec_{day}", date(2025, 1, day))
        store.insert_if_absent(rec)
        store.update(replace(rec, status=RecordStatus.CLOSED, total_hours=1.0), expected_status=RecordStatus.OPEN)

    assert list(store._student_locks) == ["stu_1"]


def test_update_is_conditional_on_status():
    store = InMemoryClockRecordStore()
    rec = _record()
    store.insert_if_absent(rec)
    closed = replace(rec, status=RecordStatus.CLOSED, clock_out=rec.clock_in.replace(hour=12), total_hours=4.0)

    assert not store.update(closed, expected_status=RecordStatus.CLOSED)
    assert store.update(closed, expected_status=RecordStatus.OPEN)
    assert not store.update(closed, expected_status=RecordStatus.OPEN)

    assert store.completed_hours("stu_1") == 4.0
    assert store.find_open_record("stu_1", rec.work_date) is None


def test_update_unknown_record():
    assert not InMemoryClockRecordStore().update(_record("ghost"), expected_status=RecordStatus.OPEN)


def test_list_and_counter_are_per_student():
    store = InMemoryClockRecordStore()
    store.insert_if_absent(_record())
    assert [r.record_id for r in store.list_for_student("stu_1")] == ["rec_1"]
    assert store.list_for_student("stu_9") == []
    assert store.completed_hours("stu_9") == 0.0


def test_lock_timeout_raises():
    store = InMemoryClockRecordStore(lock_timeout=0.05)
    rec = _record()
    held = store._lock_for(rec.student_id)
    held.acquire()
    try:
        with pytest.raises(LockTimeoutError):
            store.insert_if_absent(rec)
    finally:
        held.release()

    assert store.insert_if_absent(rec)
