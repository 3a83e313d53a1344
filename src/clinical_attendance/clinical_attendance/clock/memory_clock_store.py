from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator, Optional, Sequence

from ..core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS
from ..core.enums import RecordStatus
from ..core.exceptions import LockTimeoutError
from .model import ClockRecord
from .repository import ClockRecordStore

_Key = tuple[str, date]


class InMemoryClockRecordStore(ClockRecordStore):
    """Single-process store: an arena of records plus an index of OPEN records.

    Every mutation for a student runs under that student's lock, so the
    duplicate check and the insert cannot interleave across threads.
    """

    def __init__(self, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS):
        self._lock_timeout = float(lock_timeout)
        self._records: dict[str, ClockRecord] = {}
        self._open_index: dict[_Key, str] = {}
        self._hours: dict[str, Decimal] = defaultdict(Decimal)
        self._arena_lock = threading.Lock()
        self._registry_lock = threading.Lock()
        self._student_locks: dict[str, threading.Lock] = {}

    def _lock_for(self, student_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._student_locks.get(student_id)
            if lock is None:
                lock = threading.Lock()
                self._student_locks[student_id] = lock
            return lock

    @contextmanager
    def _locked(self, student_id: str) -> Iterator[None]:
        lock = self._lock_for(student_id)
        if not lock.acquire(timeout=self._lock_timeout):
            raise LockTimeoutError(f"Timed out waiting for clock lock of student {student_id}")
        try:
            yield
        finally:
            lock.release()

    def find_open_record(self, student_id: str, work_date: date) -> Optional[ClockRecord]:
        with self._arena_lock:
            record_id = self._open_index.get((student_id, work_date))
            return self._records.get(record_id) if record_id else None

    def insert_if_absent(self, record: ClockRecord) -> bool:
        key = (record.student_id, record.work_date)
        # an overnight shift opened the day before still counts as open
        previous = (record.student_id, record.work_date - timedelta(days=1))
        with self._locked(record.student_id):
            with self._arena_lock:
                if key in self._open_index or previous in self._open_index:
                    return False
                self._records[record.record_id] = record
                if record.status == RecordStatus.OPEN:
                    self._open_index[key] = record.record_id
                return True

    def update(self, record: ClockRecord, *, expected_status: RecordStatus) -> bool:
        key = (record.student_id, record.work_date)
        with self._locked(record.student_id):
            with self._arena_lock:
                current = self._records.get(record.record_id)
                if current is None or current.status != expected_status:
                    return False

                self._records[record.record_id] = record
                if current.status == RecordStatus.OPEN and record.status == RecordStatus.CLOSED:
                    self._open_index.pop(key, None)
                    self._hours[record.student_id] += Decimal(str(record.total_hours or 0))
                return True

    def get(self, record_id: str) -> Optional[ClockRecord]:
        with self._arena_lock:
            return self._records.get(record_id)

    def list_for_student(self, student_id: str) -> Sequence[ClockRecord]:
        with self._arena_lock:
            return [r for r in self._records.values() if r.student_id == student_id]

    def completed_hours(self, student_id: str) -> float:
        with self._arena_lock:
            return float(self._hours.get(student_id, Decimal("0")))
