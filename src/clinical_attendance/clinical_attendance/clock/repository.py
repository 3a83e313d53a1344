from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import RecordStatus
from .model import ClockRecord


class ClockRecordStore(Protocol):
    """Transactional contract the clock state machine relies on.

    Implementations raise StoreUnavailableError / LockTimeoutError on
    infrastructure failure; they never retry.
    """

    def find_open_record(self, student_id: str, work_date: date) -> Optional[ClockRecord]:
        raise NotImplementedError

    def insert_if_absent(self, record: ClockRecord) -> bool:
        """Insert an OPEN record unless the student already has one for that date
        or for the day before (an overnight shift still in progress).

        The check and the insert are one atomic unit. Returns False when an
        OPEN record already exists.
        """

        raise NotImplementedError

    def update(self, record: ClockRecord, *, expected_status: RecordStatus) -> bool:
        """Replace a stored record only if its current status is `expected_status`.

        An OPEN -> CLOSED transition also adds `record.total_hours` to the
        student's completed-hours counter in the same unit.
        """

        raise NotImplementedError

    def get(self, record_id: str) -> Optional[ClockRecord]:
        raise NotImplementedError

    def list_for_student(self, student_id: str) -> Sequence[ClockRecord]:
        raise NotImplementedError

    def completed_hours(self, student_id: str) -> float:
        raise NotImplementedError
