from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..clock.model import ClockRecord
from ..clock.repository import ClockRecordStore
from ..common.geo import round_half_up
from ..core.enums import RecordStatus


@dataclass(frozen=True)
class TimeReport:
    total_hours: float
    records: list[ClockRecord]

    def to_dict(self) -> dict:
        return {
            "totalHours": self.total_hours,
            "records": [r.to_dict() for r in self.records],
        }


def _effective_start(record: ClockRecord) -> datetime:
    if record.clock_in is not None:
        return record.clock_in
    return datetime.combine(record.work_date, datetime.min.time())


class TimeAccountingService:
    """Read-only aggregation over a student's clock records."""

    def __init__(self, store: ClockRecordStore):
        self._store = store

    def report(
        self,
        student_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> TimeReport:
        """Records whose clock-in falls in [start, end], oldest first.

        Open records are listed but add nothing to `total_hours`.
        """
        selected = []
        for r in self._store.list_for_student(student_id):
            ts = _effective_start(r)
            if start is not None and ts < start:
                continue
            if end is not None and ts > end:
                continue
            selected.append(r)

        selected.sort(key=lambda r: (_effective_start(r), r.record_id))

        total = sum(
            (Decimal(str(r.total_hours)) for r in selected if r.status == RecordStatus.CLOSED and r.total_hours is not None),
            Decimal("0"),
        )
        return TimeReport(total_hours=round_half_up(float(total)), records=selected)

    def completed_hours(self, student_id: str) -> float:
        return round_half_up(self._store.completed_hours(student_id))

    def csv_rows(self, report: TimeReport) -> list[dict]:
        rows = []
        for r in report.records:
            rows.append(
                {
                    "record_id": r.record_id,
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "site_id": r.site_id,
                    "rotation_id": r.rotation_id,
                    "clock_in": r.clock_in.strftime("%Y-%m-%d %H:%M") if r.clock_in else "-",
                    "clock_out": r.clock_out.strftime("%Y-%m-%d %H:%M") if r.clock_out else "-",
                    "total_hours": f"{r.total_hours:.2f}" if r.total_hours is not None else "",
                    "status": r.status.value,
                    "notes": r.notes or "",
                }
            )
        return rows
