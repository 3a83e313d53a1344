from __future__ import annotations

import json
from datetime import date, timedelta
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClockMetadata, ClockRecord
from .repository import ClockRecordStore

_COLUMNS = """
    record_id, student_id, rotation_id, site_id, work_date, clock_in, clock_out,
    total_hours, notes, status, metadata
"""


class MySQLClockRecordStore(ClockRecordStore):
    """Cross-process store built on conditional writes.

    `open_flag` is 1 for OPEN rows and NULL otherwise; the unique key on
    (student_id, work_date, open_flag) backs the duplicate-open check. The
    insert first locks the student row, then refuses while an OPEN record
    exists on the work date or the day before.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_open_record(self, student_id: str, work_date: date) -> Optional[ClockRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_records
                WHERE student_id=%s AND work_date=%s AND status=%s
                """,
                (student_id, work_date, RecordStatus.OPEN.value),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def insert_if_absent(self, record: ClockRecord) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # serialize clock-ins of one student on the student row
                cur.execute("SELECT student_id FROM students WHERE student_id=%s FOR UPDATE", (record.student_id,))
                fetchall(cur)
                cur.execute(
                    """
                    SELECT record_id
                    FROM clock_records
                    WHERE student_id=%s AND work_date IN (%s, %s) AND status=%s
                    FOR UPDATE
                    """,
                    (
                        record.student_id,
                        record.work_date,
                        record.work_date - timedelta(days=1),
                        RecordStatus.OPEN.value,
                    ),
                )
                if fetchall(cur):
                    return False
                cur.execute(
                    """
                    INSERT INTO clock_records(
                        record_id, student_id, rotation_id, site_id, work_date, clock_in, clock_out,
                        total_hours, notes, status, open_flag, metadata
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.record_id,
                        record.student_id,
                        record.rotation_id,
                        record.site_id,
                        record.work_date,
                        record.clock_in,
                        record.clock_out,
                        record.total_hours,
                        record.notes,
                        record.status.value,
                        1 if record.is_open else None,
                        json.dumps(record.metadata.to_dict()),
                    ),
                )
                return True
        except mysql.connector.IntegrityError:
            return False

    def update(self, record: ClockRecord, *, expected_status: RecordStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE clock_records
                SET clock_out=%s, total_hours=%s, notes=%s, status=%s, open_flag=%s, metadata=%s
                WHERE record_id=%s AND status=%s
                """,
                (
                    record.clock_out,
                    record.total_hours,
                    record.notes,
                    record.status.value,
                    1 if record.is_open else None,
                    json.dumps(record.metadata.to_dict()),
                    record.record_id,
                    expected_status.value,
                ),
            )
            if cur.rowcount != 1:
                return False

            if expected_status == RecordStatus.OPEN and record.status == RecordStatus.CLOSED:
                cur.execute(
                    "UPDATE students SET completed_hours = completed_hours + %s WHERE student_id=%s",
                    (record.total_hours or 0, record.student_id),
                )
            return True

    def get(self, record_id: str) -> Optional[ClockRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM clock_records WHERE record_id=%s", (record_id,))
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def list_for_student(self, student_id: str) -> Sequence[ClockRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_records
                WHERE student_id=%s
                ORDER BY clock_in ASC, record_id ASC
                """,
                (student_id,),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def completed_hours(self, student_id: str) -> float:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT completed_hours FROM students WHERE student_id=%s", (student_id,))
            r = fetchone(cur)
            return float(r["completed_hours"]) if r else 0.0

    @staticmethod
    def _to_record(r: dict) -> ClockRecord:
        raw = r.get("metadata")
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        metadata = json.loads(raw) if isinstance(raw, str) else raw
        return ClockRecord(
            record_id=r["record_id"],
            student_id=r["student_id"],
            rotation_id=r["rotation_id"],
            site_id=r["site_id"],
            work_date=r["work_date"],
            clock_in=r.get("clock_in"),
            clock_out=r.get("clock_out"),
            total_hours=float(r["total_hours"]) if r.get("total_hours") is not None else None,
            notes=r.get("notes"),
            status=RecordStatus(r["status"]),
            metadata=ClockMetadata.from_dict(metadata),
        )
