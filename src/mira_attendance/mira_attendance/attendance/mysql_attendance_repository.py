from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus, LocationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceRecord, LocationStamp
from .repository import AttendanceRepository

_COLUMNS = "record_id, user_id, work_date, status, check_in_time, location_status, coordinates"


def _row_to_record(r: dict) -> AttendanceRecord:
    location = None
    if r.get("location_status"):
        location = LocationStamp(
            status=LocationStatus(r["location_status"]),
            coordinates=r.get("coordinates"),
        )
    return AttendanceRecord(
        record_id=r["record_id"],
        user_id=str(r["user_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        timestamp=normalize_mysql_time(r.get("check_in_time")),
        location=location,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def read(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date=%s
                """,
                (user_id, work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def append(self, record: AttendanceRecord) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO attendance_records({_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.record_id,
                        record.user_id,
                        record.work_date,
                        record.status.value,
                        record.timestamp,
                        record.location.status.value if record.location else None,
                        record.location.coordinates if record.location else None,
                    ),
                )
        except mysql.connector.IntegrityError:
            # UNIQUE(user_id, work_date): another session stored the day first.
            return False
        return True

    def query(self, *, user_id: Optional[str] = None, work_date: Optional[date] = None) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(user_id)
        if work_date is not None:
            clauses.append("work_date=%s")
            params.append(work_date)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                {where}
                ORDER BY work_date DESC, user_id ASC
                """,
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
