from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_one(
        self,
        *,
        student_id: int,
        staff_id: int,
        schedule_id: int,
        class_date: date,
        status: AttendanceStatus,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, staff_id, schedule_id, class_date, status)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status)
                """,
                (int(student_id), int(staff_id), int(schedule_id), class_date, status.value),
            )

    def bulk_insert_ignore(self, records: Iterable[NewAttendance]) -> int:
        rows = [
            (r.student_id, r.staff_id, r.schedule_id, r.class_date, r.status.value)
            for r in records
        ]
        if not rows:
            return 0
        # Duplicate keys become a no-op update; any other error still raises.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance_records(student_id, staff_id, schedule_id, class_date, status)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE record_id=record_id
                """,
                rows,
            )
            return max(int(cur.rowcount), 0)

    def override_status(
        self,
        *,
        student_id: int,
        class_date: date,
        status: AttendanceStatus,
        schedule_id: Optional[int] = None,
    ) -> int:
        clauses = ["student_id=%s", "class_date=%s"]
        params: list[object] = [int(student_id), class_date]
        if schedule_id is not None:
            clauses.append("schedule_id=%s")
            params.append(int(schedule_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM attendance_records WHERE {where}", tuple(params))
            row = fetchone(cur)
            matched = int(row["n"]) if row else 0
            if matched:
                cur.execute(
                    f"UPDATE attendance_records SET status=%s WHERE {where}",
                    (status.value, *params),
                )
            return matched

    def present_student_ids(
        self,
        class_date: date,
        *,
        staff_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
    ) -> set[int]:
        clauses = ["class_date=%s", "status=%s"]
        params: list[object] = [class_date, AttendanceStatus.PRESENT.value]
        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(int(staff_id))
        if schedule_id is not None:
            clauses.append("schedule_id=%s")
            params.append(int(schedule_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT DISTINCT student_id FROM attendance_records WHERE {where}", tuple(params))
            return {int(r["student_id"]) for r in fetchall(cur)}

    def count_present(self, *, staff_id: int, class_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM attendance_records
                WHERE staff_id=%s AND class_date=%s AND status=%s
                """,
                (int(staff_id), class_date, AttendanceStatus.PRESENT.value),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id, student_id, staff_id, schedule_id, class_date, status
                FROM attendance_records
                ORDER BY class_date ASC, record_id ASC
                """
            )
            return [
                AttendanceRecord(
                    record_id=int(r["record_id"]),
                    student_id=int(r["student_id"]),
                    staff_id=int(r["staff_id"]),
                    schedule_id=int(r["schedule_id"]),
                    class_date=normalize_mysql_date(r["class_date"]),
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def distinct_dates(self) -> Sequence[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT DISTINCT class_date FROM attendance_records ORDER BY class_date ASC")
            return [normalize_mysql_date(r["class_date"]) for r in fetchall(cur)]
