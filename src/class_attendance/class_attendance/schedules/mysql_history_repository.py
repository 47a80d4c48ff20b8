from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    normalize_mysql_date,
    normalize_mysql_time,
)
from .model import Schedule, ScheduleHistory
from .repository import HistoryRepository

_SELECT = """
    SELECT history_id, schedule_id, class_date, staff_id, start_time, end_time, attendance_taken, total_present
    FROM schedule_history
"""


def _to_history(r: dict) -> ScheduleHistory:
    return ScheduleHistory(
        history_id=int(r["history_id"]),
        schedule_id=int(r["schedule_id"]) if r.get("schedule_id") is not None else None,
        class_date=normalize_mysql_date(r["class_date"]),
        staff_id=int(r["staff_id"]) if r.get("staff_id") is not None else None,
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        attendance_taken=bool(r.get("attendance_taken")),
        total_present=int(r.get("total_present") or 0),
    )


class MySQLHistoryRepository(HistoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_schedule_and_staff(self, *, schedule_id: int, staff_id: int) -> Optional[ScheduleHistory]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE schedule_id=%s AND staff_id=%s", (int(schedule_id), int(staff_id)))
            r = fetchone(cur)
            return _to_history(r) if r else None

    def get_for_staff_and_date(self, *, staff_id: int, class_date: date) -> Optional[ScheduleHistory]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE staff_id=%s AND class_date=%s", (int(staff_id), class_date))
            r = fetchone(cur)
            return _to_history(r) if r else None

    def create(
        self,
        *,
        schedule: Schedule,
        staff_id: int,
        attendance_taken: bool,
        total_present: int,
    ) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO schedule_history(
                        schedule_id, class_date, staff_id, start_time, end_time, attendance_taken, total_present
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        schedule.schedule_id,
                        schedule.class_date,
                        int(staff_id),
                        schedule.start_time,
                        schedule.end_time,
                        int(bool(attendance_taken)),
                        int(total_present),
                    ),
                )
                return True
        except Exception as e:
            if is_duplicate_key(e):
                return False
            raise

    def mark_taken(self, *, schedule: Schedule, staff_id: int, total_present: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedule_history(
                    schedule_id, class_date, staff_id, start_time, end_time, attendance_taken, total_present
                )
                VALUES(%s,%s,%s,%s,%s,1,%s)
                ON DUPLICATE KEY UPDATE attendance_taken=1, total_present=VALUES(total_present)
                """,
                (
                    schedule.schedule_id,
                    schedule.class_date,
                    int(staff_id),
                    schedule.start_time,
                    schedule.end_time,
                    int(total_present),
                ),
            )

    def submitted_staff_ids(self, schedule_id: int) -> set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT DISTINCT staff_id FROM schedule_history WHERE schedule_id=%s AND staff_id IS NOT NULL",
                (int(schedule_id),),
            )
            return {int(r["staff_id"]) for r in fetchall(cur)}

    def locked_schedule_ids(self, staff_id: int) -> set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT DISTINCT schedule_id FROM schedule_history WHERE staff_id=%s AND schedule_id IS NOT NULL",
                (int(staff_id),),
            )
            return {int(r["schedule_id"]) for r in fetchall(cur)}

    def list_all(self, *, staff_id: Optional[int] = None) -> Sequence[ScheduleHistory]:
        with db_cursor(self._conn_factory) as (_, cur):
            if staff_id is not None:
                cur.execute(
                    f"{_SELECT} WHERE staff_id=%s ORDER BY class_date DESC, start_time DESC",
                    (int(staff_id),),
                )
            else:
                cur.execute(f"{_SELECT} ORDER BY class_date DESC, start_time DESC")
            return [_to_history(r) for r in fetchall(cur)]

    def distinct_dates(self) -> Sequence[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT DISTINCT class_date FROM schedule_history ORDER BY class_date ASC")
            return [normalize_mysql_date(r["class_date"]) for r in fetchall(cur)]
