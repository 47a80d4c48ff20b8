from __future__ import annotations

from datetime import date, time
from typing import Iterable, Optional, Sequence

from ..core.exceptions import DuplicateScheduleError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    in_clause,
    is_duplicate_key,
    normalize_mysql_date,
    normalize_mysql_time,
)
from .model import Schedule
from .repository import ScheduleRepository

_SELECT = "SELECT schedule_id, class_date, start_time, end_time FROM class_schedules"


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _hydrate(self, cur, rows: list[dict]) -> list[Schedule]:
        if not rows:
            return []
        ids = [int(r["schedule_id"]) for r in rows]
        cur.execute(
            f"SELECT schedule_id, staff_id FROM schedule_staff WHERE schedule_id IN ({in_clause(ids)}) ORDER BY staff_id",
            tuple(ids),
        )
        staff_by_schedule: dict[int, list[int]] = {}
        for r in fetchall(cur):
            staff_by_schedule.setdefault(int(r["schedule_id"]), []).append(int(r["staff_id"]))

        return [
            Schedule(
                schedule_id=int(r["schedule_id"]),
                class_date=normalize_mysql_date(r["class_date"]),
                start_time=normalize_mysql_time(r["start_time"]),
                end_time=normalize_mysql_time(r["end_time"]),
                staff_ids=tuple(staff_by_schedule.get(int(r["schedule_id"]), [])),
            )
            for r in rows
        ]

    def create(
        self,
        *,
        class_date: date,
        start_time: time,
        end_time: time,
        staff_ids: Iterable[int] = (),
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO class_schedules(class_date, start_time, end_time)
                    VALUES(%s,%s,%s)
                    """,
                    (class_date, start_time, end_time),
                )
                schedule_id = int(cur.lastrowid)
                staff_rows = [(schedule_id, int(s)) for s in staff_ids]
                if staff_rows:
                    cur.executemany(
                        "INSERT INTO schedule_staff(schedule_id, staff_id) VALUES(%s,%s)",
                        staff_rows,
                    )
                return schedule_id
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicateScheduleError("A class is already scheduled for this date and start time.") from e
            raise

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE schedule_id=%s", (int(schedule_id),))
            found = self._hydrate(cur, fetchall(cur))
            return found[0] if found else None

    def list_all(self) -> Sequence[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} ORDER BY class_date ASC, start_time ASC")
            return self._hydrate(cur, fetchall(cur))

    def list_from(self, start: date) -> Sequence[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE class_date >= %s ORDER BY class_date ASC, start_time ASC", (start,))
            return self._hydrate(cur, fetchall(cur))

    def list_for_date(self, class_date: date) -> Sequence[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE class_date = %s ORDER BY start_time ASC", (class_date,))
            return self._hydrate(cur, fetchall(cur))

    def delete(self, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_schedules WHERE schedule_id=%s", (int(schedule_id),))
            deleted = cur.rowcount > 0
            cur.execute("DELETE FROM schedule_staff WHERE schedule_id=%s", (int(schedule_id),))
            return deleted
