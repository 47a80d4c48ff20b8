from __future__ import annotations

import itertools
from datetime import date, datetime, time
from typing import Iterable, Optional

import pytz

from src.class_attendance.class_attendance.attendance.model import AttendanceRecord, NewAttendance
from src.class_attendance.class_attendance.container import assemble
from src.class_attendance.class_attendance.core.enums import AttendanceStatus
from src.class_attendance.class_attendance.core.exceptions import DuplicateScheduleError
from src.class_attendance.class_attendance.roster.model import Staff, Student
from src.class_attendance.class_attendance.schedules.model import Schedule, ScheduleHistory

IST = pytz.FixedOffset(330)


def ist(y: int, m: int, d: int, hh: int, mm: int) -> datetime:
    return IST.localize(datetime(y, m, d, hh, mm))


class InMemoryStudents:
    def __init__(self, students: Iterable[Student]):
        self.by_id = {s.student_id: s for s in students}

    def list_ids(self):
        return sorted(self.by_id)

    def list_students(self, *, class_section=None):
        items = list(self.by_id.values())
        if class_section:
            items = [s for s in items if s.class_section.lower() == class_section.lower()]
        return sorted(items, key=lambda s: s.name)

    def get_many(self, student_ids):
        found = [self.by_id[i] for i in student_ids if i in self.by_id]
        return sorted(found, key=lambda s: s.name)


class InMemoryStaff:
    def __init__(self, staff: Iterable[Staff]):
        self.by_id = {s.staff_id: s for s in staff}

    def get_by_id(self, staff_id):
        return self.by_id.get(staff_id)

    def list_ids(self):
        return sorted(self.by_id)

    def count(self):
        return len(self.by_id)

    def names_by_id(self):
        return {k: v.name for k, v in self.by_id.items()}


class InMemorySchedules:
    def __init__(self):
        self.by_id: dict[int, Schedule] = {}
        self._ids = itertools.count(1)
        self.delete_calls: list[int] = []
        self.fail_delete_for: set[int] = set()

    def add(self, schedule: Schedule) -> Schedule:
        self.by_id[schedule.schedule_id] = schedule
        return schedule

    def create(self, *, class_date, start_time, end_time, staff_ids=()):
        if any(s.class_date == class_date and s.start_time == start_time for s in self.by_id.values()):
            raise DuplicateScheduleError("A class is already scheduled for this date and start time.")
        sid = next(self._ids)
        while sid in self.by_id:
            sid = next(self._ids)
        self.by_id[sid] = Schedule(sid, class_date, start_time, end_time, tuple(staff_ids))
        return sid

    def get_by_id(self, schedule_id):
        return self.by_id.get(schedule_id)

    def list_all(self):
        return sorted(self.by_id.values(), key=lambda s: (s.class_date, s.start_time))

    def list_from(self, start):
        return [s for s in self.list_all() if s.class_date >= start]

    def list_for_date(self, class_date):
        return [s for s in self.list_all() if s.class_date == class_date]

    def delete(self, schedule_id):
        self.delete_calls.append(schedule_id)
        if schedule_id in self.fail_delete_for:
            raise RuntimeError("connection lost")
        return self.by_id.pop(schedule_id, None) is not None


class InMemoryHistory:
    """Mirrors the unique indexes on (class_date, staff_id) and (schedule_id, staff_id)."""

    def __init__(self):
        self.rows: list[ScheduleHistory] = []
        self._ids = itertools.count(1)

    def _collides(self, schedule: Schedule, staff_id: int) -> Optional[int]:
        for i, h in enumerate(self.rows):
            if h.staff_id == staff_id and (h.schedule_id == schedule.schedule_id or h.class_date == schedule.class_date):
                return i
        return None

    def get_for_schedule_and_staff(self, *, schedule_id, staff_id):
        return next((h for h in self.rows if h.schedule_id == schedule_id and h.staff_id == staff_id), None)

    def get_for_staff_and_date(self, *, staff_id, class_date):
        return next((h for h in self.rows if h.staff_id == staff_id and h.class_date == class_date), None)

    def create(self, *, schedule, staff_id, attendance_taken, total_present):
        if self._collides(schedule, staff_id) is not None:
            return False
        self.rows.append(
            ScheduleHistory(
                history_id=next(self._ids),
                schedule_id=schedule.schedule_id,
                class_date=schedule.class_date,
                staff_id=staff_id,
                start_time=schedule.start_time,
                end_time=schedule.end_time,
                attendance_taken=attendance_taken,
                total_present=total_present,
            )
        )
        return True

    def mark_taken(self, *, schedule, staff_id, total_present):
        i = self._collides(schedule, staff_id)
        if i is None:
            self.create(schedule=schedule, staff_id=staff_id, attendance_taken=True, total_present=total_present)
            return
        old = self.rows[i]
        self.rows[i] = ScheduleHistory(
            history_id=old.history_id,
            schedule_id=old.schedule_id,
            class_date=old.class_date,
            staff_id=old.staff_id,
            start_time=old.start_time,
            end_time=old.end_time,
            attendance_taken=True,
            total_present=total_present,
        )

    def submitted_staff_ids(self, schedule_id):
        return {h.staff_id for h in self.rows if h.schedule_id == schedule_id and h.staff_id is not None}

    def locked_schedule_ids(self, staff_id):
        return {h.schedule_id for h in self.rows if h.staff_id == staff_id and h.schedule_id is not None}

    def list_all(self, *, staff_id=None):
        rows = [h for h in self.rows if staff_id is None or h.staff_id == staff_id]
        return sorted(rows, key=lambda h: (h.class_date, h.start_time or time.min), reverse=True)

    def distinct_dates(self):
        return sorted({h.class_date for h in self.rows})


class InMemoryAttendance:
    """Ledger keyed by (student, staff, schedule, date), like the unique index."""

    def __init__(self):
        self.rows: dict[tuple[int, int, int, date], AttendanceRecord] = {}
        self._ids = itertools.count(1)
        self.fail_bulk_for_staff: set[int] = set()

    def upsert_one(self, *, student_id, staff_id, schedule_id, class_date, status):
        key = (student_id, staff_id, schedule_id, class_date)
        old = self.rows.get(key)
        record_id = old.record_id if old else next(self._ids)
        self.rows[key] = AttendanceRecord(record_id, student_id, staff_id, schedule_id, class_date, status)

    def bulk_insert_ignore(self, records: Iterable[NewAttendance]) -> int:
        inserted = 0
        for r in records:
            if r.staff_id in self.fail_bulk_for_staff:
                raise RuntimeError("disk full")
            if r.key in self.rows:
                continue
            self.rows[r.key] = AttendanceRecord(
                next(self._ids), r.student_id, r.staff_id, r.schedule_id, r.class_date, r.status
            )
            inserted += 1
        return inserted

    def override_status(self, *, student_id, class_date, status, schedule_id=None):
        matched = 0
        for key, r in list(self.rows.items()):
            if r.student_id != student_id or r.class_date != class_date:
                continue
            if schedule_id is not None and r.schedule_id != schedule_id:
                continue
            self.rows[key] = AttendanceRecord(r.record_id, r.student_id, r.staff_id, r.schedule_id, r.class_date, status)
            matched += 1
        return matched

    def present_student_ids(self, class_date, *, staff_id=None, schedule_id=None):
        return {
            r.student_id
            for r in self.rows.values()
            if r.class_date == class_date
            and r.status is AttendanceStatus.PRESENT
            and (staff_id is None or r.staff_id == staff_id)
            and (schedule_id is None or r.schedule_id == schedule_id)
        }

    def count_present(self, *, staff_id, class_date):
        return sum(
            1
            for r in self.rows.values()
            if r.staff_id == staff_id and r.class_date == class_date and r.status is AttendanceStatus.PRESENT
        )

    def list_all(self):
        return sorted(self.rows.values(), key=lambda r: (r.class_date, r.record_id))

    def distinct_dates(self):
        return sorted({r.class_date for r in self.rows.values()})

    def for_staff(self, staff_id, schedule_id):
        return {r.student_id: r.status for r in self.rows.values() if r.staff_id == staff_id and r.schedule_id == schedule_id}


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


def make_students(*names_and_attrs) -> list[Student]:
    return [Student(student_id=i, name=name, **attrs) for i, (name, attrs) in enumerate(names_and_attrs, start=1)]


def build(
    *,
    students: Iterable[Student] = (),
    staff: Iterable[Staff] = (),
    cooldown: float = 3600,
    clock: Optional[FakeClock] = None,
):
    """Container over in-memory repositories."""

    return assemble(
        students_repo=InMemoryStudents(students),
        staff_repo=InMemoryStaff(staff),
        schedules_repo=InMemorySchedules(),
        history_repo=InMemoryHistory(),
        attendance_repo=InMemoryAttendance(),
        global_pin="1945",
        offset_minutes=330,
        sweep_cooldown_seconds=cooldown,
        clock=clock or FakeClock(),
    )


def schedule_on(schedule_id: int, day: date, start: time, end: time, staff_ids=()) -> Schedule:
    return Schedule(schedule_id, day, start, end, tuple(staff_ids))
