from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Ledger row: one status per (student, staff, schedule, date)."""

    record_id: int
    student_id: int
    staff_id: int
    schedule_id: int
    class_date: date
    status: AttendanceStatus


@dataclass(frozen=True)
class NewAttendance:
    """Row to write; the ledger assigns ``record_id``."""

    student_id: int
    staff_id: int
    schedule_id: int
    class_date: date
    status: AttendanceStatus

    @property
    def key(self) -> tuple[int, int, int, date]:
        return (self.student_id, self.staff_id, self.schedule_id, self.class_date)
