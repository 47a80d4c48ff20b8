from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, NewAttendance


class AttendanceRepository(Protocol):
    """The attendance ledger.

    Uniqueness on (student_id, staff_id, schedule_id, class_date) is the only
    concurrency guard: writers never lock beyond it.
    """

    def upsert_one(
        self,
        *,
        student_id: int,
        staff_id: int,
        schedule_id: int,
        class_date: date,
        status: AttendanceStatus,
    ) -> None:
        """Insert, or overwrite the status of the existing row for the key (atomic)."""

        raise NotImplementedError

    def bulk_insert_ignore(self, records: Iterable[NewAttendance]) -> int:
        """Insert a batch; rows colliding on the unique key are skipped silently.

        Any other storage error propagates. Returns the number of new rows.
        """

        raise NotImplementedError

    def override_status(
        self,
        *,
        student_id: int,
        class_date: date,
        status: AttendanceStatus,
        schedule_id: Optional[int] = None,
    ) -> int:
        """Admin override: set status on every existing row for the student/date.

        Returns the number of rows matched.
        """

        raise NotImplementedError

    def present_student_ids(
        self,
        class_date: date,
        *,
        staff_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
    ) -> set[int]:
        raise NotImplementedError

    def count_present(self, *, staff_id: int, class_date: date) -> int:
        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def distinct_dates(self) -> Sequence[date]:
        """Dates with any ledger activity, ascending."""

        raise NotImplementedError
