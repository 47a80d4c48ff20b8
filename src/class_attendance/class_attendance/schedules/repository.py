from __future__ import annotations

from datetime import date, time
from typing import Iterable, Optional, Protocol, Sequence

from .model import Schedule, ScheduleHistory


class ScheduleRepository(Protocol):
    """Live (not yet retired) schedules."""

    def create(
        self,
        *,
        class_date: date,
        start_time: time,
        end_time: time,
        staff_ids: Iterable[int] = (),
    ) -> int:
        """Insert a schedule; raises ``DuplicateScheduleError`` on a (date, start) clash.

        Returns schedule_id.
        """

        raise NotImplementedError

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Schedule]:
        """All live schedules ordered by date then start time."""

        raise NotImplementedError

    def list_from(self, start: date) -> Sequence[Schedule]:
        raise NotImplementedError

    def list_for_date(self, class_date: date) -> Sequence[Schedule]:
        raise NotImplementedError

    def delete(self, schedule_id: int) -> bool:
        """Delete a schedule. Deleting a missing schedule returns False."""

        raise NotImplementedError


class HistoryRepository(Protocol):
    def get_for_schedule_and_staff(self, *, schedule_id: int, staff_id: int) -> Optional[ScheduleHistory]:
        raise NotImplementedError

    def get_for_staff_and_date(self, *, staff_id: int, class_date: date) -> Optional[ScheduleHistory]:
        raise NotImplementedError

    def create(
        self,
        *,
        schedule: Schedule,
        staff_id: int,
        attendance_taken: bool,
        total_present: int,
    ) -> bool:
        """Insert a history row.

        Returns False (no write) when the row collides with an existing
        (schedule, staff) or (date, staff) entry.
        """

        raise NotImplementedError

    def mark_taken(self, *, schedule: Schedule, staff_id: int, total_present: int) -> None:
        """Create-or-update the (schedule, staff) row with attendance_taken set."""

        raise NotImplementedError

    def submitted_staff_ids(self, schedule_id: int) -> set[int]:
        raise NotImplementedError

    def locked_schedule_ids(self, staff_id: int) -> set[int]:
        raise NotImplementedError

    def list_all(self, *, staff_id: Optional[int] = None) -> Sequence[ScheduleHistory]:
        """History rows, newest class date first."""

        raise NotImplementedError

    def distinct_dates(self) -> Sequence[date]:
        raise NotImplementedError
