from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional

from ..common.datetime_utils import fmt_date, fmt_time


@dataclass(frozen=True)
class Schedule:
    """One class session.

    ``staff_ids`` lists the staff expected to submit; empty means the whole
    staff roster is expected.
    """

    schedule_id: int
    class_date: date
    start_time: time
    end_time: time
    staff_ids: tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.schedule_id,
            "date": fmt_date(self.class_date),
            "startTime": fmt_time(self.start_time),
            "endTime": fmt_time(self.end_time),
            "staffIds": list(self.staff_ids),
        }


@dataclass(frozen=True)
class ScheduleHistory:
    """Durable per-(schedule, staff) outcome that survives schedule retirement."""

    history_id: int
    schedule_id: Optional[int]
    class_date: date
    staff_id: Optional[int]
    start_time: Optional[time]
    end_time: Optional[time]
    attendance_taken: bool = False
    total_present: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.history_id,
            "scheduleId": self.schedule_id,
            "classDate": fmt_date(self.class_date),
            "staffId": self.staff_id,
            "startTime": fmt_time(self.start_time) if self.start_time else None,
            "endTime": fmt_time(self.end_time) if self.end_time else None,
            "attendanceTaken": self.attendance_taken,
            "totalPresent": self.total_present,
        }
