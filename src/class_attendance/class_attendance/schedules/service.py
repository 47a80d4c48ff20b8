from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import fmt_date, fmt_time, local_today
from ..core.exceptions import NotFoundError, ValidationError
from ..roster.repository import StaffRepository
from .model import Schedule
from .repository import HistoryRepository, ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleService:
    """Administrator-side schedule management."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        history: HistoryRepository,
        staff: StaffRepository,
        *,
        offset_minutes: int,
    ):
        self._schedules = schedules
        self._history = history
        self._staff = staff
        self._offset = int(offset_minutes)

    def create(
        self,
        *,
        class_date: date,
        start_time,
        end_time,
        staff_ids: Iterable[int] = (),
    ) -> Schedule:
        if end_time <= start_time:
            raise ValidationError("End time must be after start time")

        staff_ids = list(staff_ids)
        for staff_id in staff_ids:
            if not self._staff.get_by_id(staff_id):
                raise NotFoundError(f"Staff {staff_id} not found.")

        schedule_id = self._schedules.create(
            class_date=class_date,
            start_time=start_time,
            end_time=end_time,
            staff_ids=staff_ids,
        )
        logger.info("Schedule %s created for %s %s-%s", schedule_id, class_date, start_time, end_time)
        return Schedule(
            schedule_id=schedule_id,
            class_date=class_date,
            start_time=start_time,
            end_time=end_time,
            staff_ids=tuple(staff_ids),
        )

    def list_upcoming(self, *, now: Optional[datetime] = None) -> Sequence[Schedule]:
        return self._schedules.list_from(local_today(self._offset, now=now))

    def list_for_date(self, class_date: date) -> Sequence[Schedule]:
        schedules = self._schedules.list_for_date(class_date)
        if not schedules:
            raise NotFoundError("No class scheduled for this date")
        return schedules

    def cancel(self, schedule_id: int) -> None:
        if not self._schedules.delete(schedule_id):
            raise NotFoundError("Schedule not found")
        logger.info("Schedule %s cancelled", schedule_id)

    def history_by_schedule(self) -> list[dict]:
        """History rows grouped per schedule, newest class first."""

        names = self._staff.names_by_id()
        groups: dict[tuple, dict] = {}
        for h in self._history.list_all():
            key = (h.schedule_id, h.class_date, h.start_time)
            group = groups.get(key)
            if group is None:
                group = {
                    "scheduleId": h.schedule_id,
                    "classDate": fmt_date(h.class_date),
                    "startTime": fmt_time(h.start_time) if h.start_time else None,
                    "endTime": fmt_time(h.end_time) if h.end_time else None,
                    "staff": [],
                }
                groups[key] = group
            group["staff"].append(
                {
                    "staffId": h.staff_id,
                    "staffName": names.get(h.staff_id) if h.staff_id is not None else None,
                    "attendanceTaken": h.attendance_taken,
                    "totalPresent": h.total_present,
                }
            )
        return list(groups.values())

    def history_by_staff(self, *, staff_id: Optional[int] = None) -> list[dict]:
        names = self._staff.names_by_id()
        groups: dict[Optional[int], dict] = {}
        for h in self._history.list_all(staff_id=staff_id):
            group = groups.get(h.staff_id)
            if group is None:
                group = {
                    "staffId": h.staff_id,
                    "staffName": names.get(h.staff_id) if h.staff_id is not None else None,
                    "history": [],
                }
                groups[h.staff_id] = group
            group["history"].append(h.to_dict())
        return list(groups.values())
