from __future__ import annotations

import logging
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..roster.repository import StaffRepository
from .model import Schedule
from .repository import HistoryRepository, ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleReconciler:
    """Decides when a schedule has been fully accounted for and retires it.

    A schedule is OPEN while it is in the live store and RETIRED once deleted.
    It retires when every expected staff member has a history row for it:
    the explicit ``staff_ids`` list when set, otherwise the whole staff roster.

    The check is read-then-act. Two concurrent submissions may both decide to
    retire; the second delete is a no-op.
    """

    def __init__(
        self,
        schedules: ScheduleRepository,
        history: HistoryRepository,
        staff: StaffRepository,
        attendance: AttendanceRepository,
    ):
        self._schedules = schedules
        self._history = history
        self._staff = staff
        self._attendance = attendance

    def expected_staff_ids(self, schedule: Schedule) -> list[int]:
        if schedule.staff_ids:
            return list(schedule.staff_ids)
        return list(self._staff.list_ids())

    def is_fully_submitted(self, schedule: Schedule) -> bool:
        submitted = self._history.submitted_staff_ids(schedule.schedule_id)
        if schedule.staff_ids:
            return set(schedule.staff_ids) <= submitted
        return len(submitted) >= self._staff.count()

    def record_submission(
        self,
        *,
        schedule: Schedule,
        staff_id: int,
        present_count: Optional[int] = None,
    ) -> bool:
        """Stamp the staff's history row and retire the schedule if now complete.

        Returns True when this call retired the schedule.
        """

        if present_count is None:
            present_count = self._attendance.count_present(staff_id=staff_id, class_date=schedule.class_date)
        self._history.mark_taken(schedule=schedule, staff_id=staff_id, total_present=int(present_count))
        return self.reconcile(schedule)

    def reconcile(self, schedule: Schedule) -> bool:
        if not self.is_fully_submitted(schedule):
            return False
        return self.retire(schedule.schedule_id)

    def retire(self, schedule_id: int) -> bool:
        deleted = self._schedules.delete(schedule_id)
        if deleted:
            logger.info("Schedule %s retired", schedule_id)
        else:
            logger.debug("Schedule %s already retired", schedule_id)
        return deleted
