"""Backstop that force-closes expired schedules.

Staff who never submit would otherwise keep a schedule alive forever. The
sweep backfills ``Absent`` rows and a history row for each of them, then
retires every expired schedule regardless of the reconciler's own condition.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from ..attendance.model import NewAttendance
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_utc
from ..core.enums import AttendanceStatus, WindowState
from ..roster.repository import StudentRepository
from .model import Schedule
from .reconciler import ScheduleReconciler
from .repository import HistoryRepository, ScheduleRepository
from .window import evaluate_window

logger = logging.getLogger(__name__)


class SweepThrottle:
    """Process-wide "last successful sweep" marker.

    ``mark`` is the only place the marker changes. A sweep that runs slightly
    too often is harmless, so no locking is done.
    """

    def __init__(self, cooldown_seconds: float, *, clock: Callable[[], float] = time.monotonic):
        self._cooldown = float(cooldown_seconds)
        self._clock = clock
        self.last_run: Optional[float] = None

    def due(self) -> bool:
        return self.last_run is None or self._clock() - self.last_run >= self._cooldown

    def mark(self) -> None:
        self.last_run = self._clock()


@dataclass
class SweepReport:
    retired: list[int] = field(default_factory=list)
    backfilled: list[tuple[int, int]] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


class ExpirySweeper:
    def __init__(
        self,
        schedules: ScheduleRepository,
        history: HistoryRepository,
        attendance: AttendanceRepository,
        students: StudentRepository,
        reconciler: ScheduleReconciler,
        *,
        throttle: SweepThrottle,
        offset_minutes: int,
    ):
        self._schedules = schedules
        self._history = history
        self._attendance = attendance
        self._students = students
        self._reconciler = reconciler
        self._throttle = throttle
        self._offset = int(offset_minutes)

    def maybe_sweep(self, now: Optional[datetime] = None) -> Optional[SweepReport]:
        """Sweep if the cooldown has elapsed. Never raises; failures are logged.

        Only a sweep that completes restarts the cooldown.
        """

        if not self._throttle.due():
            return None
        try:
            report = self.sweep(now)
        except Exception:
            logger.exception("Expiry sweep failed")
            return None
        self._throttle.mark()
        return report

    def sweep(self, now: Optional[datetime] = None) -> SweepReport:
        now = now or now_utc()
        report = SweepReport()

        for schedule in self._schedules.list_all():
            if evaluate_window(schedule, now, offset_minutes=self._offset) is not WindowState.EXPIRED:
                continue

            try:
                self._backfill(schedule, report)
            except Exception:
                logger.exception("Backfill failed for schedule %s; will retry next sweep", schedule.schedule_id)
                report.failed.append(schedule.schedule_id)
                continue

            try:
                self._reconciler.retire(schedule.schedule_id)
                report.retired.append(schedule.schedule_id)
            except Exception:
                logger.exception("Could not retire expired schedule %s", schedule.schedule_id)
                report.failed.append(schedule.schedule_id)

        return report

    def _backfill(self, schedule: Schedule, report: SweepReport) -> None:
        student_ids: Optional[list[int]] = None

        for staff_id in self._reconciler.expected_staff_ids(schedule):
            if self._history.get_for_schedule_and_staff(schedule_id=schedule.schedule_id, staff_id=staff_id):
                continue

            if student_ids is None:
                student_ids = list(self._students.list_ids())

            inserted = self._attendance.bulk_insert_ignore(
                NewAttendance(
                    student_id=sid,
                    staff_id=staff_id,
                    schedule_id=schedule.schedule_id,
                    class_date=schedule.class_date,
                    status=AttendanceStatus.ABSENT,
                )
                for sid in student_ids
            )
            created = self._history.create(
                schedule=schedule,
                staff_id=staff_id,
                attendance_taken=False,
                total_present=0,
            )
            if not created:
                logger.info(
                    "Staff %s already has history for %s; kept existing row",
                    staff_id,
                    schedule.class_date,
                )
            report.backfilled.append((schedule.schedule_id, staff_id))
            logger.info(
                "Backfilled %s absentee rows for staff %s on schedule %s",
                inserted,
                staff_id,
                schedule.schedule_id,
            )
