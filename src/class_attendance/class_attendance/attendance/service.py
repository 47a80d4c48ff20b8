from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..core.constants import ADMIN_STAFF_ID, NO_SCHEDULE_ID
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AuthenticationError,
    DuplicateSubmissionError,
    NotFoundError,
    ValidationError,
)
from ..roster.model import Staff, Student
from ..roster.repository import StaffRepository, StudentRepository
from ..schedules.model import Schedule
from ..schedules.reconciler import ScheduleReconciler
from ..schedules.repository import HistoryRepository, ScheduleRepository
from ..schedules.sweeper import ExpirySweeper
from ..schedules.window import ensure_submission_open
from .model import NewAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

ALREADY_SUBMITTED = "You have already submitted."


def parse_status(value) -> AttendanceStatus:
    v = str(value or "").strip().lower()
    for status in AttendanceStatus:
        if status.value.lower() == v:
            return status
    raise ValidationError("Status must be Present or Absent")


def pin_matches(expected, given) -> bool:
    if given is None:
        return False
    return hmac.compare_digest(str(expected).strip().encode("utf-8"), str(given).strip().encode("utf-8"))


@dataclass(frozen=True)
class RollResult:
    schedule_id: int
    present: int
    absent: int
    retired: bool


class AttendanceService:
    """Staff roll submission, admin overrides and ledger queries."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        history: HistoryRepository,
        students: StudentRepository,
        staff: StaffRepository,
        reconciler: ScheduleReconciler,
        sweeper: ExpirySweeper,
        *,
        global_pin: str,
        offset_minutes: int,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._history = history
        self._students = students
        self._staff = staff
        self._reconciler = reconciler
        self._sweeper = sweeper
        self._global_pin = str(global_pin)
        self._offset = int(offset_minutes)

    def _open_schedule(self, schedule_id: int, now: datetime) -> Schedule:
        schedule = self._schedules.get_by_id(schedule_id)
        if not schedule:
            raise NotFoundError("Invalid or expired class schedule.")
        ensure_submission_open(schedule, now, offset_minutes=self._offset)
        return schedule

    def _authorized_staff(self, staff_id: int, pin) -> Staff:
        staff = self._staff.get_by_id(staff_id)
        if not staff:
            raise NotFoundError("Staff not found.")
        if not pin_matches(staff.pin, pin):
            raise AuthenticationError("Invalid PIN.")
        return staff

    def _ensure_date_unlocked(self, schedule: Schedule, staff_id: int) -> None:
        other = self._history.get_for_staff_and_date(staff_id=staff_id, class_date=schedule.class_date)
        if other and other.schedule_id != schedule.schedule_id:
            raise DuplicateSubmissionError("You have already submitted attendance for this date.")

    def _ensure_known_students(self, student_ids: Iterable[int]) -> None:
        wanted = set(student_ids)
        unknown = sorted(wanted.difference(self._students.list_ids()))
        if unknown:
            raise ValidationError(f"Unknown student id(s): {', '.join(str(i) for i in unknown)}")

    def update_one(
        self,
        *,
        student_id: int,
        status: AttendanceStatus,
        pin,
        class_date: Optional[date] = None,
        schedule_id: Optional[int] = None,
        staff_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Single-student update.

        With ``staff_id`` this is a staff submission: it takes part in
        schedule reconciliation. Without it, it is an admin override checked
        against the global PIN, and it never touches history or retirement.
        """

        now = now or now_utc()

        if staff_id is not None:
            if schedule_id is None:
                raise ValidationError("Missing required fields for staff submission.")
            schedule = self._open_schedule(schedule_id, now)
            self._authorized_staff(staff_id, pin)
            self._ensure_known_students([student_id])
            self._ensure_date_unlocked(schedule, staff_id)

            self._attendance.upsert_one(
                student_id=student_id,
                staff_id=staff_id,
                schedule_id=schedule.schedule_id,
                class_date=schedule.class_date,
                status=status,
            )
            self._reconciler.record_submission(schedule=schedule, staff_id=staff_id)
            return

        if not pin_matches(self._global_pin, pin):
            raise AuthenticationError("Invalid admin PIN.")

        if schedule_id is not None:
            schedule = self._open_schedule(schedule_id, now)
            class_date = schedule.class_date
        if class_date is None:
            raise ValidationError("Missing required fields.")
        self._ensure_known_students([student_id])

        matched = self._attendance.override_status(
            student_id=student_id,
            class_date=class_date,
            status=status,
            schedule_id=schedule_id,
        )
        if not matched:
            self._attendance.upsert_one(
                student_id=student_id,
                staff_id=ADMIN_STAFF_ID,
                schedule_id=schedule_id if schedule_id is not None else NO_SCHEDULE_ID,
                class_date=class_date,
                status=status,
            )
        logger.info("Admin set student %s to %s on %s", student_id, status.value, class_date)

    def submit_roll(
        self,
        *,
        schedule_id: int,
        staff_id: int,
        pin,
        present_student_ids: Iterable[int],
        now: Optional[datetime] = None,
    ) -> RollResult:
        """Bulk roll: listed students Present, every other roster student Absent.

        A staff member submits a roll for a schedule at most once.
        """

        now = now or now_utc()
        self._authorized_staff(staff_id, pin)
        schedule = self._open_schedule(schedule_id, now)

        if self._history.get_for_schedule_and_staff(schedule_id=schedule.schedule_id, staff_id=staff_id):
            raise DuplicateSubmissionError(ALREADY_SUBMITTED)
        self._ensure_date_unlocked(schedule, staff_id)

        present = set(present_student_ids)
        self._ensure_known_students(present)
        roster = list(self._students.list_ids())

        self._attendance.bulk_insert_ignore(
            NewAttendance(
                student_id=sid,
                staff_id=staff_id,
                schedule_id=schedule.schedule_id,
                class_date=schedule.class_date,
                status=AttendanceStatus.PRESENT if sid in present else AttendanceStatus.ABSENT,
            )
            for sid in roster
        )

        created = self._history.create(
            schedule=schedule,
            staff_id=staff_id,
            attendance_taken=True,
            total_present=len(present),
        )
        if not created:
            # Lost a race with a concurrent submission by the same staff member.
            raise DuplicateSubmissionError(ALREADY_SUBMITTED)

        retired = self._reconciler.reconcile(schedule)
        logger.info(
            "Staff %s submitted roll for schedule %s (%s present of %s)",
            staff_id,
            schedule.schedule_id,
            len(present),
            len(roster),
        )
        return RollResult(
            schedule_id=schedule.schedule_id,
            present=len(present),
            absent=len(roster) - len(present),
            retired=retired,
        )

    def open_schedules_for(self, staff_id: Optional[int], *, now: Optional[datetime] = None) -> Sequence[Schedule]:
        """Live schedules the staff member has not yet locked (sweeps first)."""

        self._sweeper.maybe_sweep(now)
        schedules = self._schedules.list_all()
        if staff_id is None:
            return schedules
        locked = self._history.locked_schedule_ids(staff_id)
        return [s for s in schedules if s.schedule_id not in locked]

    def present_students(
        self,
        class_date: date,
        *,
        staff_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
    ) -> Sequence[Student]:
        ids = self._attendance.present_student_ids(class_date, staff_id=staff_id, schedule_id=schedule_id)
        return self._students.get_many(sorted(ids))

    def attendance_dates(self) -> Sequence[date]:
        return self._attendance.distinct_dates()
