from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_GLOBAL_PIN, DEFAULT_SWEEP_COOLDOWN_SECONDS, DEFAULT_UTC_OFFSET_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import ReportService
from .roster.mysql_staff_repository import MySQLStaffRepository
from .roster.mysql_student_repository import MySQLStudentRepository
from .roster.repository import StaffRepository, StudentRepository
from .schedules.mysql_history_repository import MySQLHistoryRepository
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.reconciler import ScheduleReconciler
from .schedules.repository import HistoryRepository, ScheduleRepository
from .schedules.service import ScheduleService
from .schedules.sweeper import ExpirySweeper, SweepThrottle


@dataclass(frozen=True)
class Container:
    students_repo: StudentRepository
    staff_repo: StaffRepository
    schedules_repo: ScheduleRepository
    history_repo: HistoryRepository
    attendance_repo: AttendanceRepository

    reconciler: ScheduleReconciler
    sweeper: ExpirySweeper
    schedule_service: ScheduleService
    attendance_service: AttendanceService
    report_service: ReportService


def assemble(
    *,
    students_repo: StudentRepository,
    staff_repo: StaffRepository,
    schedules_repo: ScheduleRepository,
    history_repo: HistoryRepository,
    attendance_repo: AttendanceRepository,
    global_pin: str = DEFAULT_GLOBAL_PIN,
    offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES,
    sweep_cooldown_seconds: float = DEFAULT_SWEEP_COOLDOWN_SECONDS,
    clock: Callable[[], float] = time.monotonic,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""

    reconciler = ScheduleReconciler(schedules_repo, history_repo, staff_repo, attendance_repo)
    sweeper = ExpirySweeper(
        schedules_repo,
        history_repo,
        attendance_repo,
        students_repo,
        reconciler,
        throttle=SweepThrottle(sweep_cooldown_seconds, clock=clock),
        offset_minutes=offset_minutes,
    )
    schedule_service = ScheduleService(schedules_repo, history_repo, staff_repo, offset_minutes=offset_minutes)
    attendance_service = AttendanceService(
        attendance_repo,
        schedules_repo,
        history_repo,
        students_repo,
        staff_repo,
        reconciler,
        sweeper,
        global_pin=global_pin,
        offset_minutes=offset_minutes,
    )
    report_service = ReportService(attendance_repo, schedules_repo, history_repo, students_repo)

    return Container(
        students_repo=students_repo,
        staff_repo=staff_repo,
        schedules_repo=schedules_repo,
        history_repo=history_repo,
        attendance_repo=attendance_repo,
        reconciler=reconciler,
        sweeper=sweeper,
        schedule_service=schedule_service,
        attendance_service=attendance_service,
        report_service=report_service,
    )


def build_container(
    *,
    db_config: dict,
    global_pin: str = DEFAULT_GLOBAL_PIN,
    offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES,
    sweep_cooldown_seconds: float = DEFAULT_SWEEP_COOLDOWN_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble(
        students_repo=MySQLStudentRepository(conn),
        staff_repo=MySQLStaffRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        history_repo=MySQLHistoryRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        global_pin=global_pin,
        offset_minutes=offset_minutes,
        sweep_cooldown_seconds=sweep_cooldown_seconds,
    )
