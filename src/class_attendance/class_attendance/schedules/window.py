"""Time window evaluation for roll submission.

Schedule date/time fields are institution-local. Both the schedule window and
"now" are converted to absolute instants through the same fixed offset, so the
result does not depend on the server's own timezone.
"""

from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import as_instant, to_instant
from ..core.enums import WindowState
from ..core.exceptions import TimingError
from .model import Schedule

BEFORE_START_MESSAGE = "Attendance can only be taken after the start time."
EXPIRED_MESSAGE = "Attendance time has expired."


def window_bounds(schedule: Schedule, *, offset_minutes: int) -> tuple[datetime, datetime]:
    start = to_instant(schedule.class_date, schedule.start_time, offset_minutes)
    end = to_instant(schedule.class_date, schedule.end_time, offset_minutes)
    return start, end


def evaluate_window(schedule: Schedule, now: datetime, *, offset_minutes: int) -> WindowState:
    start, end = window_bounds(schedule, offset_minutes=offset_minutes)
    now = as_instant(now, offset_minutes)
    if now < start:
        return WindowState.UPCOMING
    if now > end:
        return WindowState.EXPIRED
    return WindowState.ACTIVE


def ensure_submission_open(schedule: Schedule, now: datetime, *, offset_minutes: int) -> None:
    state = evaluate_window(schedule, now, offset_minutes=offset_minutes)
    if state is WindowState.UPCOMING:
        raise TimingError(BEFORE_START_MESSAGE)
    if state is WindowState.EXPIRED:
        raise TimingError(EXPIRED_MESSAGE)
