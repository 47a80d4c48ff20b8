from datetime import date, datetime, time, timezone

import pytest

from src.class_attendance.class_attendance.common.datetime_utils import to_instant
from src.class_attendance.class_attendance.core.enums import WindowState
from src.class_attendance.class_attendance.core.exceptions import TimingError
from src.class_attendance.class_attendance.schedules.model import Schedule
from src.class_attendance.class_attendance.schedules.window import ensure_submission_open, evaluate_window

from tests.fakes import ist

SCHEDULE = Schedule(1, date(2024, 3, 1), time(9, 0), time(10, 0))


def test_to_instant_applies_fixed_offset():
    instant = to_instant(date(2024, 3, 1), time(9, 0), 330)
    assert instant == datetime(2024, 3, 1, 3, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "now, expected",
    [
        (ist(2024, 3, 1, 8, 59), WindowState.UPCOMING),
        (ist(2024, 3, 1, 9, 0), WindowState.ACTIVE),
        (ist(2024, 3, 1, 9, 1), WindowState.ACTIVE),
        (ist(2024, 3, 1, 10, 0), WindowState.ACTIVE),
        (ist(2024, 3, 1, 10, 1), WindowState.EXPIRED),
    ],
)
def test_window_states_in_institution_time(now, expected):
    assert evaluate_window(SCHEDULE, now, offset_minutes=330) is expected


def test_window_ignores_callers_timezone():
    # 09:01 IST expressed in UTC is still inside the window.
    now = datetime(2024, 3, 1, 3, 31, tzinfo=timezone.utc)
    assert evaluate_window(SCHEDULE, now, offset_minutes=330) is WindowState.ACTIVE


def test_naive_now_is_read_as_institution_local():
    assert evaluate_window(SCHEDULE, datetime(2024, 3, 1, 8, 59), offset_minutes=330) is WindowState.UPCOMING


def test_submission_gate_messages():
    with pytest.raises(TimingError, match="after the start time"):
        ensure_submission_open(SCHEDULE, ist(2024, 3, 1, 8, 59), offset_minutes=330)
    with pytest.raises(TimingError, match="expired"):
        ensure_submission_open(SCHEDULE, ist(2024, 3, 1, 10, 1), offset_minutes=330)
    ensure_submission_open(SCHEDULE, ist(2024, 3, 1, 9, 1), offset_minutes=330)
